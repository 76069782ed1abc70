"""
Report factory: TemplateResource → Report.
"""

import logging

from src.core.resources import TemplateResource
from src.domain.errors import ErrorCodes, ReportConfigError
from src.domain.formats import DocFormat, get_format
from src.render.base import Report
from src.render.excel import XlsxReport
from src.render.word import DocxReport

logger = logging.getLogger(__name__)

REPORT_TYPES: dict[DocFormat, type[Report]] = {
    DocFormat.DOCX: DocxReport,
    DocFormat.XLSX: XlsxReport,
}


class DocReportFactory:
    """
    형식별 Report 구현 선택.

    report_types로 형식 → Report 클래스 매핑을 교체할 수 있다.
    """

    def __init__(self, report_types: dict[DocFormat, type[Report]] | None = None):
        self.report_types = dict(REPORT_TYPES if report_types is None else report_types)

    def supports(self, doc_format: DocFormat) -> bool:
        return doc_format in self.report_types

    def build_report(self, resource: TemplateResource) -> Report:
        """
        리소스에서 Report 생성.

        Raises:
            ReportConfigError: UNSUPPORTED_TEMPLATE_FORMAT, TEMPLATE_NOT_FOUND, INVALID_TEMPLATE
        """
        doc_format = get_format(resource.filename)
        report_cls = self.report_types.get(doc_format)
        if report_cls is None:
            raise ReportConfigError(
                ErrorCodes.UNSUPPORTED_TEMPLATE_FORMAT,
                template=resource.location,
                format=doc_format.value,
            )

        try:
            template_bytes = resource.read_bytes()
        except OSError as e:
            raise ReportConfigError(
                ErrorCodes.TEMPLATE_NOT_FOUND,
                template=resource.location,
                error=str(e),
            ) from e

        try:
            report = report_cls(template_bytes, name=resource.filename)
        except Exception as e:
            raise ReportConfigError(
                ErrorCodes.INVALID_TEMPLATE,
                template=resource.location,
                error=str(e),
            ) from e

        logger.info(f"Built {report!r} from {resource.location}")
        return report
