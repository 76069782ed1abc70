"""
test_factory.py - DocReportFactory 테스트
"""

from pathlib import Path

import pytest

from src.core.resources import ResourceLoader
from src.domain.errors import ErrorCodes, ReportConfigError
from src.domain.formats import DocFormat
from src.render.excel import XlsxReport
from src.render.factory import DocReportFactory
from src.render.word import DocxReport


class TestDocReportFactory:
    """형식별 Report 생성 테스트."""

    def test_supports(self):
        factory = DocReportFactory()

        assert factory.supports(DocFormat.DOCX)
        assert factory.supports(DocFormat.XLSX)
        assert not factory.supports(DocFormat.PDF)
        assert not factory.supports(DocFormat.UNSUPPORTED)

    def test_build_docx(self, invoice_docx: Path):
        resource = ResourceLoader().get_resource(str(invoice_docx))

        report = DocReportFactory().build_report(resource)

        assert isinstance(report, DocxReport)
        assert report.name == "invoice.docx"
        assert report.format == DocFormat.DOCX

    def test_build_xlsx(self, invoice_xlsx: Path):
        resource = ResourceLoader().get_resource(str(invoice_xlsx))

        assert isinstance(DocReportFactory().build_report(resource), XlsxReport)

    def test_unsupported_format(self, tmp_path: Path):
        (tmp_path / "a.pdf").write_bytes(b"%PDF")
        resource = ResourceLoader(tmp_path).get_resource("a.pdf")

        with pytest.raises(ReportConfigError) as exc_info:
            DocReportFactory().build_report(resource)

        assert exc_info.value.code == ErrorCodes.UNSUPPORTED_TEMPLATE_FORMAT

    def test_missing_template(self, tmp_path: Path):
        resource = ResourceLoader(tmp_path).get_resource("missing.docx")

        with pytest.raises(ReportConfigError) as exc_info:
            DocReportFactory().build_report(resource)

        assert exc_info.value.code == ErrorCodes.TEMPLATE_NOT_FOUND
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_corrupt_template(self, tmp_path: Path):
        (tmp_path / "broken.xlsx").write_bytes(b"not a workbook")
        resource = ResourceLoader(tmp_path).get_resource("broken.xlsx")

        with pytest.raises(ReportConfigError) as exc_info:
            DocReportFactory().build_report(resource)

        assert exc_info.value.code == ErrorCodes.INVALID_TEMPLATE

    def test_custom_report_types(self, invoice_docx: Path):
        factory = DocReportFactory({DocFormat.XLSX: XlsxReport})
        resource = ResourceLoader().get_resource(str(invoice_docx))

        assert not factory.supports(DocFormat.DOCX)
        with pytest.raises(ReportConfigError):
            factory.build_report(resource)
