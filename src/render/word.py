"""
Word (DOCX) report: docxtpl 기반.

- placeholder: {{ model.title }}, {{ item.sku }} 등 (Jinja2 문법)
- 표 반복: {%tr for ... %} 또는 "@before-row{% for ... %}" 토큰
- ReportImage 값 → InlineImage로 삽입
"""

import io
from typing import Any, BinaryIO

from docx import Document
from docx.shared import Mm
from docxtpl import DocxTemplate, InlineImage
from jinja2 import Environment

from src.core.context import ReportContext
from src.domain.formats import DocFormat
from src.domain.schemas import ReportImage
from src.render.base import Report
from src.render.fields import TemplateFields, extract_fields
from src.render.metadata import FieldsMetadata


class TokenDocxTemplate(DocxTemplate):
    """반복 구간 토큰을 docxtpl 태그로 바꾼 뒤 patch하는 DocxTemplate."""

    def __init__(self, template_file: Any, fields_metadata: FieldsMetadata):
        super().__init__(template_file)
        self.fields_metadata = fields_metadata

    def patch_xml(self, src_xml: str) -> str:
        return super().patch_xml(self.fields_metadata.apply_tokens(src_xml))


class DocxReport(Report):
    """
    Word 문서 report.

    Usage:
        report = DocxReport(path.read_bytes(), name="invoice.docx")
        report.process(ReportContext({"model": invoice}), out)
    """

    format = DocFormat.DOCX

    def __init__(self, template_bytes: bytes, name: str = "template.docx"):
        super().__init__(template_bytes, name)
        # 형식 오류는 빌드 시점에 드러나도록 한 번 연다
        Document(io.BytesIO(template_bytes))

    def _new_template(self) -> TokenDocxTemplate:
        """렌더링마다 새 템플릿 (docxtpl은 렌더 시 문서를 변경함)."""
        return TokenDocxTemplate(io.BytesIO(self.template_bytes), self.fields_metadata)

    def extract_fields(self) -> TemplateFields:
        """본문 + 머리글/바닥글에서 필드 추출."""
        tpl = self._new_template()
        tpl.get_docx()

        xml = tpl.patch_xml(tpl.get_xml())
        for uri in (tpl.HEADER_URI, tpl.FOOTER_URI):
            for _, part in tpl.get_headers_footers(uri):
                xml += tpl.patch_xml(tpl.get_part_xml(part))

        return extract_fields(xml, Environment())

    def process(self, context: ReportContext, out: BinaryIO) -> None:
        tpl = self._new_template()
        tpl.render(context.to_dict(), jinja_env=self._environment(tpl), autoescape=True)
        tpl.save(out)

    def _environment(self, tpl: DocxTemplate) -> Environment:
        def finalize(value: Any) -> Any:
            # 값 없는 optional 필드는 빈 문자열
            if value is None:
                return ""
            if isinstance(value, ReportImage):
                return self._inline_image(tpl, value)
            return value

        return Environment(autoescape=True, finalize=finalize)

    def _inline_image(self, tpl: DocxTemplate, image: ReportImage) -> InlineImage:
        return InlineImage(
            tpl,
            io.BytesIO(image.data),
            width=Mm(image.width_mm) if image.width_mm else None,
            height=Mm(image.height_mm) if image.height_mm else None,
        )
