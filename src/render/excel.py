"""
Excel (XLSX) report: openpyxl + Jinja2.

셀 값에 Jinja2 식을 쓴다:
- "{{ model.total }}"           → 셀 전체가 식 하나면 값 타입 유지 (숫자, 날짜)
- "No. {{ model.invoice_no }}"  → 문자열로 렌더링
반복 구간(행 복제)은 지원하지 않는다. 셀 안의 {% for %}는 가능.
"""

import io
import re
from collections.abc import Iterator
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, BinaryIO

from jinja2 import Environment, Undefined
from openpyxl import load_workbook
from openpyxl.cell.cell import Cell
from openpyxl.workbook import Workbook

from src.core.context import ReportContext
from src.domain.formats import DocFormat
from src.render.base import Report
from src.render.fields import TemplateFields, extract_fields

TEMPLATE_MARKERS = ("{{", "{%")

# 셀 전체가 {{ expr }} 하나인 경우
SINGLE_EXPRESSION = re.compile(r"^\s*\{\{(?P<expr>.+?)\}\}\s*$", re.DOTALL)

CELL_VALUE_TYPES = (str, int, float, bool, date, datetime, time)


class XlsxReport(Report):
    """
    Excel 문서 report.

    Usage:
        report = XlsxReport(path.read_bytes(), name="summary.xlsx")
        report.process(ReportContext({"model": summary}), out)
    """

    format = DocFormat.XLSX

    def __init__(self, template_bytes: bytes, name: str = "template.xlsx"):
        super().__init__(template_bytes, name)
        self._load()

    def _load(self) -> Workbook:
        return load_workbook(io.BytesIO(self.template_bytes))

    def extract_fields(self) -> TemplateFields:
        env = Environment()
        fields = TemplateFields()
        for cell in _template_cells(self._load()):
            fields.merge(extract_fields(cell.value, env))
        return fields

    def process(self, context: ReportContext, out: BinaryIO) -> None:
        wb = self._load()
        env = Environment()
        values = context.to_dict()

        for cell in _template_cells(wb):
            cell.value = self._render_cell(env, cell.value, values)

        wb.save(out)

    def _render_cell(self, env: Environment, source: str, values: dict[str, Any]) -> Any:
        match = SINGLE_EXPRESSION.match(source)
        if match and "{{" not in match["expr"] and "}}" not in match["expr"]:
            value = env.compile_expression(match["expr"].strip(), undefined_to_none=False)(values)
            return self._convert_value(value)
        return env.from_string(source).render(values)

    def _convert_value(self, value: Any) -> Any:
        """값 변환 (Decimal → float 등)."""
        if value is None or isinstance(value, Undefined):
            return None
        if isinstance(value, Decimal):
            # Excel은 Decimal을 직접 지원하지 않음
            return float(value)
        if isinstance(value, CELL_VALUE_TYPES):
            return value
        return str(value)


def _template_cells(wb: Workbook) -> Iterator[Cell]:
    for ws in wb.worksheets:
        for row in ws.iter_rows():
            for cell in row:
                value = cell.value
                if isinstance(value, str) and any(m in value for m in TEMPLATE_MARKERS):
                    yield cell
