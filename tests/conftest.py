"""
Pytest fixtures for report template tests.

템플릿은 python-docx / openpyxl로 tmp_path에 즉석 생성한다.
"""

import io
import struct
import zlib
from decimal import Decimal
from pathlib import Path
from typing import BinaryIO

import pytest
from docx import Document
from openpyxl import Workbook

from src.converters.base import DocConverter
from src.domain.formats import DocFormat
from src.domain.schemas import ExtractedImage
from tests.models import Customer, Invoice, LineItem

# =============================================================================
# Model Fixtures
# =============================================================================

@pytest.fixture
def sample_invoice() -> Invoice:
    """정상 케이스 invoice."""
    return Invoice(
        number="INV-001",
        customer=Customer(name="홍길동", email="hong@example.com"),
        items=[
            LineItem(sku="A-100", quantity=2, price=Decimal("12.50")),
            LineItem(sku="B-200", quantity=1, price=Decimal("3.00")),
        ],
    )


# =============================================================================
# Template Fixtures
# =============================================================================

@pytest.fixture
def invoice_docx(tmp_path: Path) -> Path:
    """
    invoice DOCX 템플릿.

    - 본문: {{ model.number }}, {{ model.customer.name }}
    - 표: "@before-row" / "@after-row" 토큰으로 model.items 행 반복
    """
    template_path = tmp_path / "invoice.docx"

    doc = Document()
    doc.add_heading("Invoice {{ model.number }}", 0)
    doc.add_paragraph("Customer: {{ model.customer.name }}")

    table = doc.add_table(rows=4, cols=3)
    header = table.rows[0].cells
    header[0].text = "SKU"
    header[1].text = "Qty"
    header[2].text = "Price"
    table.rows[1].cells[0].text = "@before-row{% for item in model.items %}"
    row = table.rows[2].cells
    row[0].text = "{{ item.sku }}"
    row[1].text = "{{ item.quantity }}"
    row[2].text = "{{ item.price }}"
    table.rows[3].cells[0].text = "@after-row{% endfor %}"

    doc.save(template_path)
    return template_path


@pytest.fixture
def invoice_xlsx(tmp_path: Path) -> Path:
    """
    invoice XLSX 템플릿.

    - B1: {{ model.number }}
    - B2: {{ model.customer.name }}
    - B3: {{ model.items | length }} (숫자 유지)
    - B4: "Total: {{ model.total }}" (문자열)
    """
    template_path = tmp_path / "invoice.xlsx"

    wb = Workbook()
    ws = wb.active
    ws.title = "Invoice"
    ws["A1"] = "번호"
    ws["B1"] = "{{ model.number }}"
    ws["A2"] = "고객"
    ws["B2"] = "{{ model.customer.name }}"
    ws["A3"] = "품목 수"
    ws["B3"] = "{{ model.items | length }}"
    ws["B4"] = "Total: {{ model.total }}"
    wb.save(template_path)

    return template_path


@pytest.fixture
def make_docx(tmp_path: Path):
    """문단 목록으로 DOCX 템플릿 생성."""

    def _make(*paragraphs: str, name: str = "template.docx") -> Path:
        path = tmp_path / name
        doc = Document()
        for text in paragraphs:
            doc.add_paragraph(text)
        doc.save(path)
        return path

    return _make


# =============================================================================
# Image Fixtures
# =============================================================================

def _png_chunk(kind: bytes, data: bytes) -> bytes:
    crc = zlib.crc32(kind + data) & 0xFFFFFFFF
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", crc)


@pytest.fixture
def png_bytes() -> bytes:
    """1x1 RGB PNG."""
    ihdr = struct.pack(">IIBBBBB", 1, 1, 8, 2, 0, 0, 0)
    raw = b"\x00\xff\x00\x00"
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", ihdr)
        + _png_chunk(b"IDAT", zlib.compress(raw))
        + _png_chunk(b"IEND", b"")
    )


# =============================================================================
# Converter Fixtures
# =============================================================================

class FakeConverter(DocConverter):
    """
    입력 앞에 표식을 붙여 돌려주는 컨버터.

    - calls: convert 호출 기록
    - images: 변환 중 observer에 전달할 이미지
    - fail: True면 변환 중 RuntimeError
    """

    def __init__(
        self,
        source_format: DocFormat,
        target_format: DocFormat,
        images: list[ExtractedImage] | None = None,
        fail: bool = False,
    ):
        super().__init__(source_format, target_format)
        self.calls: list[DocFormat] = []
        self.images = images or []
        self.fail = fail
        self.observers_during_convert: list[int] = []

    def convert(self, target_format: DocFormat, stream: BinaryIO) -> BinaryIO:
        self.calls.append(target_format)
        self.observers_during_convert.append(len(self.observers))
        for image in self.images:
            self.notify_image_extracted(image)
        if self.fail:
            raise RuntimeError("converter exploded")
        marker = f"{target_format.value}:".encode()
        return io.BytesIO(marker + stream.read())


@pytest.fixture
def fake_converter_cls() -> type[FakeConverter]:
    return FakeConverter
