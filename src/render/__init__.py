"""
Render layer: 템플릿 엔진 어댑터.

역할:
- 템플릿 + context → 문서 바이트
- docxtpl (Word), openpyxl + Jinja2 (Excel)
- 템플릿이 참조하는 필드 추출
"""

from .base import Report
from .excel import XlsxReport
from .factory import DocReportFactory
from .fields import TemplateField, TemplateFields, extract_fields
from .metadata import (
    CollectionFieldsFiller,
    FieldsMetadata,
    MetadataFiller,
    MetadataFillerChain,
)
from .word import DocxReport

__all__ = [
    "Report",
    "DocxReport",
    "XlsxReport",
    "DocReportFactory",
    "TemplateField",
    "TemplateFields",
    "extract_fields",
    "FieldsMetadata",
    "MetadataFiller",
    "MetadataFillerChain",
    "CollectionFieldsFiller",
]
