"""
Document formats.

템플릿 파일명의 확장자로 형식을 판별한다.
알 수 없는 확장자는 UNSUPPORTED.
"""

import os
from enum import Enum


class DocFormat(str, Enum):
    """문서 형식."""
    DOCX = "docx"
    XLSX = "xlsx"
    ODT = "odt"
    PDF = "pdf"
    HTML = "html"
    UNSUPPORTED = "unsupported"


# 확장자 → 형식
EXTENSION_FORMATS = {
    ".docx": DocFormat.DOCX,
    ".xlsx": DocFormat.XLSX,
    ".odt": DocFormat.ODT,
    ".pdf": DocFormat.PDF,
    ".html": DocFormat.HTML,
    ".htm": DocFormat.HTML,
}


def get_format(filename: str | None) -> DocFormat:
    """
    파일명에서 DocFormat 추출.

    Args:
        filename: 파일명 (확장자 포함)

    Returns:
        DocFormat (알 수 없으면 UNSUPPORTED)
    """
    if not filename:
        return DocFormat.UNSUPPORTED

    ext = os.path.splitext(filename)[1].lower()
    return EXTENSION_FORMATS.get(ext, DocFormat.UNSUPPORTED)


def coerce_format(value: DocFormat | str | None) -> DocFormat:
    """문자열("pdf", "PDF")도 DocFormat으로 변환. 모르는 값은 UNSUPPORTED."""
    if isinstance(value, DocFormat):
        return value
    if not isinstance(value, str):
        return DocFormat.UNSUPPORTED
    try:
        return DocFormat(value.strip().lower().lstrip("."))
    except ValueError:
        return DocFormat.UNSUPPORTED
