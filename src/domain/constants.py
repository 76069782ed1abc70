"""
Domain Constants: 리포트 템플릿 전역 상수.
"""

# =============================================================================
# Model Binding
# =============================================================================

# 템플릿에서 model을 참조하는 기본 이름: {{ model.title }}
DEFAULT_MODEL_NAME = "model"

# =============================================================================
# Repeating Section Tokens
# =============================================================================
# 표의 행/셀 반복 지시자 앞에 붙이는 토큰.
# 예: "@before-row{% for item in model.items %}" → docxtpl의 {%tr ... %}

DEFAULT_BEFORE_ROW_TOKEN = "@before-row"
DEFAULT_AFTER_ROW_TOKEN = "@after-row"
DEFAULT_BEFORE_TABLE_CELL_TOKEN = "@before-cell"
DEFAULT_AFTER_TABLE_CELL_TOKEN = "@after-cell"

# =============================================================================
# Process-wide Property
# =============================================================================
# xml.sax.make_parser()가 참조하는 환경 변수.
# 남아 있으면 docx/xlsx XML 파싱 드라이버가 바뀔 수 있어 초기화 시 제거한다.

DEFAULT_SAX_DRIVER_PROPERTY = "PY_SAX_PARSER"

# =============================================================================
# Output
# =============================================================================

MIME_TYPES = {
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "odt": "application/vnd.oasis.opendocument.text",
    "pdf": "application/pdf",
    "html": "text/html",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".bmp": "image/bmp",
}


def get_mime_type(key: str) -> str:
    """
    형식 값 또는 확장자에서 MIME 타입 추출.

    Args:
        key: "pdf" 같은 형식 값 또는 ".png" 같은 확장자

    Returns:
        MIME 타입 문자열 (알 수 없으면 octet-stream)
    """
    return MIME_TYPES.get(key.lower(), "application/octet-stream")
