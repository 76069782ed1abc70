"""
Error definitions for report templates.

규칙:
- 조용한 실패 금지 → 코드가 붙은 ReportError 계열로 명시적 실패
- 설정 문제(초기화/컨버터 조회) → ReportConfigError
- 요청 단위 문제(검증/렌더/변환) → ReportProcessingError
"""

from typing import Any

from src.domain.schemas import FieldErrors


class ReportError(Exception):
    """
    리포트 템플릿 에러의 공통 베이스.

    Usage:
        raise ReportConfigError(ErrorCodes.MODEL_TYPE_NOT_SET, template="a.docx")
    """

    def __init__(self, code: str, **context: Any) -> None:
        self.code = code
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"[{self.code}] {ctx_str}" if ctx_str else f"[{self.code}]"

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            **self.context,
        }


class ReportConfigError(ReportError):
    """
    설정 오류 (fatal).

    초기화 또는 컨버터 조회 시점에 발생:
    - 지원하지 않는 템플릿 형식
    - model 타입 미설정
    - 일치하는 컨버터 없음
    """


class ReportProcessingError(ReportError):
    """요청 처리 중 오류 (호출자가 복구 가능). 원인은 __cause__로 연결."""


class ReportValidationError(ReportProcessingError):
    """
    템플릿 필드가 model 구조와 맞지 않음.

    field_errors에 수집된 전체 오류가 담긴다.
    """

    def __init__(self, code: str, field_errors: FieldErrors, **context: Any) -> None:
        self.field_errors = field_errors
        super().__init__(
            code,
            object_name=field_errors.object_name,
            fields=field_errors.fields,
            **context,
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["errors"] = [e.to_dict() for e in self.field_errors.errors]
        return data


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Config ===
    UNSUPPORTED_TEMPLATE_FORMAT = "UNSUPPORTED_TEMPLATE_FORMAT"
    MODEL_TYPE_NOT_SET = "MODEL_TYPE_NOT_SET"
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    INVALID_TEMPLATE = "INVALID_TEMPLATE"
    TEMPLATE_PATH_UNAVAILABLE = "TEMPLATE_PATH_UNAVAILABLE"
    NO_CONVERTER_FOUND = "NO_CONVERTER_FOUND"
    NOT_INITIALIZED = "NOT_INITIALIZED"
    ALREADY_INITIALIZED = "ALREADY_INITIALIZED"
    INVALID_CONFIG = "INVALID_CONFIG"

    # === Processing ===
    UNSUPPORTED_TARGET_FORMAT = "UNSUPPORTED_TARGET_FORMAT"
    MODEL_TYPE_MISMATCH = "MODEL_TYPE_MISMATCH"
    FIELD_EXTRACTION_FAILED = "FIELD_EXTRACTION_FAILED"
    RENDER_FAILED = "RENDER_FAILED"
    CONVERSION_FAILED = "CONVERSION_FAILED"

    # === Validation ===
    INVALID_REPORT_FIELDS = "INVALID_REPORT_FIELDS"

    # === Field error codes (FieldError.code) ===
    UNKNOWN_ROOT = "UNKNOWN_ROOT"
    MISSING_FIELD = "MISSING_FIELD"
    UNRESOLVED_ITERATOR = "UNRESOLVED_ITERATOR"
