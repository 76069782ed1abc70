"""
Data schemas for report templates.

- FieldError / FieldErrors: 필드 검증 결과 (요청 단위로 반환, 공유 상태 아님)
- ReportImage: model에 넣어 DOCX 인라인 이미지로 렌더링
- ExtractedImage: 변환 중 추출된 이미지 (observer 전달용)
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class FieldError:
    """템플릿 필드 하나에 대한 검증 오류."""
    field: str
    code: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "code": self.code,
            "message": self.message,
        }


@dataclass
class FieldErrors:
    """
    검증 결과.

    object_name은 model 이름 (컨텍스트 키)과 동일하다.
    """
    object_name: str
    errors: list[FieldError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def fields(self) -> list[str]:
        """오류가 난 필드 이름 (중복 제거, 순서 유지)."""
        return list(dict.fromkeys(e.field for e in self.errors))

    def reject(self, field_name: str, code: str, message: str) -> None:
        self.errors.append(FieldError(field=field_name, code=code, message=message))

    def to_dict(self) -> dict[str, Any]:
        return {
            "object_name": self.object_name,
            "errors": [e.to_dict() for e in self.errors],
        }


@dataclass
class ReportImage:
    """
    DOCX 템플릿에 삽입할 이미지 값.

    Usage:
        @dataclass
        class Invoice:
            logo: ReportImage

        # template: {{ model.logo }}
    """
    data: bytes
    width_mm: float | None = None
    height_mm: float | None = None
    name: str = "image"


@dataclass
class ExtractedImage:
    """변환 과정에서 추출된 이미지."""
    name: str
    data: bytes
    content_type: str = "application/octet-stream"
