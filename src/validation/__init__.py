"""Validation layer: 템플릿 필드 ↔ model 구조 검증."""

from .fields import ReportFieldsValidator

__all__ = [
    "ReportFieldsValidator",
]
