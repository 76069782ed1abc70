"""Domain layer: errors, formats and schemas."""

from .errors import (
    ErrorCodes,
    ReportConfigError,
    ReportError,
    ReportProcessingError,
    ReportValidationError,
)
from .formats import DocFormat, coerce_format, get_format
from .schemas import ExtractedImage, FieldError, FieldErrors, ReportImage

__all__ = [
    "ErrorCodes",
    "ReportError",
    "ReportConfigError",
    "ReportProcessingError",
    "ReportValidationError",
    "DocFormat",
    "get_format",
    "coerce_format",
    "FieldError",
    "FieldErrors",
    "ReportImage",
    "ExtractedImage",
]
