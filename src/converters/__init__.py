"""
Converters layer: 렌더링 결과의 형식 변환.

역할:
- (source, target) 형식 쌍으로 컨버터 선택
- 변환 중 추출된 이미지를 observer에 전달
"""

from .base import (
    CollectingImageObserver,
    DocConverter,
    ImageExtractObserver,
    find_converter,
)
from .libreoffice import LibreOfficeConverter

__all__ = [
    "DocConverter",
    "ImageExtractObserver",
    "CollectingImageObserver",
    "find_converter",
    "LibreOfficeConverter",
]
