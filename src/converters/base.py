"""
Document converter 추상 인터페이스.

- 컨버터는 (source_format, target_format) 한 쌍만 담당
- 변환 중 추출된 이미지는 등록된 observer에 전달
- observer 등록은 호출한 스레드에만 적용 (같은 컨버터로 동시에 변환해도 섞이지 않음)
- observing() 블록이 끝나면 해제 (예외가 나도 해제)
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Generator, Sequence
from contextlib import contextmanager
from typing import BinaryIO

from src.domain.errors import ErrorCodes, ReportConfigError
from src.domain.formats import DocFormat
from src.domain.schemas import ExtractedImage

logger = logging.getLogger(__name__)


# =============================================================================
# Image Extract Observer
# =============================================================================

class ImageExtractObserver(ABC):
    """변환 중 추출된 이미지를 받는 콜백."""

    @abstractmethod
    def on_image_extracted(self, image: ExtractedImage) -> None:
        ...


class CollectingImageObserver(ImageExtractObserver):
    """추출된 이미지를 리스트에 모은다."""

    def __init__(self) -> None:
        self.images: list[ExtractedImage] = []

    def on_image_extracted(self, image: ExtractedImage) -> None:
        self.images.append(image)


# =============================================================================
# Converter
# =============================================================================

class DocConverter(ABC):
    """
    문서 형식 변환기 베이스.

    Usage:
        with converter.observing(observer):
            out = converter.convert(DocFormat.PDF, rendered)
    """

    def __init__(self, source_format: DocFormat, target_format: DocFormat):
        self.source_format = source_format
        self.target_format = target_format
        # 스레드별 observer 목록
        self._local = threading.local()

    def accepts(self, source_format: DocFormat, target_format: DocFormat) -> bool:
        return self.source_format == source_format and self.target_format == target_format

    @abstractmethod
    def convert(self, target_format: DocFormat, stream: BinaryIO) -> BinaryIO:
        """
        stream (source_format 문서) → target_format 문서.

        Returns:
            처음 위치로 되감긴 출력 스트림
        """

    # =========================================================================
    # Observers
    # =========================================================================

    def _thread_observers(self) -> list[ImageExtractObserver]:
        observers: list[ImageExtractObserver] | None = getattr(self._local, "observers", None)
        if observers is None:
            observers = []
            self._local.observers = observers
        return observers

    def add_image_extract_observer(self, observer: ImageExtractObserver) -> None:
        """현재 스레드의 변환에만 observer 등록."""
        self._thread_observers().append(observer)

    def remove_image_extract_observer(self, observer: ImageExtractObserver) -> None:
        observers = self._thread_observers()
        if observer in observers:
            observers.remove(observer)

    @property
    def observers(self) -> list[ImageExtractObserver]:
        """현재 스레드에 등록된 observer."""
        return list(self._thread_observers())

    @contextmanager
    def observing(
        self, observer: ImageExtractObserver | None
    ) -> Generator["DocConverter", None, None]:
        """observer를 블록 동안만 등록. None이면 아무것도 하지 않음."""
        if observer is None:
            yield self
            return

        self.add_image_extract_observer(observer)
        try:
            yield self
        finally:
            self.remove_image_extract_observer(observer)

    def notify_image_extracted(self, image: ExtractedImage) -> None:
        """현재 스레드의 observer에게만 전달. convert()를 호출한 스레드에서 불러야 한다."""
        for observer in self.observers:
            observer.on_image_extracted(image)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}"
            f"({self.source_format.value}->{self.target_format.value})"
        )


def find_converter(
    converters: Sequence[DocConverter | None] | None,
    source_format: DocFormat,
    target_format: DocFormat,
) -> DocConverter:
    """
    (source, target)이 정확히 일치하는 첫 컨버터.

    Raises:
        ReportConfigError: NO_CONVERTER_FOUND
    """
    for converter in converters or []:
        if converter is not None and converter.accepts(source_format, target_format):
            logger.debug(f"Selected {converter!r}")
            return converter

    raise ReportConfigError(
        ErrorCodes.NO_CONVERTER_FOUND,
        source=source_format.value,
        target=target_format.value,
        registered=[repr(c) for c in converters or [] if c is not None],
    )
