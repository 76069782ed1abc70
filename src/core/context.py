"""
Rendering context: 템플릿 엔진이 읽는 이름 → 값 매핑.

- ReportContext: 렌더링 1회분 데이터 ({"model": <model>})
- ContextFactory: report 별 context 생성 (교체 가능)
- ThreadContextProvider: 스레드마다 context 하나 (lazy 생성, 명시적 해제)
"""

import logging
import threading
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from src.render.base import Report

logger = logging.getLogger(__name__)


class ReportContext(Mapping[str, Any]):
    """
    렌더링 컨텍스트.

    Mapping으로 동작하므로 dict 자리에 그대로 넘길 수 있다.
    """

    def __init__(self, values: dict[str, Any] | None = None):
        self._values: dict[str, Any] = dict(values or {})

    def put(self, name: str, value: Any) -> None:
        self._values[name] = value

    def remove(self, name: str) -> Any:
        return self._values.pop(name, None)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ReportContext({sorted(self._values)!r})"


class ContextFactory:
    """기본 factory: report가 제공하는 빈 context를 사용."""

    def build_context(self, report: "Report") -> ReportContext:
        return report.create_context()


class ThreadContextProvider:
    """
    스레드별 ReportContext 제공자.

    - 스레드당 하나, 첫 접근 시 생성
    - 다른 스레드와 공유하지 않음 (락 불필요)
    - 워커 종료 시 release()로 해제
    """

    def __init__(self, report: "Report", factory: ContextFactory):
        self._report = report
        self._factory = factory
        self._local = threading.local()

    def get(self) -> ReportContext:
        context: ReportContext | None = getattr(self._local, "context", None)
        if context is None:
            context = self._factory.build_context(self._report)
            self._local.context = context
            logger.debug(
                f"Built rendering context for thread {threading.current_thread().name}"
            )
        return context

    def release(self) -> None:
        """현재 스레드의 context 해제 (없으면 무시)."""
        if hasattr(self._local, "context"):
            del self._local.context
