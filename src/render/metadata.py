"""
Field metadata: 반복 구간 토큰 + 컬렉션 필드 정보.

토큰:
    표 셀에 "@before-row{% for item in model.items %}"처럼 쓰면
    docxtpl의 행 단위 태그 "{%tr for item in model.items %}"로 바뀐다.
    셀 단위는 "@before-cell" / "@after-cell" → "{%tc ... %}".

list_fields:
    컬렉션 경로 → 원소 타입. MetadataFillerChain이 model 타입에서 채운다.
    검증기가 반복 변수의 타입을 찾을 때 사용한다.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from src.core.introspect import element_type, resolvable_class, type_hints
from src.domain.constants import (
    DEFAULT_AFTER_ROW_TOKEN,
    DEFAULT_AFTER_TABLE_CELL_TOKEN,
    DEFAULT_BEFORE_ROW_TOKEN,
    DEFAULT_BEFORE_TABLE_CELL_TOKEN,
)

logger = logging.getLogger(__name__)

# 중첩 model 탐색 깊이 제한
MAX_FILL_DEPTH = 8


@dataclass
class FieldsMetadata:
    """템플릿 필드 메타데이터."""
    before_row_token: str = DEFAULT_BEFORE_ROW_TOKEN
    after_row_token: str = DEFAULT_AFTER_ROW_TOKEN
    before_table_cell_token: str = DEFAULT_BEFORE_TABLE_CELL_TOKEN
    after_table_cell_token: str = DEFAULT_AFTER_TABLE_CELL_TOKEN

    list_fields: dict[str, type] = field(default_factory=dict)

    def token_tags(self) -> list[tuple[str, str]]:
        """(토큰, docxtpl 태그) 목록."""
        return [
            (self.before_row_token, "tr"),
            (self.after_row_token, "tr"),
            (self.before_table_cell_token, "tc"),
            (self.after_table_cell_token, "tc"),
        ]

    def apply_tokens(self, xml: str) -> str:
        """
        토큰 + "{%" → "{%tr " / "{%tc ".

        토큰과 "{%" 사이의 run 경계 태그는 유지하고,
        "{"와 "%" 사이의 태그는 docxtpl과 같은 방식으로 제거한다.
        """
        for token, tag in self.token_tags():
            if not token:
                continue
            pattern = re.escape(token) + r"((?:<[^>]*>)*)\{(?:<[^>]*>)*%"
            xml = re.sub(pattern, lambda m, t=tag: f"{m.group(1)}{{%{t} ", xml)
        return xml


# =============================================================================
# Metadata Fillers
# =============================================================================

class MetadataFiller(ABC):
    """FieldsMetadata를 채우는 단계 하나."""

    @abstractmethod
    def fill(
        self,
        metadata: FieldsMetadata,
        model_type: type,
        model_name: str,
        iterator_names: dict[str, type],
    ) -> None:
        ...


class CollectionFieldsFiller(MetadataFiller):
    """
    model 어노테이션에서 컬렉션 필드를 찾아 list_fields에 등록.

    @dataclass
    class Invoice:
        items: list[LineItem]

    → list_fields["model.items"] = LineItem
      (LineItem 안의 컬렉션도 "model.items.<attr>"로 등록)
    """

    def fill(
        self,
        metadata: FieldsMetadata,
        model_type: type,
        model_name: str,
        iterator_names: dict[str, type],
    ) -> None:
        self._walk(metadata, model_type, model_name, depth=0, seen=frozenset())

    def _walk(
        self,
        metadata: FieldsMetadata,
        cls: type,
        prefix: str,
        depth: int,
        seen: frozenset[type],
    ) -> None:
        if depth > MAX_FILL_DEPTH or cls in seen:
            return
        seen = seen | {cls}

        for name, tp in type_hints(cls).items():
            path = f"{prefix}.{name}"
            elem = element_type(tp)
            if elem is not None:
                metadata.list_fields.setdefault(path, elem)
                self._walk(metadata, elem, path, depth + 1, seen)
                continue

            target = resolvable_class(tp)
            if target is not None:
                self._walk(metadata, target, path, depth + 1, seen)


class MetadataFillerChain:
    """
    filler를 순서대로 실행.

    Usage:
        chain = MetadataFillerChain([CollectionFieldsFiller()])
        chain.fill_metadata(metadata, Invoice, "model", {"item": LineItem})
    """

    def __init__(self, fillers: list[MetadataFiller] | None = None):
        self.fillers = list(fillers) if fillers is not None else [CollectionFieldsFiller()]

    def fill_metadata(
        self,
        metadata: FieldsMetadata,
        model_type: type,
        model_name: str,
        iterator_names: dict[str, type] | None = None,
    ) -> FieldsMetadata:
        for filler in self.fillers:
            filler.fill(metadata, model_type, model_name, dict(iterator_names or {}))
        logger.debug(
            f"Filled metadata for {model_name}: list_fields={sorted(metadata.list_fields)}"
        )
        return metadata
