"""
Report 추상 인터페이스.

템플릿 엔진 하나를 감싸는 객체:
- 템플릿이 참조하는 필드 추출
- context 생성
- context + 템플릿 → 출력 스트림
"""

from abc import ABC, abstractmethod
from typing import BinaryIO

from src.core.context import ReportContext
from src.domain.formats import DocFormat
from src.render.fields import TemplateFields
from src.render.metadata import FieldsMetadata


class Report(ABC):
    """템플릿 엔진 어댑터 베이스."""

    format: DocFormat = DocFormat.UNSUPPORTED

    def __init__(self, template_bytes: bytes, name: str = "template"):
        """
        Args:
            template_bytes: 템플릿 파일 내용
            name: 로그/에러 표시용 이름
        """
        self.template_bytes = template_bytes
        self.name = name
        self.fields_metadata = FieldsMetadata()

    def set_fields_metadata(self, metadata: FieldsMetadata) -> None:
        self.fields_metadata = metadata

    def create_context(self) -> ReportContext:
        return ReportContext()

    @abstractmethod
    def extract_fields(self) -> TemplateFields:
        """템플릿이 참조하는 필드 목록."""

    @abstractmethod
    def process(self, context: ReportContext, out: BinaryIO) -> None:
        """context를 템플릿에 채워 out에 기록."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"
