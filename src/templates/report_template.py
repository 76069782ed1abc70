"""
Report template: 템플릿 1개 + model 타입 1개를 묶은 리포트 생성기.

흐름:
    initialize() 1회
    → generate_report() 요청마다: 검증 → model 주입 → 렌더 → (형식 변환)

동시성:
- 필드 검증: 인스턴스 단위 락
- 렌더: RENDER_LOCK (프로세스 전체, 모든 템플릿 인스턴스 공유)
- 렌더링 context: 스레드마다 하나, 락 없음

전역 부작용:
- initialize()는 sax_driver_property 이름의 환경 변수를 제거한다
  (기본 PY_SAX_PARSER, None이면 건너뜀)
"""

import io
import logging
import os
import threading
from typing import Any, BinaryIO, cast

from src.converters.base import DocConverter, ImageExtractObserver, find_converter
from src.core.config import ReportTemplateConfig
from src.core.context import ContextFactory, ReportContext, ThreadContextProvider
from src.core.resources import ResourceLoader, TemplateResource
from src.domain.constants import DEFAULT_MODEL_NAME, DEFAULT_SAX_DRIVER_PROPERTY
from src.domain.errors import (
    ErrorCodes,
    ReportConfigError,
    ReportError,
    ReportProcessingError,
    ReportValidationError,
)
from src.domain.formats import DocFormat, coerce_format, get_format
from src.domain.schemas import FieldErrors
from src.render.base import Report
from src.render.factory import DocReportFactory
from src.render.fields import TemplateFields
from src.render.metadata import FieldsMetadata, MetadataFillerChain
from src.validation.fields import ReportFieldsValidator

logger = logging.getLogger(__name__)

# 템플릿 엔진의 render 호출은 context가 달라도 동시 실행에 안전하지 않다
RENDER_LOCK = threading.Lock()


class DocReportTemplate:
    """
    문서 리포트 템플릿.

    Usage:
        template = DocReportTemplate(
            "templates/invoice.docx",
            model_type=Invoice,
            converters=[LibreOfficeConverter(DocFormat.DOCX, DocFormat.PDF)],
            metadata_filler_chain=MetadataFillerChain(),
        )
        template.initialize()
        pdf = template.generate_report(DocFormat.PDF, invoice)
    """

    render_lock = RENDER_LOCK

    def __init__(
        self,
        template_path: str,
        model_type: type | None = None,
        model_name: str = DEFAULT_MODEL_NAME,
        iterator_names: dict[str, type] | None = None,
        *,
        report_factory: DocReportFactory | None = None,
        context_factory: ContextFactory | None = None,
        converters: list[DocConverter] | None = None,
        metadata_filler_chain: MetadataFillerChain | None = None,
        resource_loader: ResourceLoader | None = None,
        metadata: FieldsMetadata | None = None,
        sax_driver_property: str | None = DEFAULT_SAX_DRIVER_PROPERTY,
    ):
        """
        Args:
            template_path: 템플릿 위치 (resource_loader가 해석)
            model_type: 렌더링할 model 클래스
            model_name: 템플릿에서 model을 부르는 이름
            iterator_names: 반복 변수 이름 → 원소 클래스
            report_factory: 형식별 Report 생성
            context_factory: 스레드별 context 생성
            converters: 형식 변환기 목록 (앞쪽 우선)
            metadata_filler_chain: 메타데이터 채우기 (선택)
            resource_loader: 위치 → 리소스
            metadata: 반복 구간 토큰 등
            sax_driver_property: 초기화 시 제거할 환경 변수 이름 (None이면 건너뜀)
        """
        self.template_path = template_path
        self.model_type = model_type
        self.model_name = model_name
        self.iterator_names = dict(iterator_names or {})

        self.report_factory = report_factory or DocReportFactory()
        self.context_factory = context_factory or ContextFactory()
        self.converters = converters
        self.metadata_filler_chain = metadata_filler_chain
        self.resource_loader = resource_loader or ResourceLoader()
        self.metadata = metadata or FieldsMetadata()
        self.sax_driver_property = sax_driver_property

        self._resource: TemplateResource | None = None
        self._template_format: DocFormat | None = None
        self._report: Report | None = None
        self._contexts: ThreadContextProvider | None = None
        self._validator: ReportFieldsValidator | None = None
        self._fields: TemplateFields | None = None
        self._validate_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: ReportTemplateConfig, **collaborators: Any) -> "DocReportTemplate":
        """
        설정으로 템플릿 구성 (initialize는 호출하지 않음).

        Args:
            config: ReportTemplateConfig
            **collaborators: report_factory, converters 등 생성자 키워드 인자
        """
        collaborators.setdefault("resource_loader", ResourceLoader(config.base_dir))
        metadata = FieldsMetadata(
            before_row_token=config.tokens["before_row"],
            after_row_token=config.tokens["after_row"],
            before_table_cell_token=config.tokens["before_table_cell"],
            after_table_cell_token=config.tokens["after_table_cell"],
        )
        return cls(
            config.template_path,
            model_type=config.model_type,
            model_name=config.model_name,
            iterator_names=config.iterator_names,
            metadata=metadata,
            sax_driver_property=config.sax_driver_property,
            **collaborators,
        )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def initialized(self) -> bool:
        return self._report is not None

    @property
    def template_format(self) -> DocFormat:
        self._require_initialized()
        return cast(DocFormat, self._template_format)

    @property
    def report(self) -> Report:
        self._require_initialized()
        return cast(Report, self._report)

    def set_tokens(
        self,
        before_row: str | None = None,
        after_row: str | None = None,
        before_table_cell: str | None = None,
        after_table_cell: str | None = None,
    ) -> None:
        """
        반복 구간 토큰 변경 (initialize 전에만).

        Raises:
            ReportConfigError: ALREADY_INITIALIZED
        """
        if self.initialized:
            raise ReportConfigError(
                ErrorCodes.ALREADY_INITIALIZED,
                template=self.template_path,
                error="tokens can only be changed before initialize()",
            )

        if before_row is not None:
            self.metadata.before_row_token = before_row
        if after_row is not None:
            self.metadata.after_row_token = after_row
        if before_table_cell is not None:
            self.metadata.before_table_cell_token = before_table_cell
        if after_table_cell is not None:
            self.metadata.after_table_cell_token = after_table_cell

    # =========================================================================
    # Initialize
    # =========================================================================

    def initialize(self) -> None:
        """
        템플릿 로드 + 검증기 구성. 두 번째 호출부터는 아무것도 하지 않음.

        Raises:
            ReportConfigError: UNSUPPORTED_TEMPLATE_FORMAT, MODEL_TYPE_NOT_SET,
                TEMPLATE_NOT_FOUND, INVALID_TEMPLATE
        """
        if self.initialized:
            return

        resource = self.resource_loader.get_resource(self.template_path)
        template_format = get_format(resource.filename)

        if not self.report_factory.supports(template_format):
            raise ReportConfigError(
                ErrorCodes.UNSUPPORTED_TEMPLATE_FORMAT,
                template=self.template_path,
                format=template_format.value,
            )

        if self.model_type is None:
            raise ReportConfigError(
                ErrorCodes.MODEL_TYPE_NOT_SET,
                template=self.template_path,
            )

        report = self.report_factory.build_report(resource)

        if self.metadata_filler_chain is not None:
            self.metadata_filler_chain.fill_metadata(
                self.metadata, self.model_type, self.model_name, self.iterator_names
            )
        report.set_fields_metadata(self.metadata)

        self.clear_sax_driver_property()

        self._validator = ReportFieldsValidator(
            self.model_type,
            self.model_name,
            self.iterator_names,
            self.metadata,
        )
        self._contexts = ThreadContextProvider(report, self.context_factory)
        self._resource = resource
        self._template_format = template_format
        self._report = report

        logger.info(
            f"Initialized report template {self.template_path} "
            f"({template_format.value}, model={self.model_type.__name__} as '{self.model_name}')"
        )

    def clear_sax_driver_property(self) -> None:
        """설정된 환경 변수 제거 (프로세스 전역 부작용)."""
        name = self.sax_driver_property
        if name and name in os.environ:
            logger.warning(
                f"Clearing process-wide {name}={os.environ[name]!r} before loading templates"
            )
            del os.environ[name]

    # =========================================================================
    # Context
    # =========================================================================

    def get_context(self) -> ReportContext:
        """현재 스레드의 렌더링 context (첫 접근 시 생성)."""
        self._require_initialized()
        return cast(ThreadContextProvider, self._contexts).get()

    def release_context(self) -> None:
        """현재 스레드의 context 해제. 워커 스레드 종료 전에 호출."""
        if self._contexts is not None:
            self._contexts.release()

    # =========================================================================
    # Validation
    # =========================================================================

    def validate(self, model: Any) -> FieldErrors:
        """
        model 타입 확인 + 템플릿 필드 검증.

        Returns:
            FieldErrors (오류 없음)

        Raises:
            ReportProcessingError: MODEL_TYPE_MISMATCH, FIELD_EXTRACTION_FAILED
            ReportValidationError: INVALID_REPORT_FIELDS (field_errors 포함)
        """
        self._require_initialized()
        self._check_model(model)
        return self._validate_fields()

    def _validate_fields(self) -> FieldErrors:
        validator = cast(ReportFieldsValidator, self._validator)

        with self._validate_lock:
            fields = self._template_fields()
            errors = validator.validate(fields, FieldErrors(object_name=self.model_name))

        if errors.has_errors:
            logger.debug(f"Invalid report fields in {self.template_path}: {errors.fields}")
            raise ReportValidationError(
                ErrorCodes.INVALID_REPORT_FIELDS,
                errors,
                template=self.template_path,
            )
        return errors

    def _template_fields(self) -> TemplateFields:
        """템플릿 필드 (첫 추출 후 캐시). _validate_lock 안에서 호출."""
        if self._fields is None:
            try:
                self._fields = self.report.extract_fields()
            except Exception as e:
                raise ReportProcessingError(
                    ErrorCodes.FIELD_EXTRACTION_FAILED,
                    template=self.template_path,
                    error=str(e),
                ) from e
        return self._fields

    def _check_model(self, model: Any) -> None:
        model_type = cast(type, self.model_type)
        if not isinstance(model, model_type):
            raise ReportProcessingError(
                ErrorCodes.MODEL_TYPE_MISMATCH,
                expected=model_type.__name__,
                actual=type(model).__name__,
            )

    # =========================================================================
    # Generate
    # =========================================================================

    def generate_report(
        self,
        target_format: DocFormat | str,
        model: Any,
        observer: ImageExtractObserver | None = None,
    ) -> BinaryIO:
        """
        리포트 생성.

        Args:
            target_format: 출력 형식 (템플릿 형식과 다르면 컨버터 사용)
            model: model_type 인스턴스
            observer: 변환 중 추출 이미지 수신 (변환하는 동안만 등록)

        Returns:
            처음 위치로 되감긴 BytesIO

        Raises:
            ReportProcessingError: UNSUPPORTED_TARGET_FORMAT, MODEL_TYPE_MISMATCH,
                FIELD_EXTRACTION_FAILED, RENDER_FAILED, CONVERSION_FAILED
            ReportValidationError: INVALID_REPORT_FIELDS
            ReportConfigError: NOT_INITIALIZED, NO_CONVERTER_FOUND
        """
        doc_format = coerce_format(target_format)
        if doc_format == DocFormat.UNSUPPORTED:
            raise ReportProcessingError(
                ErrorCodes.UNSUPPORTED_TARGET_FORMAT,
                format=str(target_format),
            )

        self._require_initialized()
        self._check_model(model)

        try:
            self._validate_fields()

            out = self._render(model)

            if doc_format != self._template_format:
                out = self._convert(doc_format, out, observer)

        except ReportError:
            raise
        except Exception as e:
            raise ReportProcessingError(
                ErrorCodes.RENDER_FAILED,
                template=self.template_path,
                target=doc_format.value,
                error=str(e),
            ) from e

        out.seek(0)
        return out

    def _render(self, model: Any) -> BinaryIO:
        context = self.get_context()
        context.put(self.model_name, model)
        out = io.BytesIO()
        try:
            with self.render_lock:
                self.report.process(context, out)
        finally:
            # 스레드에 남는 context가 model을 붙잡지 않도록
            context.remove(self.model_name)

        out.seek(0)
        return out

    def _convert(
        self,
        target_format: DocFormat,
        rendered: BinaryIO,
        observer: ImageExtractObserver | None,
    ) -> BinaryIO:
        converter = self.find_converter(target_format)
        with converter.observing(observer):
            result = converter.convert(target_format, rendered)
        logger.debug(f"Converted {self.template_path} with {converter!r}")
        return result

    def find_converter(self, target_format: DocFormat) -> DocConverter:
        """
        Raises:
            ReportConfigError: NO_CONVERTER_FOUND
        """
        return find_converter(self.converters, self.template_format, target_format)

    # =========================================================================
    # Template Path
    # =========================================================================

    def resolve_template_path(self) -> str:
        """
        템플릿 파일의 절대 경로 (표시용).

        Raises:
            ReportConfigError: TEMPLATE_PATH_UNAVAILABLE
        """
        self._require_initialized()
        resource = cast(TemplateResource, self._resource)
        try:
            return str(resource.get_path())
        except OSError as e:
            logger.error(
                f"Failed to resolve template path for {self.template_path}: {e}",
                exc_info=True,
            )
            raise ReportConfigError(
                ErrorCodes.TEMPLATE_PATH_UNAVAILABLE,
                template=self.template_path,
            ) from e

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _require_initialized(self) -> None:
        if not self.initialized:
            raise ReportConfigError(
                ErrorCodes.NOT_INITIALIZED,
                template=self.template_path,
            )
