"""
Configuration: default.yaml → ReportTemplateConfig.

예시 (default.yaml):

    report_template:
      template_path: templates/invoice.docx
      model: my_app.models:Invoice
      model_name: invoice
      iterators:
        item: my_app.models:LineItem
      tokens:
        before_row: "@before-row"
      sax_driver_property: PY_SAX_PARSER
"""

import importlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from src.domain.constants import (
    DEFAULT_AFTER_ROW_TOKEN,
    DEFAULT_AFTER_TABLE_CELL_TOKEN,
    DEFAULT_BEFORE_ROW_TOKEN,
    DEFAULT_BEFORE_TABLE_CELL_TOKEN,
    DEFAULT_MODEL_NAME,
    DEFAULT_SAX_DRIVER_PROPERTY,
)
from src.domain.errors import ErrorCodes, ReportConfigError

CONFIG_SECTION = "report_template"

TOKEN_KEYS = {
    "before_row": DEFAULT_BEFORE_ROW_TOKEN,
    "after_row": DEFAULT_AFTER_ROW_TOKEN,
    "before_table_cell": DEFAULT_BEFORE_TABLE_CELL_TOKEN,
    "after_table_cell": DEFAULT_AFTER_TABLE_CELL_TOKEN,
}


def load_config(config_path: Path | None = None) -> dict:
    """설정 파일 로드."""
    if config_path is None:
        # 프로젝트 루트의 default.yaml
        config_path = Path(__file__).parent.parent.parent / "default.yaml"

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data: dict[Any, Any] = yaml.safe_load(f) or {}
        return data


def import_object(reference: str) -> Any:
    """
    "package.module:Name" 형식의 참조를 import.

    Raises:
        ReportConfigError: INVALID_CONFIG
    """
    module_name, sep, attr_path = reference.partition(":")
    if not sep or not module_name or not attr_path:
        raise ReportConfigError(
            ErrorCodes.INVALID_CONFIG,
            error="reference must look like 'package.module:Name'",
            reference=reference,
        )

    try:
        obj: Any = importlib.import_module(module_name)
        for part in attr_path.split("."):
            obj = getattr(obj, part)
    except (ImportError, AttributeError) as e:
        raise ReportConfigError(
            ErrorCodes.INVALID_CONFIG,
            error=str(e),
            reference=reference,
        ) from e
    return obj


@dataclass
class ReportTemplateConfig:
    """리포트 템플릿 설정."""
    template_path: str
    model_type: type | None = None
    model_name: str = DEFAULT_MODEL_NAME
    iterator_names: dict[str, type] = field(default_factory=dict)
    tokens: dict[str, str] = field(default_factory=lambda: dict(TOKEN_KEYS))
    sax_driver_property: str | None = DEFAULT_SAX_DRIVER_PROPERTY
    base_dir: Path | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReportTemplateConfig":
        """
        설정 dict → ReportTemplateConfig.

        data는 파일 전체 또는 report_template 섹션 어느 쪽이든 된다.

        Raises:
            ReportConfigError: INVALID_CONFIG
        """
        section = data.get(CONFIG_SECTION, data) if isinstance(data, dict) else data
        if not isinstance(section, dict):
            raise ReportConfigError(
                ErrorCodes.INVALID_CONFIG,
                error=f"{CONFIG_SECTION} must be a mapping",
                section=type(section).__name__,
            )

        template_path = section.get("template_path")
        if not template_path:
            raise ReportConfigError(
                ErrorCodes.INVALID_CONFIG,
                error="template_path is required",
            )

        model = section.get("model")
        model_type = import_object(model) if isinstance(model, str) else model

        iterators = {
            name: import_object(ref) if isinstance(ref, str) else ref
            for name, ref in (section.get("iterators") or {}).items()
        }

        tokens = dict(TOKEN_KEYS)
        unknown = set(section.get("tokens") or {}) - set(TOKEN_KEYS)
        if unknown:
            raise ReportConfigError(
                ErrorCodes.INVALID_CONFIG,
                error="unknown token keys",
                keys=sorted(unknown),
            )
        tokens.update(section.get("tokens") or {})

        base_dir = section.get("base_dir")

        return cls(
            template_path=str(template_path),
            model_type=model_type,
            model_name=section.get("model_name", DEFAULT_MODEL_NAME),
            iterator_names=iterators,
            tokens=tokens,
            sax_driver_property=section.get(
                "sax_driver_property", DEFAULT_SAX_DRIVER_PROPERTY
            ),
            base_dir=Path(base_dir) if base_dir else None,
        )

    @classmethod
    def from_file(cls, config_path: Path) -> "ReportTemplateConfig":
        config = cls.from_dict(load_config(config_path))
        if config.base_dir is None:
            config.base_dir = config_path.parent
        elif not config.base_dir.is_absolute():
            config.base_dir = config_path.parent / config.base_dir
        return config
