"""
Core layer: 설정, 리소스, 렌더링 컨텍스트.
"""

from .config import ReportTemplateConfig, import_object, load_config
from .context import ContextFactory, ReportContext, ThreadContextProvider
from .resources import ResourceLoader, TemplateResource

__all__ = [
    # config
    "ReportTemplateConfig",
    "load_config",
    "import_object",
    # context
    "ReportContext",
    "ContextFactory",
    "ThreadContextProvider",
    # resources
    "ResourceLoader",
    "TemplateResource",
]
