"""
Template resource loading.

지원 위치 형식:
- "templates/invoice.docx"        → base_dir 기준 상대 경로
- "/abs/path/invoice.docx"        → 절대 경로
- "file:///abs/path/invoice.docx" → file URL
- "package:my_app.templates/invoice.docx" → importlib.resources (패키지 내장)

리소스 조회 자체는 실패하지 않는다. 존재 여부는 읽을 때 드러난다.
"""

from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from urllib.parse import unquote, urlparse

FILE_PREFIX = "file:"
PACKAGE_PREFIX = "package:"


@dataclass(frozen=True)
class TemplateResource:
    """
    해석된 템플릿 리소스.

    location은 설정에 적힌 원래 문자열, target은 실제 읽을 대상.
    """
    location: str
    target: Path | Traversable

    @property
    def filename(self) -> str:
        return self.target.name

    def exists(self) -> bool:
        return self.target.is_file()

    def read_bytes(self) -> bytes:
        """
        리소스 내용 읽기.

        Raises:
            OSError: 파일이 없거나 읽을 수 없음
        """
        return self.target.read_bytes()

    def get_path(self) -> Path:
        """
        파일시스템 경로 반환.

        Raises:
            OSError: 파일시스템에 있지 않은 리소스 (zip 패키지 등)
        """
        if isinstance(self.target, Path):
            return self.target.resolve()
        raise FileNotFoundError(
            f"Resource {self.location!r} is not available on the filesystem"
        )


class ResourceLoader:
    """
    위치 문자열 → TemplateResource.

    Usage:
        loader = ResourceLoader(Path("/srv/reports"))
        resource = loader.get_resource("templates/invoice.docx")
    """

    def __init__(self, base_dir: Path | None = None):
        """
        Args:
            base_dir: 상대 경로 기준 디렉터리 (None이면 현재 작업 디렉터리)
        """
        self.base_dir = base_dir

    def get_resource(self, location: str) -> TemplateResource:
        if location.startswith(PACKAGE_PREFIX):
            return TemplateResource(location, self._package_target(location))

        if location.startswith(FILE_PREFIX):
            parsed = urlparse(location)
            return TemplateResource(location, Path(unquote(parsed.path)))

        path = Path(location).expanduser()
        if not path.is_absolute() and self.base_dir is not None:
            path = self.base_dir / path
        return TemplateResource(location, path)

    def _package_target(self, location: str) -> Traversable:
        spec = location[len(PACKAGE_PREFIX):]
        package, _, relative = spec.partition("/")
        target = resources.files(package)
        for part in relative.split("/"):
            if part:
                target = target.joinpath(part)
        return target
