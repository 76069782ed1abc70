"""
LibreOffice 컨버터: soffice --headless --convert-to.

HTML 변환 시 LibreOffice가 출력 옆에 이미지 파일을 따로 쓰는데,
이 파일들을 observer에 전달한다.
"""

import io
import logging
import subprocess
import tempfile
from pathlib import Path
from typing import BinaryIO

from src.converters.base import DocConverter
from src.domain.constants import get_mime_type
from src.domain.errors import ErrorCodes, ReportProcessingError
from src.domain.formats import DocFormat
from src.domain.schemas import ExtractedImage

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".bmp")

DEFAULT_TIMEOUT_SECONDS = 120.0


class LibreOfficeConverter(DocConverter):
    """
    LibreOffice headless 변환기.

    Usage:
        converter = LibreOfficeConverter(DocFormat.DOCX, DocFormat.PDF)
        pdf = converter.convert(DocFormat.PDF, docx_stream)
    """

    def __init__(
        self,
        source_format: DocFormat,
        target_format: DocFormat,
        soffice_path: str = "soffice",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        convert_filter: str | None = None,
    ):
        """
        Args:
            source_format: 입력 형식
            target_format: 출력 형식
            soffice_path: soffice 실행 파일
            timeout: 변환 제한 시간(초)
            convert_filter: --convert-to 값 (예: "pdf:writer_pdf_Export").
                None이면 target_format 값
        """
        super().__init__(source_format, target_format)
        self.soffice_path = soffice_path
        self.timeout = timeout
        self.convert_filter = convert_filter or target_format.value

    def convert(self, target_format: DocFormat, stream: BinaryIO) -> BinaryIO:
        """
        Raises:
            ReportProcessingError: CONVERSION_FAILED
        """
        if target_format != self.target_format:
            raise ReportProcessingError(
                ErrorCodes.CONVERSION_FAILED,
                converter=repr(self),
                error=f"cannot produce {target_format.value}",
            )

        with tempfile.TemporaryDirectory(prefix="docs-reporter-") as tmp:
            workdir = Path(tmp)
            source = workdir / f"source.{self.source_format.value}"
            source.write_bytes(stream.read())

            outdir = workdir / "out"
            outdir.mkdir()

            self._run(self._command(workdir, source, outdir))

            result = outdir / f"{source.stem}.{self.target_format.value}"
            if not result.exists():
                raise ReportProcessingError(
                    ErrorCodes.CONVERSION_FAILED,
                    converter=repr(self),
                    error="LibreOffice produced no output",
                )

            self._extract_images(outdir, result)
            return io.BytesIO(result.read_bytes())

    def _command(self, workdir: Path, source: Path, outdir: Path) -> list[str]:
        # 변환마다 별도 프로필: 동시 실행 시 프로필 락 충돌 방지
        profile = (workdir / "profile").as_uri()
        return [
            self.soffice_path,
            "--headless",
            "--norestore",
            f"-env:UserInstallation={profile}",
            "--convert-to",
            self.convert_filter,
            "--outdir",
            str(outdir),
            str(source),
        ]

    def _run(self, command: list[str]) -> None:
        logger.debug(f"Running {' '.join(command)}")
        try:
            subprocess.run(command, check=True, capture_output=True, timeout=self.timeout)
        except FileNotFoundError as e:
            raise ReportProcessingError(
                ErrorCodes.CONVERSION_FAILED,
                converter=repr(self),
                error=f"soffice not found: {self.soffice_path}",
            ) from e
        except subprocess.TimeoutExpired as e:
            raise ReportProcessingError(
                ErrorCodes.CONVERSION_FAILED,
                converter=repr(self),
                error=f"timed out after {self.timeout}s",
            ) from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
            raise ReportProcessingError(
                ErrorCodes.CONVERSION_FAILED,
                converter=repr(self),
                returncode=e.returncode,
                error=stderr,
            ) from e

    def _extract_images(self, outdir: Path, result: Path) -> None:
        for path in sorted(outdir.iterdir()):
            if path == result or path.suffix.lower() not in IMAGE_SUFFIXES:
                continue
            self.notify_image_extracted(
                ExtractedImage(
                    name=path.name,
                    data=path.read_bytes(),
                    content_type=get_mime_type(path.suffix),
                )
            )
