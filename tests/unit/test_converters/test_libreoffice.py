"""
test_libreoffice.py - LibreOfficeConverter 테스트

soffice는 실행하지 않는다. subprocess.run을 가짜로 바꿔
--outdir에 결과 파일을 쓰게 한다.
"""

import io
import subprocess
from pathlib import Path

import pytest

from src.converters.base import CollectingImageObserver
from src.converters.libreoffice import LibreOfficeConverter
from src.domain.errors import ErrorCodes, ReportProcessingError
from src.domain.formats import DocFormat


def _fake_soffice(outputs: dict[str, bytes], calls: list[list[str]]):
    """--outdir에 outputs를 쓰는 subprocess.run 대체."""

    def run(command, **kwargs):
        calls.append(command)
        outdir = Path(command[command.index("--outdir") + 1])
        for name, data in outputs.items():
            (outdir / name).write_bytes(data)
        return subprocess.CompletedProcess(command, 0, b"", b"")

    return run


class TestLibreOfficeConverter:
    """LibreOfficeConverter.convert 테스트."""

    def test_convert_to_pdf(self, monkeypatch):
        calls: list[list[str]] = []
        monkeypatch.setattr(
            subprocess, "run", _fake_soffice({"source.pdf": b"%PDF-1.7"}, calls)
        )
        converter = LibreOfficeConverter(DocFormat.DOCX, DocFormat.PDF, soffice_path="/opt/soffice")

        out = converter.convert(DocFormat.PDF, io.BytesIO(b"docx bytes"))

        assert out.read() == b"%PDF-1.7"
        command = calls[0]
        assert command[0] == "/opt/soffice"
        assert "--headless" in command
        assert command[command.index("--convert-to") + 1] == "pdf"
        assert command[-1].endswith("source.docx")
        assert any(arg.startswith("-env:UserInstallation=file:") for arg in command)

    def test_convert_filter(self, monkeypatch):
        calls: list[list[str]] = []
        monkeypatch.setattr(subprocess, "run", _fake_soffice({"source.pdf": b"pdf"}, calls))
        converter = LibreOfficeConverter(
            DocFormat.XLSX, DocFormat.PDF, convert_filter="pdf:calc_pdf_Export"
        )

        converter.convert(DocFormat.PDF, io.BytesIO(b"xlsx"))

        assert "pdf:calc_pdf_Export" in calls[0]

    def test_html_images_reported(self, monkeypatch):
        outputs = {
            "source.html": b"<html></html>",
            "source_html_1.png": b"png-data",
            "notes.txt": b"ignored",
        }
        monkeypatch.setattr(subprocess, "run", _fake_soffice(outputs, []))
        converter = LibreOfficeConverter(DocFormat.DOCX, DocFormat.HTML)
        observer = CollectingImageObserver()

        with converter.observing(observer):
            out = converter.convert(DocFormat.HTML, io.BytesIO(b"docx"))

        assert out.read() == b"<html></html>"
        assert [i.name for i in observer.images] == ["source_html_1.png"]
        assert observer.images[0].content_type == "image/png"
        assert observer.images[0].data == b"png-data"

    def test_wrong_target(self):
        converter = LibreOfficeConverter(DocFormat.DOCX, DocFormat.PDF)

        with pytest.raises(ReportProcessingError) as exc_info:
            converter.convert(DocFormat.HTML, io.BytesIO(b"docx"))

        assert exc_info.value.code == ErrorCodes.CONVERSION_FAILED

    def test_no_output(self, monkeypatch):
        monkeypatch.setattr(subprocess, "run", _fake_soffice({}, []))
        converter = LibreOfficeConverter(DocFormat.DOCX, DocFormat.PDF)

        with pytest.raises(ReportProcessingError) as exc_info:
            converter.convert(DocFormat.PDF, io.BytesIO(b"docx"))

        assert exc_info.value.code == ErrorCodes.CONVERSION_FAILED

    @pytest.mark.parametrize(
        "error",
        [
            FileNotFoundError("soffice"),
            subprocess.TimeoutExpired(cmd="soffice", timeout=1.0),
            subprocess.CalledProcessError(1, "soffice", stderr=b"Error: source file could not be loaded"),
        ],
    )
    def test_subprocess_failures(self, monkeypatch, error):
        def run(command, **kwargs):
            raise error

        monkeypatch.setattr(subprocess, "run", run)
        converter = LibreOfficeConverter(DocFormat.DOCX, DocFormat.PDF, timeout=1.0)

        with pytest.raises(ReportProcessingError) as exc_info:
            converter.convert(DocFormat.PDF, io.BytesIO(b"docx"))

        assert exc_info.value.code == ErrorCodes.CONVERSION_FAILED
        assert exc_info.value.__cause__ is error
