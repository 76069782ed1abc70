"""
test_resources.py - ResourceLoader 테스트
"""

from pathlib import Path

import pytest

from src.core.resources import ResourceLoader


class TestResourceLoader:
    """위치 형식별 해석 테스트."""

    def test_relative_path_uses_base_dir(self, tmp_path: Path):
        (tmp_path / "a.docx").write_bytes(b"data")

        resource = ResourceLoader(tmp_path).get_resource("a.docx")

        assert resource.location == "a.docx"
        assert resource.filename == "a.docx"
        assert resource.exists()
        assert resource.read_bytes() == b"data"
        assert resource.get_path() == (tmp_path / "a.docx").resolve()

    def test_absolute_path_ignores_base_dir(self, tmp_path: Path):
        target = tmp_path / "b.xlsx"
        target.write_bytes(b"x")

        resource = ResourceLoader(Path("/elsewhere")).get_resource(str(target))

        assert resource.read_bytes() == b"x"

    def test_file_url(self, tmp_path: Path):
        target = tmp_path / "with space.docx"
        target.write_bytes(b"url")

        resource = ResourceLoader().get_resource(target.as_uri())

        assert resource.filename == "with space.docx"
        assert resource.read_bytes() == b"url"

    def test_package_resource(self):
        """package:<패키지>/<경로> → importlib.resources."""
        resource = ResourceLoader().get_resource("package:src.domain/formats.py")

        assert resource.filename == "formats.py"
        assert resource.exists()
        assert b"DocFormat" in resource.read_bytes()

    def test_missing_file_fails_on_read(self, tmp_path: Path):
        """조회는 성공, 읽을 때 OSError."""
        resource = ResourceLoader(tmp_path).get_resource("missing.docx")

        assert not resource.exists()
        with pytest.raises(OSError):
            resource.read_bytes()
