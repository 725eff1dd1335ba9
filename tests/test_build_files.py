"""Tests for build/files.py module."""

from tf_next_build.build.files import IGNORE_PATTERNS, get_files, is_ignored
from tf_next_build.types import FileFsRef


class TestIsIgnored:
    """Tests for is_ignored function."""

    def test_default_patterns(self):
        """Should ignore dependencies, build cache and output."""
        assert is_ignored("node_modules/react/index.js")
        assert is_ignored(".next/BUILD_ID")
        assert is_ignored(".next-tf/config.json")

    def test_keeps_sources(self):
        """Should keep regular project files."""
        assert not is_ignored("package.json")
        assert not is_ignored("pages/index.js")
        assert not is_ignored("lib/node_modules.js")
        assert not is_ignored(".nextrc")

    def test_default_list(self):
        """Default patterns should be the three build directories."""
        assert IGNORE_PATTERNS == ["node_modules/**", ".next/**", ".next-tf/**"]

    def test_directory_itself(self):
        """The ignored directory names themselves should be ignored."""
        assert is_ignored("node_modules")
        assert is_ignored(".next")
        assert not is_ignored(".next-tfrc")


class TestGetFiles:
    """Tests for get_files function."""

    def test_enumerates_files(self, tmp_path):
        """Should return file refs keyed by relative POSIX path."""
        (tmp_path / "pages").mkdir()
        (tmp_path / "package.json").write_text("{}")
        (tmp_path / "pages" / "index.js").write_text("export default 1")

        files = get_files(tmp_path)

        assert list(files) == ["package.json", "pages/index.js"]
        assert files["pages/index.js"] == FileFsRef(
            fs_path=tmp_path / "pages" / "index.js",
            mode=files["pages/index.js"].mode,
        )

    def test_skips_ignored_directories(self, tmp_path):
        """Should skip node_modules, .next and .next-tf."""
        for directory in ("node_modules/react", ".next", ".next-tf/lambdas"):
            (tmp_path / directory).mkdir(parents=True)
            (tmp_path / directory / "file.js").write_text("x")
        (tmp_path / "package.json").write_text("{}")

        assert list(get_files(tmp_path)) == ["package.json"]

    def test_records_mode(self, tmp_path):
        """Should record the file permission bits."""
        script = tmp_path / "run.sh"
        script.write_text("#!/bin/sh")
        script.chmod(0o755)

        assert get_files(tmp_path)["run.sh"].mode == 0o755

    def test_empty_directory(self, tmp_path):
        """Should return an empty mapping for an empty directory."""
        assert get_files(tmp_path) == {}
