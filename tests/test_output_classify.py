"""Tests for output/classify.py module."""

from pathlib import Path

from tf_next_build.output.classify import ClassifiedOutput, classify_output
from tf_next_build.types import FileBlob, FileFsRef, Lambda, UnknownOutput


def make_lambda(handler: str = "index.handler") -> Lambda:
    return Lambda(handler=handler, runtime="nodejs12.x", zip_buffer=b"zip")


class TestClassifyOutput:
    """Tests for classify_output function."""

    def test_empty_output(self):
        """Should return empty mappings for empty output."""
        result = classify_output({})
        assert isinstance(result, ClassifiedOutput)
        assert result.lambdas == {}
        assert result.static_website_files == {}

    def test_splits_by_kind(self):
        """Should put lambdas and on-disk files into separate mappings."""
        index = make_lambda()
        about = FileFsRef(fs_path=Path("/src/about.html"))
        output = {"index": index, "about.html": about}

        result = classify_output(output)

        assert result.lambdas == {"index": index}
        assert result.static_website_files == {"about.html": about}

    def test_ignores_other_kinds(self):
        """Should skip blobs and unknown kinds."""
        output = {
            "index": make_lambda(),
            "robots.txt": FileBlob(data=b"User-agent: *"),
            "edge": UnknownOutput(type="EdgeFunction"),
        }

        result = classify_output(output)

        assert list(result.lambdas) == ["index"]
        assert result.static_website_files == {}

    def test_partition_properties(self):
        """Results should be disjoint and cover every known entry."""
        output = {
            "index": make_lambda(),
            "api/users": make_lambda("api/users.handler"),
            "about.html": FileFsRef(fs_path=Path("/src/about.html")),
            "_next/static/chunk.js": FileFsRef(fs_path=Path("/src/chunk.js")),
            "blob": FileBlob(data=b""),
            "future": UnknownOutput(type="Prerender"),
        }

        result = classify_output(output)

        lambda_keys = set(result.lambdas)
        static_keys = set(result.static_website_files)
        assert lambda_keys.isdisjoint(static_keys)
        assert lambda_keys | static_keys <= set(output)
        for key, entry in output.items():
            if entry.type in ("Lambda", "FileFsRef"):
                assert (key in lambda_keys) != (key in static_keys)

    def test_keeps_order(self):
        """Should keep the input order in both mappings."""
        output = {
            "c.html": FileFsRef(fs_path=Path("/c")),
            "b": make_lambda(),
            "a.html": FileFsRef(fs_path=Path("/a")),
            "a": make_lambda(),
        }

        result = classify_output(output)

        assert list(result.static_website_files) == ["c.html", "a.html"]
        assert list(result.lambdas) == ["b", "a"]

    def test_does_not_modify_input(self):
        """Should leave the input mapping unchanged."""
        output = {"index": make_lambda(), "blob": FileBlob(data=b"")}
        before = dict(output)

        classify_output(output)

        assert output == before
