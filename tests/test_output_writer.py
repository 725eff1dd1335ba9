"""Tests for output/writer.py module."""

import asyncio
import json
import zipfile
from unittest.mock import patch

import pytest

from tf_next_build.output.manifest import CONFIG_FILENAME, ManifestWriteError
from tf_next_build.output.writer import ArtifactWriteError, OutputProps, write_output
from tf_next_build.types import FileFsRef, Lambda


@pytest.fixture
def props(tmp_path) -> OutputProps:
    """Output props with one lambda and two static files."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "about.html").write_text("about")
    (src / "main.js").write_text("main")
    return OutputProps(
        build_id="build-1",
        routes=[{"src": "/old", "dest": "/new"}],
        output_dir=tmp_path / ".next-tf",
        lambdas={
            "index": Lambda(handler="index.handler", runtime="node", zip_buffer=b"PK")
        },
        static_website_files={
            "about.html": FileFsRef(fs_path=src / "about.html"),
            "_next/static/main.js": FileFsRef(fs_path=src / "main.js"),
        },
    )


class TestWriteOutput:
    """Tests for write_output function."""

    def test_writes_everything(self, props):
        """Should write lambdas, the static archive and config.json."""
        config = asyncio.run(write_output(props))

        out = props.output_dir
        assert (out / "lambdas" / "index.zip").read_bytes() == b"PK"
        with zipfile.ZipFile(out / "static-website-files.zip") as archive:
            assert sorted(archive.namelist()) == ["_next/static/main.js", "about.html"]

        data = json.loads((out / CONFIG_FILENAME).read_text())
        assert data == json.loads(config.to_json())
        assert data["staticRoutes"] == ["/about.html"]

    def test_static_failure_skips_config(self, props, tmp_path):
        """A failed static archive should prevent config.json."""
        props.static_website_files["broken.html"] = FileFsRef(
            fs_path=tmp_path / "missing.html"
        )

        with pytest.raises(ArtifactWriteError) as exc_info:
            asyncio.run(write_output(props))

        assert exc_info.value.code == "artifact_write_error"
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)
        assert not (props.output_dir / CONFIG_FILENAME).exists()
        assert not (props.output_dir / "static-website-files.zip").exists()

    def test_lambda_failure_skips_config(self, props):
        """A failed lambda write should prevent config.json."""
        with patch(
            "tf_next_build.output.lambdas._write_lambda",
            side_effect=OSError("disk full"),
        ):
            with pytest.raises(ArtifactWriteError):
                asyncio.run(write_output(props))

        assert not (props.output_dir / CONFIG_FILENAME).exists()

    def test_manifest_failure_propagates(self, props):
        """A failed config write should surface as ManifestWriteError."""
        with patch(
            "tf_next_build.output.manifest._write_text",
            side_effect=OSError("read-only"),
        ):
            with pytest.raises(ManifestWriteError):
                asyncio.run(write_output(props))

        # Artifacts written before the failure are not rolled back
        assert (props.output_dir / "lambdas" / "index.zip").exists()

    def test_non_os_error_is_wrapped(self, props):
        """Any error from an archive write should become ArtifactWriteError."""
        with patch(
            "tf_next_build.output.static_files.stream_to_buffer",
            side_effect=ValueError("decode error mid-stream"),
        ):
            with pytest.raises(ArtifactWriteError) as exc_info:
                asyncio.run(write_output(props))

        assert exc_info.value.code == "artifact_write_error"
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert "decode error mid-stream" in str(exc_info.value)
        assert not (props.output_dir / CONFIG_FILENAME).exists()

    def test_callback_runs_between_artifacts_and_config(self, props):
        """on_artifacts_written should see the archives but no config.json."""
        seen = []

        def on_artifacts_written():
            out = props.output_dir
            seen.append(
                (
                    (out / "lambdas" / "index.zip").exists(),
                    (out / "static-website-files.zip").exists(),
                    (out / CONFIG_FILENAME).exists(),
                )
            )

        asyncio.run(write_output(props, on_artifacts_written=on_artifacts_written))

        assert seen == [(True, True, False)]
        assert (props.output_dir / CONFIG_FILENAME).exists()

    def test_callback_skipped_on_artifact_failure(self, props):
        """on_artifacts_written should not run when an archive fails."""
        seen = []

        with patch(
            "tf_next_build.output.lambdas._write_lambda",
            side_effect=OSError("disk full"),
        ):
            with pytest.raises(ArtifactWriteError):
                asyncio.run(
                    write_output(props, on_artifacts_written=lambda: seen.append(1))
                )

        assert seen == []
