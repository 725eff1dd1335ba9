"""Write the complete build output.

Lambda archives and the static website archive are written concurrently;
config.json is written only after both have finished.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from tf_next_build.output.lambdas import write_lambdas
from tf_next_build.output.manifest import ConfigOutput, generate_config, write_config
from tf_next_build.output.static_files import write_static_website_files
from tf_next_build.types import FileFsRef, Lambda, Route

logger = logging.getLogger(__name__)


class ArtifactWriteError(Exception):
    """Raised when a lambda or static archive cannot be written."""

    def __init__(self, message: str, code: str = "artifact_write_error") -> None:
        super().__init__(message)
        self.code = code


@dataclass
class OutputProps:
    """Everything needed to write a build's output."""

    build_id: str
    routes: list[Route]
    output_dir: Path
    lambdas: dict[str, Lambda] = field(default_factory=dict)
    static_website_files: dict[str, FileFsRef] = field(default_factory=dict)


async def write_artifacts(props: OutputProps, config: ConfigOutput) -> None:
    """Write lambda archives and the static website archive.

    Both writes run to completion before an error is raised, so nothing
    still reads the build workspace afterwards.

    Raises:
        ArtifactWriteError: If any archive cannot be written.
    """
    results = await asyncio.gather(
        write_lambdas(props.output_dir, props.lambdas),
        write_static_website_files(
            props.output_dir / config.static_files_archive,
            props.static_website_files,
        ),
        return_exceptions=True,
    )

    for result in results:
        if isinstance(result, Exception):
            raise ArtifactWriteError(
                f"Failed to write build artifacts: {result}"
            ) from result
        if isinstance(result, BaseException):
            raise result


async def write_output(
    props: OutputProps,
    on_artifacts_written: Callable[[], None] | None = None,
) -> ConfigOutput:
    """Write all artifacts, then config.json.

    Args:
        props: Build output to write.
        on_artifacts_written: Called once every archive is on disk, before
            config.json is written.

    Returns:
        The written config.

    Raises:
        ArtifactWriteError: If an archive cannot be written. config.json is
            not written in that case.
        ManifestWriteError: If config.json cannot be written.
    """
    config = generate_config(
        build_id=props.build_id,
        routes=props.routes,
        lambdas=props.lambdas,
        static_website_files=props.static_website_files,
        output_dir=props.output_dir,
    )

    await write_artifacts(props, config)
    if on_artifacts_written is not None:
        on_artifacts_written()

    await write_config(config, props.output_dir)
    return config


__all__ = ["ArtifactWriteError", "OutputProps", "write_artifacts", "write_output"]
