"""Build service module.

This module provides the high-level build API:
- build_command(): run the external build and write its output
- run_build_command(): synchronous wrapper for the CLI

A run moves through the BuildState states in order; any error moves it to
FAILED. Errors are caught once, here, and returned as a BuildFailure.
config.json is only written when every artifact was written, so a failed
run never leaves a config that references missing archives. Archives
written before the failure are left in place.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from tf_next_build.build.files import get_files
from tf_next_build.build.runner import (
    Builder,
    BuilderLoadError,
    read_build_id,
    run_builder,
)
from tf_next_build.build.workspace import acquire_workspace, ensure_output_dir
from tf_next_build.config import Settings, get_settings
from tf_next_build.output.classify import classify_output
from tf_next_build.output.manifest import ConfigOutput
from tf_next_build.output.writer import OutputProps, write_output
from tf_next_build.types import BuildState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildSuccess:
    """A build whose artifacts and config.json were all written."""

    config: ConfigOutput
    output_dir: Path

    success = True
    exit_code = 0


@dataclass(frozen=True)
class BuildFailure:
    """A build that stopped before config.json was written.

    Attributes:
        message: Error message.
        code: Machine-readable error code.
        state: State the run was in when it failed.
    """

    message: str
    code: str
    state: BuildState

    success = False
    exit_code = 1


BuildCommandResult = Union[BuildSuccess, BuildFailure]


class _Run:
    """Tracks the state of one build command run."""

    def __init__(self) -> None:
        self.state = BuildState.IDLE

    def advance(self, state: BuildState) -> None:
        logger.debug("Build state: %s -> %s", self.state.value, state.value)
        self.state = state


async def build_command(
    settings: Settings | None = None,
    builder: Builder | None = None,
) -> BuildCommandResult:
    """Build the project and write its output.

    Steps:
    1. Acquire the workspace and ensure the output directory exists
    2. Run the external build on the project's source files
    3. Classify the output and read the build ID
    4. Write lambda archives and the static archive concurrently
    5. Write config.json

    The temporary workspace is released on every exit path.

    Args:
        settings: Build settings; loaded from the environment if None.
        builder: External build callable.

    Returns:
        BuildSuccess with the written config, or BuildFailure.
    """
    if settings is None:
        settings = get_settings()

    run = _Run()
    output_dir = settings.output_dir

    try:
        if builder is None:
            raise BuilderLoadError("No builder configured")

        async with acquire_workspace(
            cwd=settings.cwd,
            skip_download=settings.skip_download,
            delete_build_cache=settings.delete_build_cache,
            tmp_dir=settings.tmp_dir,
        ) as workspace:
            await asyncio.to_thread(ensure_output_dir, output_dir)
            run.advance(BuildState.WORKSPACE_READY)

            files = await asyncio.to_thread(get_files, settings.cwd)
            build_result = await run_builder(
                builder,
                files=files,
                work_path=workspace.path,
                skip_download=settings.skip_download,
            )
            run.advance(BuildState.BUILT)

            classified = classify_output(build_result.output)
            build_id = await read_build_id(workspace.path)
            run.advance(BuildState.CLASSIFIED)

            props = OutputProps(
                build_id=build_id,
                routes=build_result.routes,
                output_dir=output_dir,
                lambdas=classified.lambdas,
                static_website_files=classified.static_website_files,
            )
            config = await write_output(
                props,
                on_artifacts_written=lambda: run.advance(BuildState.ARTIFACTS_WRITTEN),
            )
            # Lambda payloads are on disk now
            del props, classified, build_result
            run.advance(BuildState.MANIFEST_WRITTEN)

            if settings.log_level == "verbose":
                logger.info("Routes:\n%s", json.dumps(config.routes, indent=2))

        run.advance(BuildState.DONE)
        logger.info("Build successful!")
        return BuildSuccess(config=config, output_dir=output_dir)

    except Exception as e:
        failed_in = run.state
        run.advance(BuildState.FAILED)
        logger.error("Build failed:", exc_info=True)
        return BuildFailure(
            message=str(e),
            code=getattr(e, "code", "unexpected_error"),
            state=failed_in,
        )


def run_build_command(
    settings: Settings | None = None,
    builder: Builder | None = None,
) -> BuildCommandResult:
    """Run build_command() in a new event loop."""
    return asyncio.run(build_command(settings=settings, builder=builder))


__all__ = [
    "BuildCommandResult",
    "BuildFailure",
    "BuildSuccess",
    "build_command",
    "run_build_command",
]
