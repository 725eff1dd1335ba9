"""Runner for the external framework build.

This module handles:
- Resolving the build callable from an import string
- Invoking it with the enumerated source files and workspace
- Validating its result
- Reading the build ID the framework leaves in the workspace

The build itself is opaque: any callable accepting the keyword arguments
below and returning a BuildResult (or an awaitable of one) will do.
"""

from __future__ import annotations

import asyncio
import importlib
import inspect
import logging
from collections.abc import Awaitable
from pathlib import Path
from typing import Any, Protocol

from tf_next_build.types import BuildResult, FileFsRef

logger = logging.getLogger(__name__)

ENTRYPOINT = "package.json"
BUILD_ID_PATH = Path(".next") / "BUILD_ID"


class BuilderLoadError(Exception):
    """Raised when the build callable cannot be resolved."""

    def __init__(self, message: str, code: str = "builder_load_error") -> None:
        super().__init__(message)
        self.code = code


class BuildInvocationError(Exception):
    """Raised when the external build fails or returns unusable output."""

    def __init__(self, message: str, code: str = "build_error") -> None:
        super().__init__(message)
        self.code = code


class Builder(Protocol):
    """Signature of the external build."""

    def __call__(
        self,
        *,
        files: dict[str, FileFsRef],
        work_path: Path,
        entrypoint: str,
        config: dict[str, Any],
        meta: dict[str, Any],
    ) -> BuildResult | Awaitable[BuildResult]: ...


def load_builder(import_string: str) -> Builder:
    """Resolve a build callable from ``package.module:attribute``.

    Args:
        import_string: Import string; the attribute part may be dotted.

    Returns:
        The build callable.

    Raises:
        BuilderLoadError: If the string is malformed, the import fails or
            the target is not callable.
    """
    module_name, _, attr_path = import_string.partition(":")
    if not module_name or not attr_path:
        raise BuilderLoadError(
            f"Builder must be given as 'module:attribute', got '{import_string}'"
        )

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise BuilderLoadError(f"Cannot import builder module '{module_name}': {e}") from e

    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError as e:
            raise BuilderLoadError(
                f"Builder '{import_string}' not found: {e}"
            ) from e

    if not callable(target):
        raise BuilderLoadError(f"Builder '{import_string}' is not callable")

    return target  # type: ignore[no-any-return]


async def run_builder(
    builder: Builder,
    files: dict[str, FileFsRef],
    work_path: Path,
    skip_download: bool = False,
    entrypoint: str = ENTRYPOINT,
) -> BuildResult:
    """Invoke the external build.

    Coroutine builders are awaited; plain callables run in a worker thread.

    Args:
        builder: Build callable.
        files: Source files keyed by relative path.
        work_path: Workspace the build runs in.
        skip_download: Passed to the build as metadata.
        entrypoint: Entry point file of the project.

    Returns:
        BuildResult from the build.

    Raises:
        BuildInvocationError: If the build raises or returns something
            other than a BuildResult.
    """
    kwargs: dict[str, Any] = {
        "files": files,
        "work_path": work_path,
        "entrypoint": entrypoint,
        "config": {},
        "meta": {"is_dev": False, "skip_download": skip_download},
    }

    logger.info("Running build in %s (%d source files)", work_path, len(files))

    try:
        if inspect.iscoroutinefunction(builder):
            result = await builder(**kwargs)
        else:
            result = await asyncio.to_thread(builder, **kwargs)
            if inspect.isawaitable(result):
                result = await result
    except Exception as e:
        raise BuildInvocationError(f"Build failed: {e}") from e

    if not isinstance(result, BuildResult):
        raise BuildInvocationError(
            f"Build returned {type(result).__name__}, expected BuildResult",
            code="invalid_build_result",
        )

    logger.info(
        "Build finished with %d routes and %d outputs",
        len(result.routes),
        len(result.output),
    )
    return result


async def read_build_id(work_path: Path) -> str:
    """Read the build ID the framework wrote into the workspace.

    The file content is returned as-is.

    Raises:
        BuildInvocationError: If the file cannot be read.
    """
    build_id_file = work_path / BUILD_ID_PATH
    try:
        return await asyncio.to_thread(build_id_file.read_text, encoding="utf-8")
    except OSError as e:
        raise BuildInvocationError(
            f"Cannot read build ID from {build_id_file}: {e}",
            code="build_id_missing",
        ) from e


__all__ = [
    "BUILD_ID_PATH",
    "ENTRYPOINT",
    "BuildInvocationError",
    "Builder",
    "BuilderLoadError",
    "load_builder",
    "read_build_id",
    "run_builder",
]
