"""Build workspace lifecycle.

In download mode the build runs in a fresh temporary directory that is
erased afterwards (unless the build cache is kept). In local mode the
build runs in the caller's directory, which is never erased.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

WORKSPACE_PREFIX = "tf-next-build-"


class WorkspaceError(Exception):
    """Raised when a workspace or output directory cannot be prepared."""

    def __init__(self, message: str, code: str = "workspace_error") -> None:
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class Workspace:
    """Directory the build reads from and writes intermediate output to.

    Attributes:
        path: Workspace directory.
        temporary: Whether the workspace was created for this run.
    """

    path: Path
    temporary: bool


def ensure_output_dir(output_dir: Path) -> Path:
    """Create the output directory if needed.

    Raises:
        WorkspaceError: If the directory cannot be created.
    """
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WorkspaceError(f"Cannot create output directory {output_dir}: {e}") from e
    return output_dir


def release_workspace(workspace: Workspace, delete_build_cache: bool) -> None:
    """Erase a temporary workspace if cleanup was requested.

    Caller-provided workspaces are left alone.
    """
    if not workspace.temporary:
        return
    if not delete_build_cache:
        logger.info("Keeping build workspace %s", workspace.path)
        return

    shutil.rmtree(workspace.path, ignore_errors=True)
    logger.debug("Removed build workspace %s", workspace.path)


@asynccontextmanager
async def acquire_workspace(
    cwd: Path,
    skip_download: bool = False,
    delete_build_cache: bool = True,
    tmp_dir: Path | None = None,
) -> AsyncIterator[Workspace]:
    """Acquire the build workspace for the duration of a run.

    Args:
        cwd: Caller's working directory, used as workspace in local mode.
        skip_download: Use ``cwd`` instead of a temporary directory.
        delete_build_cache: Erase the temporary workspace on exit.
        tmp_dir: Parent directory for the temporary workspace.

    Yields:
        The acquired Workspace.

    Raises:
        WorkspaceError: If the workspace cannot be created.
    """
    if skip_download:
        workspace = Workspace(path=cwd, temporary=False)
    else:
        try:
            path = await asyncio.to_thread(
                tempfile.mkdtemp,
                prefix=WORKSPACE_PREFIX,
                dir=str(tmp_dir) if tmp_dir else None,
            )
        except OSError as e:
            raise WorkspaceError(f"Cannot create temporary workspace: {e}") from e
        workspace = Workspace(path=Path(path), temporary=True)

    logger.debug(
        "Using %s workspace %s",
        "temporary" if workspace.temporary else "local",
        workspace.path,
    )

    try:
        yield workspace
    finally:
        await asyncio.to_thread(release_workspace, workspace, delete_build_cache)


__all__ = [
    "WORKSPACE_PREFIX",
    "Workspace",
    "WorkspaceError",
    "acquire_workspace",
    "ensure_output_dir",
    "release_workspace",
]
