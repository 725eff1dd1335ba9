"""Shared type definitions for tf_next_build.

This module contains the dataclasses, enums and type aliases exchanged
between the external build, the output writers and the orchestrator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, ClassVar, Union

Route = dict[str, Any]


class OutputKind(str, Enum):
    """Kind tag of an entry in the build output map."""

    LAMBDA = "Lambda"
    FILE_FS_REF = "FileFsRef"
    FILE_BLOB = "FileBlob"


class BuildState(str, Enum):
    """State of a build command run."""

    IDLE = "idle"
    WORKSPACE_READY = "workspace_ready"
    BUILT = "built"
    CLASSIFIED = "classified"
    ARTIFACTS_WRITTEN = "artifacts_written"
    MANIFEST_WRITTEN = "manifest_written"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class Lambda:
    """A pre-packaged compute unit produced by the build.

    Attributes:
        handler: Entry point handler identifier (e.g. ``index.handler``).
        runtime: Runtime identifier (e.g. ``nodejs12.x``).
        zip_buffer: The packaged code, already zipped by the build.
    """

    type: ClassVar[str] = OutputKind.LAMBDA.value

    handler: str
    runtime: str
    zip_buffer: bytes = field(repr=False)


@dataclass(frozen=True)
class FileFsRef:
    """A build output file that lives on disk."""

    type: ClassVar[str] = OutputKind.FILE_FS_REF.value

    fs_path: Path
    mode: int = 0o644

    def to_stream(self) -> BinaryIO:
        """Open the referenced file for reading."""
        return Path(self.fs_path).open("rb")


@dataclass(frozen=True)
class FileBlob:
    """A build output file held in memory. Not packaged into the bundle."""

    type: ClassVar[str] = OutputKind.FILE_BLOB.value

    data: bytes = field(repr=False)
    mode: int = 0o644


@dataclass(frozen=True)
class UnknownOutput:
    """An output entry of a kind this package does not know about."""

    type: str
    payload: Any = None


BuildOutputEntry = Union[Lambda, FileFsRef, FileBlob, UnknownOutput]


@dataclass
class BuildResult:
    """Result returned by the external build.

    Attributes:
        routes: Ordered routing rules for the proxy.
        output: Build outputs keyed by their path, tagged by kind.
    """

    routes: list[Route] = field(default_factory=list)
    output: dict[str, BuildOutputEntry] = field(default_factory=dict)


__all__ = [
    "BuildOutputEntry",
    "BuildResult",
    "BuildState",
    "FileBlob",
    "FileFsRef",
    "Lambda",
    "OutputKind",
    "Route",
    "UnknownOutput",
]
