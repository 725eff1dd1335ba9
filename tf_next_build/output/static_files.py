"""Static website archive writer.

This module handles:
- Buffering each static file from its stream
- Packing all files into one deflate-compressed zip
- Publishing the archive only after it was closed successfully

Entries use a fixed timestamp so identical inputs produce identical archives.
"""

from __future__ import annotations

import asyncio
import logging
import os
import zipfile
from collections.abc import Mapping
from pathlib import Path

from tf_next_build.types import FileFsRef

logger = logging.getLogger(__name__)

STATIC_FILES_ARCHIVE = "static-website-files.zip"

# Highest deflate level, smallest archive
COMPRESS_LEVEL = 9

# Earliest timestamp the zip format can store
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


def stream_to_buffer(file: FileFsRef) -> bytes:
    """Read a file's stream into memory.

    Args:
        file: File reference to read.

    Returns:
        Entire file content.
    """
    with file.to_stream() as stream:
        return stream.read()


def _zip_info(name: str, mode: int) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(name, date_time=ZIP_EPOCH)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = (0o100000 | (mode & 0o7777)) << 16
    return info


def _partial_path(output_file: Path) -> Path:
    return output_file.with_name(f".{output_file.name}.partial")


async def write_static_website_files(
    output_file: Path,
    files: Mapping[str, FileFsRef],
) -> int:
    """Pack the static website files into a single zip archive.

    Files are read one at a time, so memory use is bounded by the largest
    file. The read of the next file is started while the current one is
    being compressed. The archive is built under a hidden partial name and
    renamed to ``output_file`` once it is closed; if any read or write
    fails, the partial file is removed and the error is raised.

    Args:
        output_file: Destination of the archive.
        files: Files keyed by their path inside the archive.

    Returns:
        Size of the finished archive in bytes.
    """
    output_file.parent.mkdir(parents=True, exist_ok=True)
    partial = _partial_path(output_file)
    entries = list(files.items())

    def schedule_read(index: int) -> asyncio.Future[bytes] | None:
        if index >= len(entries):
            return None
        return asyncio.ensure_future(
            asyncio.to_thread(stream_to_buffer, entries[index][1])
        )

    pending: asyncio.Future[bytes] | None = None
    try:
        archive = await asyncio.to_thread(
            zipfile.ZipFile,
            partial,
            "w",
            zipfile.ZIP_DEFLATED,
            compresslevel=COMPRESS_LEVEL,
        )
        try:
            pending = schedule_read(0)
            for index, (name, file) in enumerate(entries):
                buf = await pending  # type: ignore[misc]
                pending = schedule_read(index + 1)
                await asyncio.to_thread(
                    archive.writestr,
                    _zip_info(name, file.mode),
                    buf,
                    compresslevel=COMPRESS_LEVEL,
                )
        except BaseException as e:
            try:
                await asyncio.to_thread(archive.close)
            except Exception:
                logger.debug(
                    "Closing %s after %r also failed", partial, e, exc_info=True
                )
            raise

        # Closing writes the central directory
        await asyncio.to_thread(archive.close)
    except BaseException:
        if pending is not None:
            if pending.done() and not pending.cancelled():
                # Retrieve a failed prefetch so only the first error surfaces
                pending.exception()
            else:
                pending.cancel()
        partial.unlink(missing_ok=True)
        raise

    os.replace(partial, output_file)

    total_bytes = output_file.stat().st_size
    logger.info("%d total bytes", total_bytes)
    logger.debug("Wrote %d static files to %s", len(entries), output_file)
    return total_bytes


__all__ = [
    "COMPRESS_LEVEL",
    "STATIC_FILES_ARCHIVE",
    "stream_to_buffer",
    "write_static_website_files",
]
