"""Write lambda packages to the output directory."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from pathlib import Path

from tf_next_build.types import Lambda

logger = logging.getLogger(__name__)

LAMBDAS_DIR = "lambdas"


def lambda_archive_path(output_dir: Path, key: str) -> Path:
    """Return the archive path of a lambda, ``<output_dir>/lambdas/<key>.zip``."""
    return output_dir / LAMBDAS_DIR / f"{key}.zip"


def _write_lambda(path: Path, zip_buffer: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(zip_buffer)


async def write_lambdas(
    output_dir: Path,
    lambdas: Mapping[str, Lambda],
) -> dict[str, Path]:
    """Write every lambda's pre-built zip to its own file.

    The payload is written as-is. All writes are started together and the
    call fails if any one of them fails.

    Args:
        output_dir: Build output directory.
        lambdas: Lambdas keyed by their output path.

    Returns:
        Mapping of lambda key to the written archive path.
    """
    paths = {key: lambda_archive_path(output_dir, key) for key in lambdas}

    await asyncio.gather(
        *(
            asyncio.to_thread(_write_lambda, paths[key], lambda_.zip_buffer)
            for key, lambda_ in lambdas.items()
        )
    )

    for key, path in paths.items():
        logger.debug("Wrote lambda %s to %s", key, path)
    logger.info("Wrote %d lambdas to %s", len(paths), output_dir / LAMBDAS_DIR)
    return paths


__all__ = ["LAMBDAS_DIR", "lambda_archive_path", "write_lambdas"]
