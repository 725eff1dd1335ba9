"""Proxy config (manifest) generation.

This module handles:
- Describing each lambda's handler, runtime, archive and route
- Deriving the static routes the proxy has to serve
- Writing the config.json the Terraform module reads

The config is written last, so its presence marks a complete output
directory.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from tf_next_build.output.lambdas import lambda_archive_path
from tf_next_build.output.routes import normalize_route
from tf_next_build.output.static_files import STATIC_FILES_ARCHIVE
from tf_next_build.types import FileFsRef, Lambda, Route

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"

# Served by CloudFront straight from the static bucket, never by the proxy
STATIC_DIRECT_PREFIX = "_next/static/"


class ManifestWriteError(Exception):
    """Raised when config.json cannot be serialized or written."""

    def __init__(self, message: str, code: str = "manifest_write_error") -> None:
        super().__init__(message)
        self.code = code


class LambdaConfig(BaseModel):
    """Config entry for a single lambda.

    Attributes:
        handler: Entry point handler identifier.
        runtime: Runtime identifier.
        filename: Archive path relative to the output directory.
        route: Route served by the lambda.
    """

    model_config = ConfigDict(extra="forbid")

    handler: str
    runtime: str
    filename: str
    route: str


class ConfigOutput(BaseModel):
    """The config.json read by the proxy and the Terraform module."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    lambdas: dict[str, LambdaConfig] = Field(default_factory=dict)
    static_routes: list[str] = Field(default_factory=list, alias="staticRoutes")
    routes: list[Route] = Field(default_factory=list)
    build_id: str = Field(alias="buildId")
    static_files_archive: str = Field(
        default=STATIC_FILES_ARCHIVE, alias="staticFilesArchive"
    )

    def to_json(self) -> str:
        """Serialize with the camelCase keys, indented by two spaces."""
        return self.model_dump_json(by_alias=True, indent=2)


def static_routes(file_keys: Iterable[str]) -> list[str]:
    """Derive proxy routes from static file keys.

    Keys under ``_next/static/`` are dropped, the rest get a leading ``/``.
    Input order is kept.
    """
    return [f"/{key}" for key in file_keys if not key.startswith(STATIC_DIRECT_PREFIX)]


def generate_config(
    build_id: str,
    routes: list[Route],
    lambdas: Mapping[str, Lambda],
    static_website_files: Mapping[str, FileFsRef],
    output_dir: Path,
) -> ConfigOutput:
    """Generate the proxy config.

    Args:
        build_id: Build identifier used for cache busting.
        routes: Routes from the build, kept in order.
        lambdas: Lambdas keyed by their output path.
        static_website_files: Static files keyed by their relative path.
        output_dir: Output directory archive paths are relative to.

    Returns:
        ConfigOutput instance.
    """
    lambda_configs: dict[str, LambdaConfig] = {}
    for key, lambda_ in lambdas.items():
        archive = lambda_archive_path(output_dir, key)
        lambda_configs[key] = LambdaConfig(
            handler=lambda_.handler,
            runtime=lambda_.runtime,
            filename=archive.relative_to(output_dir).as_posix(),
            route=normalize_route(f"/{key}"),
        )

    return ConfigOutput(
        lambdas=lambda_configs,
        static_routes=static_routes(static_website_files.keys()),
        routes=list(routes),
        build_id=build_id,
    )


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


async def write_config(config: ConfigOutput, output_dir: Path) -> Path:
    """Write config.json to the output directory.

    Args:
        config: Config to write.
        output_dir: Output directory.

    Returns:
        Path to the written config file.

    Raises:
        ManifestWriteError: If serialization or the write fails.
    """
    config_path = output_dir / CONFIG_FILENAME

    try:
        content = config.to_json()
        await asyncio.to_thread(_write_text, config_path, content)
    except (OSError, ValueError) as e:
        raise ManifestWriteError(f"Failed to write {config_path}: {e}") from e

    logger.info("Wrote config to %s", config_path)
    return config_path


def config_as_dict(config: ConfigOutput) -> dict[str, Any]:
    """Return the config as a JSON-ready dict with camelCase keys."""
    return config.model_dump(by_alias=True, mode="json")


__all__ = [
    "CONFIG_FILENAME",
    "STATIC_DIRECT_PREFIX",
    "ConfigOutput",
    "LambdaConfig",
    "ManifestWriteError",
    "config_as_dict",
    "generate_config",
    "static_routes",
    "write_config",
]
