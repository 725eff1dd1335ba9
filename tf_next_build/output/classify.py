"""Split the build output map into lambdas and static website files."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from tf_next_build.types import BuildOutputEntry, FileFsRef, Lambda

logger = logging.getLogger(__name__)


@dataclass
class ClassifiedOutput:
    """Build output partitioned by kind.

    Attributes:
        lambdas: Lambda outputs keyed by their output path.
        static_website_files: On-disk files keyed by their relative path.
    """

    lambdas: dict[str, Lambda] = field(default_factory=dict)
    static_website_files: dict[str, FileFsRef] = field(default_factory=dict)


def classify_output(output: Mapping[str, BuildOutputEntry]) -> ClassifiedOutput:
    """Partition build output into lambdas and static website files.

    Entries of any other kind (in-memory blobs, unknown future kinds) are
    skipped. Both result mappings keep the iteration order of ``output``.

    Args:
        output: Build output map from the external build.

    Returns:
        ClassifiedOutput with disjoint ``lambdas`` and ``static_website_files``.
    """
    classified = ClassifiedOutput()

    for key, entry in output.items():
        if isinstance(entry, Lambda):
            classified.lambdas[key] = entry
        elif isinstance(entry, FileFsRef):
            classified.static_website_files[key] = entry
        else:
            logger.debug("Skipping output %s of type %s", key, entry.type)

    logger.info(
        "Classified build output: %d lambdas, %d static files",
        len(classified.lambdas),
        len(classified.static_website_files),
    )
    return classified


__all__ = ["ClassifiedOutput", "classify_output"]
