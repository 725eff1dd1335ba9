"""Output assembly module.

This module handles:
- Route normalization for lambda routes
- Splitting build output into lambdas and static website files
- Writing lambda archives and the static website archive
- Generating and writing the config.json manifest
"""

from tf_next_build.output.classify import ClassifiedOutput, classify_output
from tf_next_build.output.routes import normalize_route

__all__ = ["ClassifiedOutput", "classify_output", "normalize_route"]
