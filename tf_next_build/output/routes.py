"""Route helpers for the proxy config."""

import re

_INDEX_SUFFIX = re.compile(r"/index$")


def normalize_route(route: str) -> str:
    """Collapse a trailing ``/index`` segment to its directory root.

    ``/index`` becomes ``/`` and ``/blog/index`` becomes ``/blog/``.
    Any other route is returned unchanged.
    """
    return _INDEX_SUFFIX.sub("/", route)


__all__ = ["normalize_route"]
