"""Package version lookup.

Reads the installed distribution metadata; a source checkout that was never
installed reports ``"dev"``.
"""

from __future__ import annotations

from importlib import metadata

__all__ = ["get_version", "__version__"]


def get_version() -> str:
    try:
        return metadata.version("structdoc")
    except metadata.PackageNotFoundError:
        return "dev"


__version__ = get_version()
