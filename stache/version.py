from __future__ import annotations

from importlib import metadata


def tool_version() -> str:
    """
    Single place to look up the installed package version.
    Does not depend on other modules (to avoid import cycles).
    """
    try:
        return metadata.version("stache")
    except metadata.PackageNotFoundError:
        return "0.0.0"

__all__ = ["tool_version"]
