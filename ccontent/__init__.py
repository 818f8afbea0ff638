"""
Core package for the course content transformation pipeline.

The package is a pure library: raw markdown and AI responses go in, canonical
subsection/page records come out. No network or storage concerns live here.
"""

from importlib import metadata


def get_version() -> str:
    """Return the installed project version."""
    try:
        return metadata.version("ccontent")
    except metadata.PackageNotFoundError:
        return "0.0.0"


__all__ = ["get_version"]
