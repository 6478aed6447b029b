"""Version information for buildstamp.

The installed distribution's metadata is authoritative. Running from a
source checkout without installing falls back to BASE_VERSION.0.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# Base version - bump this manually for releases
BASE_VERSION = "1.0"


def get_version() -> str:
    """Get the full version string.

    Returns:
        Version string from package metadata, or "MAJOR.MINOR.0" when the
        package is not installed.
    """
    try:
        return version("buildstamp")
    except PackageNotFoundError:
        return f"{BASE_VERSION}.0"


__version__ = get_version()
