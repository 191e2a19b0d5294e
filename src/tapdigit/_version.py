"""Version lookup from the installed distribution metadata."""

from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION_NAME = "tapdigit"
UNKNOWN_VERSION = "0.0.0"


def get_version() -> str:
    """Return the installed tapdigit version, or 0.0.0 for an uninstalled source tree."""
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return UNKNOWN_VERSION
