"""arcdiary - normalizes Arc Timeline day exports into a clean location diary."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("arcdiary")
except PackageNotFoundError:
    # Fallback for development without installation
    __version__ = "0.0.0-dev"
