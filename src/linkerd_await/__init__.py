"""Wait for the linkerd proxy to become ready before running a program."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("linkerd-await")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = ["__version__"]
