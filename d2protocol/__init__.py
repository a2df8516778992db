"""d2protocol - Network protocol schema extraction from the Dofus client."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("d2protocol")
except PackageNotFoundError:
    __version__ = "(local)"
