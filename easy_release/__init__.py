"""Release a Python package: bump, check, tag, push, publish."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("easy-release")
except PackageNotFoundError:
    __version__ = "0.0.0"
