"""toolsweep — inventory developer tools and flag what can go."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("toolsweep")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"
