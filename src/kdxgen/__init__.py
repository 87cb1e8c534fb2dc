"""kdxgen generates Kindle collections from the folders on a mounted device."""

from importlib import metadata as _metadata

try:
    __version__ = _metadata.version("kdxgen")
except _metadata.PackageNotFoundError:  # running from a source checkout
    __version__ = "0.0.0"

__all__ = ["__version__"]
