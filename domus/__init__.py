"""DSCR loan sizing models and cash-flow calculators.

The installed distribution version is exposed for display in the quote tool."""
from importlib import metadata

__all__ = ["__version__"]

try:
    __version__ = metadata.version("domus-dscr")
except metadata.PackageNotFoundError:  # running from a source checkout
    __version__ = "0.1.0"
