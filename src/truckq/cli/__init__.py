"""truckq command line interface."""
from truckq import __version__

__all__ = ["__version__"]
