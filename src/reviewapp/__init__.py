"""ReviewApp: accounts and movie reviews API."""

__version__ = "0.1.0"
