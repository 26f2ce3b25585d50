"""Portal API: authentication and password lifecycle service."""

__version__ = "0.1.0"
