"""Privacy consent assessment and storage API."""

__version__ = "0.1.0"
