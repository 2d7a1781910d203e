"""Read-only query layer over the Things 3 database."""

__version__ = "0.1.0"
