"""Bulk spreadsheet import for the trust's membership backend."""

__version__ = "0.1.0"
