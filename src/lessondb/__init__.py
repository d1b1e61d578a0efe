"""Embedded document-store repository layer for the learning app."""

__version__ = "0.1.0"
