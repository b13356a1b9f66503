"""Utility modules for the B2B pricing engine."""

from .export import Exporter

__all__ = [
    "Exporter",
]
