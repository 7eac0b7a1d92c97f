"""Utilities for SSB-Manager."""

from .logging import setup_logging

__all__ = ["setup_logging"]
