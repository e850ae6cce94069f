"""Command-line interface for fenrir_dom."""

from .main import main

__all__ = ["main"]
