"""Data model, persistence and default project."""

from .loader import DocumentLoadError, load_document, parse_document, save_document
from .defaults import default_document, default_bell_schedules

__all__ = [
    # Loader
    "DocumentLoadError",
    "load_document",
    "parse_document",
    "save_document",
    # Defaults
    "default_document",
    "default_bell_schedules",
]
