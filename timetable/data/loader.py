"""Load and save timetable documents as JSON files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Union

from pydantic import ValidationError

from .models import TimetableDocument

logger = logging.getLogger(__name__)


class DocumentLoadError(Exception):
    """Raised when a timetable document cannot be read or fails validation."""
    pass


def parse_document(data: Any) -> TimetableDocument:
    """
    Validate already-decoded JSON data as a timetable document.

    Raises:
        DocumentLoadError: If the data does not match the document schema
    """
    if not isinstance(data, dict):
        raise DocumentLoadError("Document must be a JSON object")

    try:
        return TimetableDocument.model_validate(data)
    except ValidationError as e:
        raise DocumentLoadError(str(e)) from e


def load_document(path: Union[str, Path]) -> TimetableDocument:
    """
    Load a timetable document from a JSON file.

    Args:
        path: Path to the JSON file

    Returns:
        Validated TimetableDocument

    Raises:
        DocumentLoadError: If the file is missing, isn't valid JSON, or fails
            validation
    """
    path = Path(path)

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise DocumentLoadError(f"File not found: {path}") from e
    except json.JSONDecodeError as e:
        raise DocumentLoadError(f"Invalid JSON in {path}: {e}") from e

    document = parse_document(data)
    logger.debug("Loaded %s: %s", path, document.summary())
    return document


def save_document(document: TimetableDocument, path: Union[str, Path]) -> Path:
    """Write a document as indented JSON (camelCase keys, UTF-8)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(document.to_json())
    logger.debug("Saved %d placements to %s", len(document.timetable), path)
    return path
