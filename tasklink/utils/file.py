"""
File Utility Functions
======================

This module provides helpers for reading and writing the small text and JSON
files tasklink works with.
"""

import json
from pathlib import Path
from typing import Any

from loguru import logger

# Content of larger files is not scanned for keywords
MAX_CONTENT_BYTES = 512 * 1024


def safe_read_file(file_path: str | Path, max_bytes: int = MAX_CONTENT_BYTES) -> str:
    """
    Read a text file, tolerating missing, oversized and undecodable files.

    Args:
        file_path: Path to the file to read
        max_bytes: Files larger than this are treated as empty

    Returns:
        str: File contents, or empty string if the file can't be used
    """
    path = Path(file_path)
    try:
        if not path.is_file():
            return ""
        if path.stat().st_size > max_bytes:
            logger.debug(f"Skipping content of large file {path}")
            return ""
        return path.read_text(encoding="utf-8", errors="ignore")
    except OSError as error:
        logger.warning(f"Error reading file {path}: {error}")
        return ""


def read_json(file_path: str | Path) -> Any | None:
    """
    Load a JSON document.

    Returns:
        The decoded document, or None when the file is missing or corrupt
    """
    path = Path(file_path)
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        logger.error(f"Error reading {path}: {error}")
        return None


def write_json(file_path: str | Path, data: Any) -> None:
    """Write ``data`` as indented JSON, creating parent directories."""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
