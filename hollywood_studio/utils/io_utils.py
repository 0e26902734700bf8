"""I/O utility functions for file and directory operations."""

# This module is part of hollywood_studio.utils package

import re
import shutil
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Optional


def slugify(text: str, max_length: int = 60) -> str:
    """
    Convert text to a filesystem-safe slug.

    Args:
        text: Input text to slugify.
        max_length: Maximum slug length.

    Returns:
        Filesystem-safe slug string ("untitled" when nothing survives).
    """
    # Convert to lowercase
    text = text.lower()
    # Replace spaces and special characters with hyphens
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[-\s_]+", "-", text)
    # Remove leading/trailing hyphens
    text = text.strip("-")
    # Limit length
    if len(text) > max_length:
        text = text[:max_length].rstrip("-")
    return text or "untitled"


def unique_run_name(title: str) -> str:
    """
    Build a collision-free name for one pipeline run.

    Combines a microsecond timestamp, the slugified title and a short random
    suffix, so two runs with the same title started at the same instant
    still get distinct names.

    Args:
        title: Video title.

    Returns:
        Name such as "20240101_120000_123456_index-funds-101_1a2b3c4d".
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    return f"{timestamp}_{slugify(title)}_{uuid.uuid4().hex[:8]}"


def ensure_directories(*paths: Path) -> None:
    """Create directories if absent (idempotent)."""
    for path in paths:
        Path(path).mkdir(parents=True, exist_ok=True)


def remove_tree(path: Path, logger: Optional[Any] = None) -> bool:
    """
    Delete a run work directory.

    Args:
        path: Directory to remove.
        logger: Optional logger for failures.

    Returns:
        True if the directory no longer exists.
    """
    path = Path(path)
    if not path.exists():
        return True
    try:
        shutil.rmtree(path)
        return True
    except OSError as e:
        if logger:
            logger.warning(f"Could not remove work directory {path}: {e}")
        return False
