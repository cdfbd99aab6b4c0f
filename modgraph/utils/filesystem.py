"""
Filesystem utilities for modgraph.

This module provides a safe helper for reading catalog snapshot files.
All filesystem errors are normalized to ``FileOperationError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from modgraph.constants import MAX_FILE_SIZE
from modgraph.exceptions import FileOperationError
from modgraph.utils.logger import get_logger

logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _existing_file(file_path: PathLike) -> Path:
    """Resolve *file_path* and require it to be an existing regular file."""
    path = Path(file_path).expanduser().resolve(strict=False)
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(file_path),
            operation="read",
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(file_path),
            operation="read",
        )
    return path


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Safely read a text file with optional size limits.

    Args:
        file_path: Path to the file; ``~`` is expanded.
        max_size: Maximum allowed file size in bytes (None disables limit).
        encoding: Text encoding.

    Returns:
        File contents as a string.
    """
    path = _existing_file(file_path)
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    logger.debug("Reading %s (%d bytes)", path, size)
    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc
