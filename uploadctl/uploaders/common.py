"""Common utilities for uploader modules."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from uploadctl.core.exceptions import (
    FileTooLargeError,
    TypeNotAllowedError,
    ValidationError,
)
from uploadctl.models.source import FileSource
from uploadctl.uploaders.constants import MAX_FILE_SIZE

logger = logging.getLogger(__name__)


# =============================================================================
# Validation
# =============================================================================


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of checking one candidate file."""

    source: FileSource
    error: ValidationError | None = None

    @property
    def accepted(self) -> bool:
        return self.error is None

    @property
    def reason(self) -> str:
        """Rejection message, empty when accepted."""
        return self.error.message if self.error else ""


def normalize_extensions(extensions: Iterable[str] | None) -> frozenset[str]:
    """Normalize an allow-list to lower-case extensions without dots.

    Args:
        extensions: Extensions such as ``"jpg"``, ``".PNG"``.

    Returns:
        Frozen set of normalized extensions (empty accepts every type).
    """
    if not extensions:
        return frozenset()
    return frozenset(ext.strip().lstrip(".").lower() for ext in extensions if ext.strip())


def validate_file(
    candidate: FileSource,
    allowed_extensions: Iterable[str] | None = None,
    *,
    max_size: int = MAX_FILE_SIZE,
) -> ValidationResult:
    """Check a candidate against the size limit and the extension allow-list.

    Size is checked first, so an oversized file is reported as too large
    whatever its type. The check is pure: no logging, no side effects.

    Args:
        candidate: File to check.
        allowed_extensions: Allow-list; empty or None accepts every type.
        max_size: Largest accepted size in bytes, inclusive.

    Returns:
        ValidationResult carrying a FileTooLargeError or TypeNotAllowedError
        when rejected.
    """
    if candidate.size > max_size:
        return ValidationResult(
            candidate, FileTooLargeError(candidate.name, candidate.size, max_size)
        )

    allowed = normalize_extensions(allowed_extensions)
    if allowed and candidate.extension not in allowed:
        return ValidationResult(
            candidate, TypeNotAllowedError(candidate.name, candidate.extension, allowed)
        )

    return ValidationResult(candidate)


# =============================================================================
# File Collection
# =============================================================================


def collect_files(
    paths: Sequence[Path],
    *,
    recursive: bool = False,
) -> list[Path]:
    """Expand user-selected paths into a list of files.

    Files are kept in the order given. Directories contribute their visible
    files in sorted order, descending into subdirectories only when
    ``recursive`` is set.

    Args:
        paths: Files and directories selected by the user.
        recursive: Descend into subdirectories.

    Returns:
        List of file paths, without duplicates.

    Raises:
        ValueError: If a path does not exist.
    """
    files: list[Path] = []
    seen: set[Path] = set()

    def add(path: Path) -> None:
        key = path.resolve()
        if key not in seen:
            seen.add(key)
            files.append(path)

    for path in paths:
        if not path.exists():
            raise ValueError(f"No such file or directory: {path}")

        if path.is_file():
            add(path)
            continue

        pattern = "**/*" if recursive else "*"
        for child in sorted(path.glob(pattern)):
            # is_file() is False for broken symlinks
            if not child.is_file():
                continue

            # Skip hidden files
            if child.name.startswith("."):
                continue

            add(child)

    logger.debug("Collected %d files from %d paths", len(files), len(paths))
    return files
