"""Locate and order the per-book source documents."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from .dialects import Dialect, resolve_dialect
from .exceptions import IoError


def _list_directory(directory: Path, dialect: Dialect) -> list[Path]:
    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        raise IoError(f"Unable to list source directory '{directory}': {exc}") from exc
    return [entry for entry in entries if entry.is_file() and dialect.matches(entry.name)]


def discover_sources(
    ot_path: Path | str,
    nt_path: Path | str | None,
    dialect: Dialect | str,
) -> list[Path]:
    """Return the dialect's source files from both directories, sorted by file name.

    The sort is ordinal on the bare file name, so callers must name files such
    that this order is the canonical book order (e.g. zero-padded numbers).
    """
    resolved = resolve_dialect(dialect)
    directories: list[Path] = [Path(ot_path)]
    if nt_path is not None and str(nt_path).strip():
        directories.append(Path(nt_path))
    return sort_sources(path for directory in directories for path in _list_directory(directory, resolved))


def sort_sources(paths: Iterable[Path]) -> list[Path]:
    return sorted(paths, key=lambda path: path.name)


__all__ = ["discover_sources", "sort_sources"]
