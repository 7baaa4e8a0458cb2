"""Filesystem helpers for discovering and reading indexable documents."""

from __future__ import annotations

from collections.abc import Sequence
import logging
import os
from pathlib import Path

import anyio

from mdindex.errors import DocumentLoadError


logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: tuple[str, ...] = (".md",)


def collect_files_sync(root: Path, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> dict[str, float]:
    """Recursively map every matching file under ``root`` to its modification time.

    Paths are absolute strings built from ``root``; timestamps are
    ``st_mtime`` floats. Errors never propagate: a missing or unreadable root
    yields an empty table and an unreadable sub-directory or file is left out.
    """
    suffixes = tuple(ext.lower() for ext in extensions)
    files: dict[str, float] = {}
    _walk(Path(root).absolute(), suffixes, files)
    return files


def _walk(directory: Path, suffixes: tuple[str, ...], files: dict[str, float]) -> None:
    try:
        with os.scandir(directory) as entries:
            children = sorted(entries, key=lambda entry: entry.name)
    except OSError as exc:
        logger.debug("Skipping directory %s: %s", directory, exc)
        return

    for entry in children:
        try:
            if entry.is_dir(follow_symlinks=False):
                _walk(Path(entry.path), suffixes, files)
            elif entry.name.lower().endswith(suffixes):
                files[entry.path] = entry.stat().st_mtime
        except OSError as exc:
            logger.debug("Skipping %s: %s", entry.path, exc)


async def collect_files(root: Path, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> dict[str, float]:
    """Async wrapper running the directory walk in a worker thread."""
    return await anyio.to_thread.run_sync(collect_files_sync, root, tuple(extensions))


async def read_document(path: str) -> str:
    """Read a document as UTF-8 text.

    Raises:
        DocumentLoadError: when the file is missing, unreadable or not UTF-8.
    """
    try:
        async with await anyio.open_file(path, "r", encoding="utf-8", newline="") as fp:
            return await fp.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentLoadError(f"{path}: {exc}") from exc
