"""Filesystem-backed cache for document snapshots and modification times.

Two artifacts are kept per data directory, both namespaced by a short hash of
the directory's resolved absolute path so that several datasets can share one
cache directory:

- ``.mdindex.cache.<hash>``: the document table (path, name, content, mtime)
- ``.mdindex.mtime.<hash>``: path -> modification time, for change detection

Posting lists are never persisted; they are derived again on load.
"""

from __future__ import annotations

import hashlib
import logging
import os
from pathlib import Path

import anyio
import orjson
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from mdindex.domain.model import Document
from mdindex.errors import CacheCorruptError
from mdindex.search.inverted_index import InvertedIndex


logger = logging.getLogger(__name__)

SNAPSHOT_FORMAT_VERSION = 1
SNAPSHOT_PREFIX = ".mdindex.cache."
MOD_TIMES_PREFIX = ".mdindex.mtime."

_MOD_TIMES_ADAPTER = TypeAdapter(dict[str, float])


class CacheSnapshot(BaseModel):
    """Serialized document table."""

    model_config = ConfigDict(frozen=True)

    version: int = SNAPSHOT_FORMAT_VERSION
    documents: list[Document] = Field(default_factory=list)


def data_dir_namespace(data_dir: Path | str) -> str:
    """Return the stable short hash identifying a data directory."""
    resolved = str(Path(data_dir).expanduser().resolve())
    return hashlib.sha256(resolved.encode("utf-8")).hexdigest()[:12]


def serialize(index: InvertedIndex) -> bytes:
    """Capture the document table of ``index`` (postings excluded)."""
    snapshot = CacheSnapshot(documents=list(index.documents))
    return orjson.dumps(snapshot.model_dump(mode="json"))


def deserialize(payload: bytes | str) -> InvertedIndex:
    """Restore an index from a snapshot, rebuilding postings from content.

    Raises:
        CacheCorruptError: when the payload is not a valid snapshot.
    """
    try:
        snapshot = CacheSnapshot.model_validate(orjson.loads(payload))
    except (orjson.JSONDecodeError, ValidationError) as exc:
        raise CacheCorruptError(f"Invalid snapshot: {exc}") from exc
    if snapshot.version != SNAPSHOT_FORMAT_VERSION:
        raise CacheCorruptError(f"Unsupported snapshot version {snapshot.version}")
    return InvertedIndex.from_documents(snapshot.documents)


def serialize_mod_times(mod_times: dict[str, float]) -> bytes:
    return orjson.dumps(mod_times, option=orjson.OPT_SORT_KEYS)


def deserialize_mod_times(payload: bytes | str) -> dict[str, float]:
    try:
        return _MOD_TIMES_ADAPTER.validate_python(orjson.loads(payload))
    except (orjson.JSONDecodeError, ValidationError) as exc:
        raise CacheCorruptError(f"Invalid modification-time table: {exc}") from exc


class CacheStore:
    """Persist and restore the index cache for one data directory."""

    def __init__(self, cache_dir: Path, data_dir: Path) -> None:
        self.cache_dir = Path(cache_dir).expanduser()
        self.data_dir = Path(data_dir)
        self.namespace = data_dir_namespace(data_dir)
        self.snapshot_path = self.cache_dir / f"{SNAPSHOT_PREFIX}{self.namespace}"
        self.mod_times_path = self.cache_dir / f"{MOD_TIMES_PREFIX}{self.namespace}"

    def exists(self) -> bool:
        """Both artifacts are required for the cache to count as present."""
        return self.snapshot_path.is_file() and self.mod_times_path.is_file()

    async def load_snapshot(self) -> InvertedIndex | None:
        """Load the snapshot into a fresh index.

        Returns None when the snapshot file does not exist.

        Raises:
            CacheCorruptError: when the file is unreadable or invalid.
        """
        payload = await self._read_bytes(self.snapshot_path)
        if payload is None:
            return None
        return await anyio.to_thread.run_sync(deserialize, payload)

    async def load_mod_times(self) -> dict[str, float] | None:
        """Load the modification-time table.

        Returns None when the table file does not exist.

        Raises:
            CacheCorruptError: when the file is unreadable or invalid.
        """
        payload = await self._read_bytes(self.mod_times_path)
        if payload is None:
            return None
        return deserialize_mod_times(payload)

    async def save(self, index: InvertedIndex, mod_times: dict[str, float]) -> None:
        """Write snapshot and table atomically (temp file + replace).

        Raises:
            OSError: when either artifact cannot be written.
        """
        snapshot = await anyio.to_thread.run_sync(serialize, index)
        await self._write_bytes(self.snapshot_path, snapshot)
        await self._write_bytes(self.mod_times_path, serialize_mod_times(mod_times))

    def clear(self) -> None:
        """Delete both artifacts if present."""
        for path in (self.snapshot_path, self.mod_times_path):
            path.unlink(missing_ok=True)

    async def _write_bytes(self, path: Path, payload: bytes) -> None:
        await anyio.to_thread.run_sync(lambda: path.parent.mkdir(parents=True, exist_ok=True))
        tmp_path = path.with_name(path.name + ".tmp")
        async with await anyio.open_file(tmp_path, "wb") as fp:
            await fp.write(payload)
        await anyio.to_thread.run_sync(os.replace, tmp_path, path)

    async def _read_bytes(self, path: Path) -> bytes | None:
        try:
            async with await anyio.open_file(path, "rb") as fp:
                return await fp.read()
        except FileNotFoundError:
            return None
        except OSError as err:
            raise CacheCorruptError(f"Failed to read cache file {path}: {err}") from err
