"""Filesystem blob store.

Blobs live as flat files directly under one root directory. Every storage
key is produced by :func:`generate_storage_name`, which is the only place
that knows how keys are built.
"""

from __future__ import annotations

import asyncio
import logging
import re
import secrets
import time
from pathlib import Path, PurePosixPath
from typing import Iterator

from ..exceptions import NotFound, StorageError

logger = logging.getLogger(__name__)

FALLBACK_NAME = "document.pdf"
MAX_NAME_LENGTH = 150

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_filename(name: str | None) -> str:
    """Reduce a client-supplied filename to a safe basename."""
    if not name:
        return FALLBACK_NAME
    # drop any directory part, whichever separator the client used
    base = PurePosixPath(name.replace("\\", "/")).name
    base = _UNSAFE_CHARS.sub("_", base).lstrip(".")
    if len(base) > MAX_NAME_LENGTH:
        stem, dot, ext = base.rpartition(".")
        if dot and len(ext) <= 10:
            base = stem[: MAX_NAME_LENGTH - len(ext) - 1] + "." + ext
        else:
            base = base[:MAX_NAME_LENGTH]
    return base or FALLBACK_NAME


def generate_storage_name(
    suggested_name: str | None,
    *,
    now_ms: int | None = None,
    nonce: int | None = None,
) -> str:
    """Build a fresh storage key: ``<epoch-millis>-<random>-<sanitized name>``."""
    ts = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    rnd = nonce if nonce is not None else secrets.randbelow(1_000_000_000)
    return f"{ts}-{rnd}-{sanitize_filename(suggested_name)}"


def storage_name_timestamp(key: str) -> int | None:
    """Epoch millis encoded in a key built by :func:`generate_storage_name`, if any."""
    head, sep, _ = key.partition("-")
    return int(head) if sep and head.isdigit() else None


class LocalBlobStore:
    """Stores raw bytes under generated names in a single directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root).expanduser().resolve()

    def ensure_root(self) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create storage directory {self.root}: {exc}") from exc

    def path_for(self, storage_path: str) -> Path:
        candidate = (self.root / storage_path).resolve()
        if candidate.parent != self.root:
            raise StorageError(f"Storage key escapes the storage root: {storage_path!r}")
        return candidate

    # ---- sync primitives (run in a worker thread by the async API) ----

    def _write_sync(self, data: bytes, suggested_name: str | None) -> str:
        self.ensure_root()
        key = generate_storage_name(suggested_name)
        target = self.path_for(key)
        try:
            # "xb" refuses to replace an existing file
            with target.open("xb") as fh:
                fh.write(data)
        except FileExistsError as exc:
            raise StorageError(f"Storage key collision for {key}") from exc
        except OSError as exc:
            # don't leave a truncated file behind
            target.unlink(missing_ok=True)
            raise StorageError(f"Failed to write blob {key}: {exc}") from exc
        return key

    def _read_sync(self, storage_path: str) -> bytes:
        target = self.path_for(storage_path)
        try:
            return target.read_bytes()
        except FileNotFoundError as exc:
            raise NotFound("File not found on server") from exc
        except OSError as exc:
            raise StorageError(f"Failed to read blob {storage_path}: {exc}") from exc

    def _delete_sync(self, storage_path: str) -> bool:
        target = self.path_for(storage_path)
        try:
            target.unlink()
        except FileNotFoundError:
            logger.warning(
                "Blob already absent during delete: %s",
                storage_path,
                extra={"storage_path": storage_path},
            )
            return False
        except OSError as exc:
            raise StorageError(f"Failed to delete blob {storage_path}: {exc}") from exc
        return True

    # ---- public async API ----

    async def write(self, data: bytes, suggested_name: str | None) -> str:
        """Persist ``data`` under a new unique key and return that key."""
        key = await asyncio.to_thread(self._write_sync, data, suggested_name)
        logger.info("Stored blob %s (%d bytes)", key, len(data), extra={"storage_path": key})
        return key

    async def read(self, storage_path: str) -> bytes:
        return await asyncio.to_thread(self._read_sync, storage_path)

    async def delete(self, storage_path: str) -> bool:
        """Remove a blob. Returns False when it was already gone."""
        removed = await asyncio.to_thread(self._delete_sync, storage_path)
        if removed:
            logger.info("Deleted blob %s", storage_path, extra={"storage_path": storage_path})
        return removed

    async def exists(self, storage_path: str) -> bool:
        return await asyncio.to_thread(self.path_for(storage_path).is_file)

    def iter_keys(self) -> Iterator[str]:
        """Yield every blob key currently on disk."""
        if not self.root.is_dir():
            return
        for entry in sorted(self.root.iterdir()):
            if entry.is_file():
                yield entry.name
