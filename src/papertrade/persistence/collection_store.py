"""JSON file persistence for the stocks, orders and trades collections."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from collections.abc import AsyncIterator, Mapping
from concurrent.futures import ThreadPoolExecutor
from contextlib import AsyncExitStack, asynccontextmanager
from pathlib import Path
from typing import Any

from papertrade.constants import Collection
from papertrade.exceptions import StorageFailure

logger = logging.getLogger(__name__)


def empty_value(collection: Collection) -> dict[str, Any] | list[Any]:
    """Default contents of a collection that has never been written."""
    if collection == Collection.STOCKS:
        return {}
    return []


class CollectionStore:
    """
    Persist and load whole collections to/from disk.

    Each collection is a single JSON file that is always overwritten in
    full. Writes go through a temp file and an atomic rename. Blocking
    file I/O is offloaded to a single-worker thread executor.

    ``load``/``save`` do not lock on their own. Callers doing
    load-mutate-save wrap the sequence in ``locked()``.
    """

    def __init__(self, data_dir: str | Path = "./data", strict_reads: bool = False):
        self.data_dir = Path(data_dir)
        self.strict_reads = strict_reads
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="store")
        self._locks = {collection: asyncio.Lock() for collection in Collection}

    def path_for(self, collection: Collection) -> Path:
        return self.data_dir / collection.filename

    @asynccontextmanager
    async def locked(self, *collections: Collection) -> AsyncIterator[None]:
        """Hold the locks of the given collections, acquired in a fixed order."""
        async with AsyncExitStack() as stack:
            for collection in sorted(set(collections), key=lambda c: c.value):
                await stack.enter_async_context(self._locks[collection])
            yield

    async def load(self, collection: Collection) -> Any:
        """Load a collection, falling back to its empty default if absent."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self._load_sync, collection)

    async def save(self, collection: Collection, value: Any) -> None:
        """Overwrite a collection."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(self._executor, self._save_sync, collection, value)

    async def save_many(self, updates: Mapping[Collection, Any]) -> None:
        """
        Overwrite several collections as one unit.

        If any write fails, the collections already written are restored
        to their previous contents and StorageFailure is raised.
        """
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(self._executor, self._save_many_sync, dict(updates))

    async def reset(self, collection: Collection) -> None:
        """Overwrite a collection with its empty default."""
        await self.save(collection, empty_value(collection))

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def _load_sync(self, collection: Collection) -> Any:
        path = self.path_for(collection)
        default = empty_value(collection)
        if not path.exists():
            return default

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            return self._recover(collection, f"Error reading {path}: {e}", e)

        if not isinstance(data, type(default)):
            return self._recover(
                collection,
                f"Error reading {path}: expected {type(default).__name__}, "
                f"got {type(data).__name__}",
            )
        return data

    def _recover(
        self, collection: Collection, message: str, cause: Exception | None = None
    ) -> Any:
        if self.strict_reads:
            raise StorageFailure(message) from cause
        logger.error(f"{message}. Using empty {collection.value}.")
        return empty_value(collection)

    def _save_sync(self, collection: Collection, value: Any) -> None:
        path = self.path_for(collection)
        try:
            payload = json.dumps(value, indent=2)
        except (TypeError, ValueError) as e:
            raise StorageFailure(f"Error serializing {collection.value}: {e}") from e
        self._write_atomic(path, payload.encode("utf-8"))
        logger.debug(f"Saved {collection.value} to {path}")

    def _save_many_sync(self, updates: dict[Collection, Any]) -> None:
        snapshots: dict[Collection, bytes | None] = {}
        for collection in updates:
            path = self.path_for(collection)
            snapshots[collection] = path.read_bytes() if path.exists() else None

        written: list[Collection] = []
        try:
            for collection, value in updates.items():
                self._save_sync(collection, value)
                written.append(collection)
        except StorageFailure:
            for collection in written:
                self._restore(collection, snapshots[collection])
            raise

    def _restore(self, collection: Collection, snapshot: bytes | None) -> None:
        path = self.path_for(collection)
        try:
            if snapshot is None:
                path.unlink(missing_ok=True)
            else:
                self._write_atomic(path, snapshot)
            logger.warning(f"Rolled back {collection.value} after failed write")
        except (OSError, StorageFailure) as e:
            logger.error(f"Failed to roll back {collection.value}: {e}", exc_info=True)

    def _write_atomic(self, path: Path, payload: bytes) -> None:
        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp"
            )
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageFailure(f"Error writing {path}: {e}") from e
