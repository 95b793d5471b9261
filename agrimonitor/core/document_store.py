"""
JSON document store backing the ``/data`` routes.

The whole database is one JSON object on disk whose keys are collection
names and whose values are lists of documents (objects with an ``id``)::

    {"notes": [{"id": 1, "text": "watered bed 3"}]}

The file is read once, kept in memory, and rewritten atomically after every
change. Writes are serialized with an asyncio lock, and a change that
cannot be written to disk is discarded.
"""

import asyncio
import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles

from agrimonitor.core.exceptions import DocumentNotFoundError, DocumentStoreError
from agrimonitor.core.logging_utils import get_module_logger

logger = get_module_logger("DocumentStore")

Document = Dict[str, Any]


class JSONDocumentStore:
    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()
        self._db: Optional[Dict[str, Any]] = None

    # ------------------------------------------------------------------
    # Persistence

    async def _load(self) -> Dict[str, Any]:
        if self._db is not None:
            return self._db

        if not await asyncio.to_thread(self.path.exists):
            logger.info("Document store %s does not exist yet, starting empty", self.path)
            self._db = {}
            return self._db

        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except OSError as e:
            raise DocumentStoreError(f"Failed to read {self.path}: {e}") from e

        try:
            data = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as e:
            raise DocumentStoreError(f"Invalid JSON in {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise DocumentStoreError(f"{self.path} must contain a JSON object")

        self._db = data
        return self._db

    async def _commit(self, db: Dict[str, Any]) -> None:
        """Write ``db`` to disk, and only then make it the live copy."""
        partial = self.path.with_name(f".{self.path.name}.partial")
        payload = json.dumps(db, indent=2, ensure_ascii=False)
        try:
            await asyncio.to_thread(self.path.parent.mkdir, parents=True, exist_ok=True)
            async with aiofiles.open(partial, "w", encoding="utf-8") as f:
                await f.write(payload)
            await asyncio.to_thread(os.replace, partial, self.path)
        except OSError as e:
            raise DocumentStoreError(f"Failed to write {self.path}: {e}") from e
        self._db = db

    async def _working_copy(self) -> Dict[str, Any]:
        return copy.deepcopy(await self._load())

    # ------------------------------------------------------------------
    # Lookup helpers

    @staticmethod
    def _find_index(items: List[Any], doc_id: str) -> Optional[int]:
        for index, item in enumerate(items):
            if isinstance(item, dict) and str(item.get("id")) == str(doc_id):
                return index
        return None

    @staticmethod
    def _next_id(items: List[Any]) -> int:
        ids = [
            item["id"] for item in items
            if isinstance(item, dict) and isinstance(item.get("id"), int) and not isinstance(item.get("id"), bool)
        ]
        return max(ids, default=0) + 1

    @staticmethod
    def _collection(db: Dict[str, Any], name: str) -> List[Any]:
        items = db.get(name)
        if not isinstance(items, list):
            raise DocumentNotFoundError(f"Collection '{name}' not found")
        return items

    @classmethod
    def _index_of(cls, items: List[Any], name: str, doc_id: str) -> int:
        index = cls._find_index(items, doc_id)
        if index is None:
            raise DocumentNotFoundError(f"Document '{doc_id}' not found in '{name}'")
        return index

    # ------------------------------------------------------------------
    # Public API

    async def get_db(self) -> Dict[str, Any]:
        async with self._lock:
            return await self._working_copy()

    async def get_collection(self, name: str) -> Any:
        """Return a collection (list) or a singular resource (object)."""
        async with self._lock:
            db = await self._load()
            if name not in db:
                raise DocumentNotFoundError(f"Collection '{name}' not found")
            return copy.deepcopy(db[name])

    async def get(self, name: str, doc_id: str) -> Document:
        async with self._lock:
            items = self._collection(await self._load(), name)
            return copy.deepcopy(items[self._index_of(items, name, doc_id)])

    async def create(self, name: str, document: Document) -> Document:
        async with self._lock:
            db = await self._working_copy()
            items = db.setdefault(name, [])
            if not isinstance(items, list):
                raise DocumentStoreError(f"'{name}' is not a collection")

            doc = copy.deepcopy(document)
            if doc.get("id") is None:
                doc["id"] = self._next_id(items)
            elif self._find_index(items, doc["id"]) is not None:
                raise ValueError(f"Document id '{doc['id']}' already exists in '{name}'")

            items.append(doc)
            await self._commit(db)
            logger.debug("Created %s/%s", name, doc["id"])
            return copy.deepcopy(doc)

    async def replace(self, name: str, doc_id: str, document: Document) -> Document:
        async with self._lock:
            db = await self._working_copy()
            items = self._collection(db, name)
            index = self._index_of(items, name, doc_id)

            doc = {**copy.deepcopy(document), "id": items[index]["id"]}
            items[index] = doc
            await self._commit(db)
            return copy.deepcopy(doc)

    async def update(self, name: str, doc_id: str, changes: Document) -> Document:
        async with self._lock:
            db = await self._working_copy()
            items = self._collection(db, name)
            index = self._index_of(items, name, doc_id)

            doc = {**items[index], **copy.deepcopy(changes), "id": items[index]["id"]}
            items[index] = doc
            await self._commit(db)
            return copy.deepcopy(doc)

    async def delete(self, name: str, doc_id: str) -> None:
        async with self._lock:
            db = await self._working_copy()
            items = self._collection(db, name)
            del items[self._index_of(items, name, doc_id)]
            await self._commit(db)
            logger.debug("Deleted %s/%s", name, doc_id)
