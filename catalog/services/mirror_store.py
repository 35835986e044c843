"""Local mirror of the product catalog.

The mirror answers when the catalog service cannot be reached. It holds the
whole catalog as one JSON array under a single store entry, seeded from a
fixture the first time it is touched. Every mutation reads, modifies and
writes the full array, so access is serialized with an ``asyncio.Lock`` and
the blocking file I/O runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from shoplib.storage import JsonStore

from ..codec import decode_product, draft_fields, resolve_identity
from ..errors import NotFound
from ..models import DeleteResult, Product, ProductDraft

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_KEY = "products"
DEFAULT_SEED_PATH = Path(__file__).resolve().parents[1] / "seed" / "products.seed.json"


def load_seed(path: Path) -> list[dict[str, Any]]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"seed fixture {path} must hold a JSON array")
    return data


def _numeric_id(record: dict[str, Any]) -> int:
    # Only the numeric "id" field counts; "_id" keys belong to the service.
    value = record.get("id")
    if isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _merge_fields(draft: ProductDraft) -> dict[str, Any]:
    fields = draft_fields(draft)
    if draft.attachment is not None:
        fields["imageUrl"] = draft.attachment.to_data_url()
    return fields


@dataclass(slots=True)
class MirrorStore:
    """CRUD over the mirrored catalog array."""

    store: JsonStore
    seed_path: Optional[Path] = DEFAULT_SEED_PATH
    key: str = DEFAULT_KEY
    _lock: asyncio.Lock = field(init=False, repr=False, default_factory=asyncio.Lock)

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------
    def _read(self) -> list[dict[str, Any]]:
        items = self.store.get(self.key)
        return list(items) if isinstance(items, list) else []

    def _seed_sync(self) -> None:
        if self.key in self.store:
            return
        seed = load_seed(self.seed_path) if self.seed_path else []
        self.store.put(self.key, seed)
        logger.info("Seeded catalog mirror with %d products", len(seed))

    async def _run(self, fn: Callable[[], T]) -> T:
        async with self._lock:
            return await asyncio.to_thread(self._with_seed, fn)

    def _with_seed(self, fn: Callable[[], T]) -> T:
        self._seed_sync()
        return fn()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def seed(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self._seed_sync)

    async def list(self) -> list[Product]:
        items = await self._run(self._read)
        return [decode_product(item) for item in items]

    async def get(self, identity: str) -> Product:
        target = str(identity)

        def find() -> Optional[dict[str, Any]]:
            return next((item for item in self._read() if resolve_identity(item) == target), None)

        found = await self._run(find)
        if found is None:
            raise NotFound(target)
        return decode_product(found)

    async def create(self, draft: ProductDraft) -> Product:
        def insert() -> dict[str, Any]:
            items = self._read()
            next_id = max((_numeric_id(item) for item in items), default=0) + 1
            record = {**_merge_fields(draft), "id": next_id}
            items.append(record)
            self.store.put(self.key, items)
            return record

        return decode_product(await self._run(insert))

    async def update(self, identity: str, draft: ProductDraft) -> Product:
        target = str(identity)

        def merge() -> Optional[dict[str, Any]]:
            items = self._read()
            for item in items:
                if resolve_identity(item) == target:
                    item.update(_merge_fields(draft))
                    self.store.put(self.key, items)
                    return item
            return None

        updated = await self._run(merge)
        if updated is None:
            raise NotFound(target)
        return decode_product(updated)

    async def delete(self, identity: str) -> DeleteResult:
        target = str(identity)

        def remove() -> bool:
            items = self._read()
            kept = [item for item in items if resolve_identity(item) != target]
            if len(kept) == len(items):
                return False
            self.store.put(self.key, kept)
            return True

        return DeleteResult(deleted=await self._run(remove))
