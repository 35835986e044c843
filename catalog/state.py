"""Application-owned catalog state.

``CatalogState`` is handed to consumers explicitly. The snapshot changes
only here, and only from values returned by :class:`ProductClient`.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .client import ProductClient
from .codec import resolve_identity
from .lifecycle import FetchLifecycle
from .models import DeleteResult, Product, ProductDraft

logger = logging.getLogger(__name__)


class CatalogState:
    def __init__(self, client: ProductClient, lifecycle: Optional[FetchLifecycle] = None) -> None:
        self.client = client
        self.lifecycle = lifecycle or FetchLifecycle()
        self._items: tuple[Product, ...] = ()
        self._closed = False

    @property
    def items(self) -> tuple[Product, ...]:
        return self._items

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Detach the consumer; results that arrive later are discarded."""

        self._closed = True

    def _apply(self, what: str, change: Callable[[tuple[Product, ...]], tuple[Product, ...]]) -> bool:
        if self._closed:
            logger.debug("Discarding %s result after close", what)
            return False
        self._items = change(self._items)
        return True

    async def load(self) -> Optional[list[Product]]:
        async def fetch() -> list[Product]:
            products = await self.client.list()
            self._apply("load", lambda _: tuple(products))
            return products

        return await self.lifecycle.run(fetch)

    async def ensure_loaded(self) -> Optional[list[Product]]:
        if not self.lifecycle.needs_load:
            return None
        return await self.load()

    async def add(self, draft: ProductDraft) -> Product:
        created = await self.client.create(draft)
        self._apply("create", lambda items: items + (created,))
        return created

    async def duplicate(self, product: Product) -> Product:
        return await self.add(ProductDraft.duplicate_of(product))

    async def save(self, draft: ProductDraft, *, partial: bool = False) -> Product:
        updated = await self.client.update(draft, partial=partial)
        target = resolve_identity(updated) or resolve_identity(draft)

        def replace(items: tuple[Product, ...]) -> tuple[Product, ...]:
            return tuple(updated if item.identity == target else item for item in items)

        self._apply("update", replace)
        return updated

    async def remove(self, identity: str) -> DeleteResult:
        target = str(identity)
        result = await self.client.delete(target)
        self._apply("delete", lambda items: tuple(item for item in items if item.identity != target))
        return result
