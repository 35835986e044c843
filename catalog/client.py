"""Product client with transparent fallback to the local mirror.

Every verb makes exactly one attempt against the catalog service. When that
attempt ends in a :class:`~catalog.remote.NetworkFailure` the mirror performs
the same operation and its answer is returned as if the service had given
it. Callers cannot tell which side answered.
"""

from __future__ import annotations

import logging

from shoplib.config import ClientConfig
from shoplib.storage import EncryptedJsonStore, JsonStore

from .codec import draft_to_product, encode_for_wire, resolve_identity
from .models import DeleteResult, Product, ProductDraft
from .remote import NetworkFailure, Ok, RemoteCatalog
from .services.mirror_store import DEFAULT_SEED_PATH, MirrorStore

logger = logging.getLogger(__name__)


class ProductClient:
    def __init__(self, remote: RemoteCatalog, mirror: MirrorStore) -> None:
        self._remote = remote
        self._mirror = mirror

    @classmethod
    def from_config(cls, config: ClientConfig) -> "ProductClient":
        """Wire a client from :class:`~shoplib.config.ClientConfig`."""

        if config.mirror_encrypted:
            store: JsonStore = EncryptedJsonStore(
                config.mirror_path,
                config.mirror_secret,
                backups=config.mirror_backups,
                label="catalog mirror",
            )
        else:
            store = JsonStore(config.mirror_path, backups=config.mirror_backups, label="catalog mirror")
        return cls(
            RemoteCatalog(config.api_base_url, config.timeout_seconds),
            MirrorStore(store, seed_path=config.seed_path or DEFAULT_SEED_PATH, key=config.mirror_key),
        )

    @staticmethod
    def _falling_back(verb: str, failure: NetworkFailure) -> None:
        logger.warning("Catalog service unavailable for %s (%s); using local mirror", verb, failure.reason)

    async def list(self) -> list[Product]:
        result = await self._remote.list_products()
        if isinstance(result, Ok):
            return result.value
        self._falling_back("list", result)
        return await self._mirror.list()

    async def get(self, identity: str) -> Product:
        identity = str(identity)
        result = await self._remote.get_product(identity)
        if isinstance(result, Ok):
            return result.value
        self._falling_back("get", result)
        return await self._mirror.get(identity)

    async def create(self, draft: ProductDraft) -> Product:
        result = await self._remote.create_product(encode_for_wire(draft), echo=draft_to_product(draft))
        if isinstance(result, Ok):
            return result.value
        self._falling_back("create", result)
        return await self._mirror.create(draft)

    async def update(self, draft: ProductDraft, *, partial: bool = False) -> Product:
        """Replace (PUT) or patch (PATCH) the product ``draft`` refers to."""

        identity = resolve_identity(draft, for_mutation=True)
        result = await self._remote.update_product(
            identity, encode_for_wire(draft), partial=partial, echo=draft_to_product(draft)
        )
        if isinstance(result, Ok):
            return result.value
        self._falling_back("update", result)
        return await self._mirror.update(identity, draft)

    async def delete(self, identity: str) -> DeleteResult:
        identity = str(identity)
        result = await self._remote.delete_product(identity)
        if isinstance(result, Ok):
            return result.value
        self._falling_back("delete", result)
        return await self._mirror.delete(identity)

    async def duplicate(self, product: Product) -> Product:
        return await self.create(ProductDraft.duplicate_of(product))
