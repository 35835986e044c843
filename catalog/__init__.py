"""Resilient product catalog client with a local mirror fallback."""

from .client import ProductClient
from .codec import decode_product, encode_for_wire, resolve_identity
from .errors import CatalogError, IdentityMissing, NotFound, ValidationFailure
from .lifecycle import FetchLifecycle, LifecycleState, LoadStatus
from .models import Attachment, DeleteResult, Product, ProductDraft
from .state import CatalogState
from .views import ProductListView

__all__ = [
    "ProductClient",
    "decode_product",
    "encode_for_wire",
    "resolve_identity",
    "CatalogError",
    "IdentityMissing",
    "NotFound",
    "ValidationFailure",
    "FetchLifecycle",
    "LifecycleState",
    "LoadStatus",
    "Attachment",
    "DeleteResult",
    "Product",
    "ProductDraft",
    "CatalogState",
    "ProductListView",
]
