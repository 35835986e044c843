"""Exceptions raised by the catalog client."""

from __future__ import annotations

from typing import Any


class CatalogError(Exception):
    """Base class for catalog client failures."""


class NotFound(CatalogError):
    """No product matches the requested identity."""

    def __init__(self, identity: str):
        super().__init__(f"Product {identity!r} not found")
        self.identity = identity


class IdentityMissing(CatalogError):
    """A record referenced for mutation carries neither ``_id`` nor ``id``."""

    def __init__(self, message: str = "Product has no identity"):
        super().__init__(message)


class UnexpectedResponse(CatalogError):
    """The catalog service answered 2xx with a body that is not a product."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"Unexpected catalog service response ({status_code}): {detail}")
        self.status_code = status_code


class ValidationFailure(CatalogError):
    """The catalog service rejected a payload in a successful response.

    ``payload`` is the service's response body as received; the client does
    not interpret it.
    """

    def __init__(self, status_code: int, payload: Any):
        super().__init__(f"Catalog service rejected the request ({status_code})")
        self.status_code = status_code
        self.payload = payload
