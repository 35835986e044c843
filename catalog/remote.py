"""
Catalog service HTTP adapter.

Purpose:
- Speaks the catalog service's REST contract (``/products`` collection)
- Turns every transport-level outcome into an explicit ``RemoteResult``

Important:
- Transport errors, timeouts and non-2xx statuses are ``NetworkFailure``;
  callers branch on ``Ok`` versus ``NetworkFailure`` and decide what to do.
- A 2xx is never a failure. A 2xx body carrying an ``error`` is the
  service's business verdict and is raised as ``ValidationFailure``; a 2xx
  body that is not a usable product raises ``UnexpectedResponse`` unless the
  request supplied an echo of what was sent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar, Union

import httpx

from shoplib.network import build_api_url, resource_path

from .codec import WireEncoding, decode_product
from .errors import UnexpectedResponse, ValidationFailure
from .models import DeleteResult, Product

T = TypeVar("T")

COLLECTION = "products"
DEFAULT_HEADERS = {"X-Requested-With": "XMLHttpRequest"}


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class NetworkFailure:
    reason: str
    status_code: Optional[int] = None


RemoteResult = Union[Ok[T], NetworkFailure]


def _decode_delete(payload: Any) -> DeleteResult:
    if isinstance(payload, dict) and "deleted" in payload:
        return DeleteResult(deleted=bool(payload["deleted"]))
    return DeleteResult(deleted=True)


def _decode_list(payload: Any) -> list[Product]:
    if not isinstance(payload, list):
        raise ValueError("expected a JSON array of products")
    return [decode_product(item) for item in payload]


def _decode_one(echo: Optional[Product] = None) -> Callable[[Any], Product]:
    def decode(payload: Any) -> Product:
        if isinstance(payload, dict) and payload:
            return decode_product(payload)
        if echo is not None:
            return echo
        raise ValueError("expected a JSON object")

    return decode


class RemoteCatalog:
    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def _url(self, identity: str | None = None) -> str:
        return build_api_url(self.base_url, resource_path(COLLECTION, identity))

    async def _call(
        self,
        method: str,
        url: str,
        decode: Callable[[Any], T],
        **kwargs: Any,
    ) -> RemoteResult[T]:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                headers=DEFAULT_HEADERS,
                transport=self._transport,
            ) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            return NetworkFailure(str(exc) or exc.__class__.__name__)
        if not response.is_success:
            return NetworkFailure(f"HTTP {response.status_code} from {method} {url}", response.status_code)

        payload = _payload(response)
        if isinstance(payload, dict) and payload.get("error"):
            raise ValidationFailure(response.status_code, payload)
        try:
            return Ok(decode(payload))
        except ValueError as exc:
            raise UnexpectedResponse(response.status_code, str(exc)) from exc

    async def list_products(self) -> RemoteResult[list[Product]]:
        return await self._call("GET", self._url(), _decode_list)

    async def get_product(self, identity: str) -> RemoteResult[Product]:
        return await self._call("GET", self._url(identity), _decode_one())

    async def create_product(
        self, body: WireEncoding, *, echo: Optional[Product] = None
    ) -> RemoteResult[Product]:
        return await self._call("POST", self._url(), _decode_one(echo), **body.request_kwargs())

    async def update_product(
        self,
        identity: str,
        body: WireEncoding,
        *,
        partial: bool = False,
        echo: Optional[Product] = None,
    ) -> RemoteResult[Product]:
        method = "PATCH" if partial else "PUT"
        return await self._call(method, self._url(identity), _decode_one(echo), **body.request_kwargs())

    async def delete_product(self, identity: str) -> RemoteResult[DeleteResult]:
        return await self._call("DELETE", self._url(identity), _decode_delete)


def _payload(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
