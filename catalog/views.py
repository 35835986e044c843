"""Derived views over the catalog snapshot.

Search, ordering, the featured item and CSV export are pure functions of the
snapshot; nothing here reads or writes storage. ``ProductListView`` bundles
them with the list page's query, sort and selection state.
"""

from __future__ import annotations

import csv
import datetime as _dt
import enum
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

from .models import Product
from .state import CatalogState

logger = logging.getLogger(__name__)

CSV_HEADER = ("ID", "Name", "Price", "Amount", "Active", "Description", "ImageUrl")


class SortKey(str, enum.Enum):
    PRICE = "price"
    AMOUNT = "amount"


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


# ----------------------------------------------------------------------
# Pure projections
# ----------------------------------------------------------------------
def _matches(product: Product, needle: str) -> bool:
    haystacks = (product.name or "", product.description or "", product.identity or "")
    return any(needle in text.lower() for text in haystacks)


def search(snapshot: Iterable[Product], query: str) -> list[Product]:
    """Case-insensitive substring filter on name, description and identity."""

    needle = (query or "").strip().lower()
    if not needle:
        return list(snapshot)
    return [product for product in snapshot if _matches(product, needle)]


def _numeric(value: Any) -> float:
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def sort_products(
    items: Iterable[Product], key: SortKey | str, order: SortOrder | str = SortOrder.ASC
) -> list[Product]:
    """Stable numeric sort; ties keep their input order in both directions."""

    field_name = SortKey(key).value
    return sorted(
        items,
        key=lambda product: _numeric(getattr(product, field_name, None)),
        reverse=SortOrder(order) is SortOrder.DESC,
    )


def featured(snapshot: Iterable[Product]) -> Optional[Product]:
    """Highest-priced product with a positive price, first one on ties."""

    best: Optional[Product] = None
    for product in snapshot:
        price = _numeric(product.price)
        if price > 0 and (best is None or price > _numeric(best.price)):
            best = product
    return best


def show_featured(query: str, sort_key: Optional[SortKey | str]) -> bool:
    return not (query or "").strip() and not sort_key


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _csv_row(product: Product) -> list[str]:
    description = " ".join((product.description or "").splitlines())
    return [
        _cell(product.identity),
        _cell(product.name),
        _cell(product.price),
        _cell(product.amount),
        _cell(product.is_active),
        description,
        _cell(product.image_url),
    ]


def to_csv(items: Iterable[Product]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    writer.writerows(_csv_row(product) for product in items)
    return buffer.getvalue().rstrip("\n")


def csv_filename(now: Optional[_dt.datetime] = None) -> str:
    moment = now or _dt.datetime.now(_dt.timezone.utc)
    return f"products_{int(moment.timestamp() * 1000)}.csv"


def write_csv(items: Iterable[Product], directory: Path | str, now: Optional[_dt.datetime] = None) -> Path:
    """Write the CSV export into ``directory`` and return its path."""

    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / csv_filename(now)
    path.write_text(to_csv(items), encoding="utf-8")
    return path


# ----------------------------------------------------------------------
# Interactive state
# ----------------------------------------------------------------------
class SortState:
    """Sort key and direction toggled from the list header."""

    def __init__(self) -> None:
        self.key: Optional[SortKey] = None
        self.order = SortOrder.ASC

    def toggle(self, key: SortKey | str) -> None:
        key = SortKey(key)
        if self.key is not key:
            self.key = key
            self.order = SortOrder.ASC
        else:
            self.order = SortOrder.DESC if self.order is SortOrder.ASC else SortOrder.ASC

    def clear(self) -> None:
        self.key = None
        self.order = SortOrder.ASC

    def apply(self, items: Sequence[Product]) -> list[Product]:
        if self.key is None:
            return list(items)
        return sort_products(items, self.key, self.order)


class Selection:
    """Ordered set of selected product identities."""

    def __init__(self, identities: Iterable[str] = ()) -> None:
        self._ids: dict[str, None] = dict.fromkeys(str(i) for i in identities)

    def toggle(self, identity: str) -> bool:
        identity = str(identity)
        if identity in self._ids:
            del self._ids[identity]
            return False
        self._ids[identity] = None
        return True

    def clear(self) -> None:
        self._ids.clear()

    @property
    def ids(self) -> list[str]:
        return list(self._ids)

    def __contains__(self, identity: object) -> bool:
        return str(identity) in self._ids

    def __len__(self) -> int:
        return len(self._ids)


@dataclass(frozen=True)
class BulkOutcome:
    identity: str
    ok: bool
    error: Optional[str] = None


async def bulk_delete(state: CatalogState, identities: Iterable[str]) -> list[BulkOutcome]:
    """Delete ``identities`` one after another; failures never stop the batch."""

    outcomes: list[BulkOutcome] = []
    for identity in [str(i) for i in identities]:
        try:
            await state.remove(identity)
        except Exception as exc:
            logger.warning("Bulk delete of product %s failed: %s", identity, exc)
            outcomes.append(BulkOutcome(identity, False, str(exc)))
        else:
            outcomes.append(BulkOutcome(identity, True))
    return outcomes


class ProductListView:
    """Query, sort and selection state for the product list page."""

    def __init__(self, state: CatalogState) -> None:
        self.state = state
        self.query = ""
        self.sort = SortState()
        self.selection = Selection()

    @property
    def visible(self) -> list[Product]:
        return self.sort.apply(search(self.state.items, self.query))

    @property
    def featured(self) -> Optional[Product]:
        return featured(self.state.items)

    @property
    def show_featured(self) -> bool:
        return show_featured(self.query, self.sort.key)

    def clear_query(self) -> None:
        self.query = ""

    def export_csv(self, directory: Path | str, now: Optional[_dt.datetime] = None) -> Path:
        return write_csv(self.visible, directory, now)

    async def bulk_delete(self) -> list[BulkOutcome]:
        if not len(self.selection):
            return []
        try:
            return await bulk_delete(self.state, self.selection.ids)
        finally:
            self.selection.clear()

    def summary(self) -> str:
        parts = [f"Showing {len(self.visible)} products"]
        if self.sort.key is not None:
            direction = "low to high" if self.sort.order is SortOrder.ASC else "high to low"
            parts.append(f"sorted by {self.sort.key.value} ({direction})")
        if self.query.strip():
            parts.append(f"search: {self.query.strip()}")
        return " | ".join(parts)
