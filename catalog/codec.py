"""Identity resolution and wire encodings for product records.

The catalog service keys documents by ``_id`` while the local mirror (and
older service builds) use a numeric ``id``. Records are normalised here, at
the boundary, into a single opaque ``identity`` string tagged with the field
it came from; nothing downstream looks at ``_id``/``id`` again.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from .errors import IdentityMissing
from .models import IdentitySource, Product, ProductDraft

PRIMARY_FIELD: IdentitySource = "_id"
FALLBACK_FIELD: IdentitySource = "id"

# Order of the multipart form fields after the ``image`` file part.
MULTIPART_FIELDS = ("name", "price", "amount", "description", "id", "_id", "imageUrl")

DRAFT_FIELDS = {
    "name": "name",
    "price": "price",
    "amount": "amount",
    "description": "description",
    "image_url": "imageUrl",
    "is_active": "isActive",
}

Record = Union[Mapping[str, Any], Product, ProductDraft]


def _present(value: Any) -> bool:
    return value is not None and value != ""


def _identity_and_source(record: Record) -> tuple[Optional[str], Optional[IdentitySource]]:
    if isinstance(record, (Product, ProductDraft)):
        return record.identity, record.identity_source
    primary = record.get(PRIMARY_FIELD)
    if _present(primary):
        return str(primary), PRIMARY_FIELD
    fallback = record.get(FALLBACK_FIELD)
    if _present(fallback):
        return str(fallback), FALLBACK_FIELD
    return None, None


def resolve_identity(record: Record, *, for_mutation: bool = False) -> Optional[str]:
    """Return the canonical identity of ``record``.

    ``_id`` wins over ``id`` for raw mappings; models return the identity
    captured when they were decoded. A record without either is only an
    error when it is about to be mutated.
    """

    identity, _ = _identity_and_source(record)
    if identity is None and for_mutation:
        raise IdentityMissing()
    return identity


def decode_product(raw: Mapping[str, Any]) -> Product:
    """Build a :class:`Product` from a wire or mirror mapping."""

    if isinstance(raw, Product):
        return raw
    identity, source = _identity_and_source(raw)
    # Identity fields and driver metadata such as "__v" stay off the model.
    fields = {
        key: value
        for key, value in raw.items()
        if value is not None and not key.startswith("_") and key != FALLBACK_FIELD
    }
    fields.pop("identity", None)
    fields.pop("identity_source", None)
    return Product(identity=identity, identity_source=source, **fields)


@dataclass(frozen=True)
class WireEncoding:
    """Request body for create/update, either JSON or multipart."""

    json: Optional[dict[str, Any]] = None
    data: Optional[dict[str, str]] = None
    files: Optional[dict[str, tuple[str, bytes, str]]] = None

    @property
    def is_multipart(self) -> bool:
        return self.files is not None

    def request_kwargs(self) -> dict[str, Any]:
        if self.is_multipart:
            return {"data": self.data, "files": self.files}
        return {"json": self.json}


def _extra_fields(draft: ProductDraft) -> dict[str, Any]:
    return {
        key: value
        for key, value in (draft.model_extra or {}).items()
        if value is not None and not key.startswith("_") and key != FALLBACK_FIELD
    }


def draft_fields(draft: ProductDraft) -> dict[str, Any]:
    """Return the wire-named fields the draft explicitly sets.

    Identity and attachment are left out. Unset fields are omitted so a
    partial draft never overwrites values it does not mention. Unknown
    fields carried by the draft (``isRecommended`` and the like) pass
    through under their own names.
    """

    fields = {
        alias: getattr(draft, name)
        for name, alias in DRAFT_FIELDS.items()
        if name in draft.model_fields_set and getattr(draft, name) is not None
    }
    for key, value in _extra_fields(draft).items():
        fields.setdefault(key, value)
    return fields


def _semantic_fields(draft: ProductDraft) -> dict[str, Any]:
    fields = draft_fields(draft)
    if draft.identity is not None:
        fields[draft.identity_source or FALLBACK_FIELD] = draft.identity
    return fields


def draft_to_product(draft: ProductDraft) -> Product:
    """The product ``draft`` describes, as far as the client knows it."""

    return decode_product(_semantic_fields(draft))


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def encode_for_wire(draft: ProductDraft) -> WireEncoding:
    """Encode ``draft`` for POST/PUT/PATCH.

    A draft with an attachment becomes multipart with the file under
    ``image`` and no ``imageUrl``; anything else is a JSON body.
    """

    fields = _semantic_fields(draft)
    if draft.attachment is None:
        return WireEncoding(json=fields)

    fields.pop("imageUrl", None)
    data = {name: _form_value(fields.pop(name)) for name in MULTIPART_FIELDS if name in fields}
    data.update((name, _form_value(value)) for name, value in fields.items())
    return WireEncoding(data=data, files={"image": draft.attachment.as_upload()})
