"""Data types for products, drafts and attachments."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

IdentitySource = Literal["_id", "id"]

COPY_SUFFIX = " (copy)"


@dataclass(frozen=True)
class Attachment:
    """Binary image payload picked by the operator but not yet submitted."""

    filename: str
    content_type: str
    data: bytes

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.content_type or 'application/octet-stream'};base64,{encoded}"

    def as_upload(self) -> tuple[str, bytes, str]:
        return (self.filename, self.data, self.content_type)


class _ProductFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    identity: Optional[str] = None
    identity_source: Optional[IdentitySource] = None
    name: str = ""
    price: float = 0.0
    amount: int = 0
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    is_active: Optional[bool] = Field(default=None, alias="isActive")


class Product(_ProductFields):
    """A catalog entry as returned by the service or the local mirror.

    Build instances through :func:`catalog.codec.decode_product` so the
    identity is resolved once, at the boundary.
    """

    created_at: Optional[Any] = Field(default=None, alias="createdAt")
    updated_at: Optional[Any] = Field(default=None, alias="updatedAt")

    def extras(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class ProductDraft(_ProductFields):
    """An in-progress product, possibly carrying an image attachment."""

    model_config = ConfigDict(
        populate_by_name=True, extra="allow", frozen=True, arbitrary_types_allowed=True
    )

    attachment: Optional[Attachment] = None

    @classmethod
    def from_product(cls, product: Product, **changes: Any) -> "ProductDraft":
        """Start editing ``product``; identity and its source are carried over."""

        fields = product.model_dump(exclude={"created_at", "updated_at"})
        fields.update(changes)
        return cls(**fields)

    @classmethod
    def duplicate_of(cls, product: Product) -> "ProductDraft":
        fields = product.model_dump(
            exclude={"identity", "identity_source", "created_at", "updated_at"}
        )
        fields["name"] = f"{product.name}{COPY_SUFFIX}"
        return cls(**fields)


class DeleteResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    deleted: bool
