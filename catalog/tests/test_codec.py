import pytest

from catalog.codec import decode_product, encode_for_wire, resolve_identity
from catalog.errors import IdentityMissing
from catalog.models import Attachment, ProductDraft


def test_primary_field_wins_over_fallback():
    assert resolve_identity({"_id": "abc123", "id": 7}) == "abc123"


def test_fallback_field_is_coerced_to_string():
    assert resolve_identity({"id": 7, "name": "Mug"}) == "7"


def test_new_record_without_identity_is_not_an_error():
    assert resolve_identity({"name": "Fresh"}) is None


def test_mutation_without_identity_fails_fast():
    with pytest.raises(IdentityMissing):
        resolve_identity({"name": "Fresh"}, for_mutation=True)
    with pytest.raises(IdentityMissing):
        resolve_identity(ProductDraft(name="Fresh"), for_mutation=True)


def test_decoded_identity_is_stable_and_tagged():
    product = decode_product({"_id": "665f", "name": "Lamp", "price": "1290", "amount": 3})
    assert product.identity == "665f"
    assert product.identity_source == "_id"
    assert resolve_identity(product) == resolve_identity(product) == "665f"
    assert product.price == pytest.approx(1290.0)


def test_decode_keeps_unknown_fields_and_aliases():
    product = decode_product(
        {"id": 3, "name": "Tote", "imageUrl": "https://cdn/x.png", "isActive": True, "sku": "T-1"}
    )
    assert product.image_url == "https://cdn/x.png"
    assert product.is_active is True
    assert product.extras() == {"sku": "T-1"}
    assert product.identity == "3"


def test_json_encoding_without_attachment():
    product = decode_product({"_id": "a1", "name": "Mug", "price": 190, "amount": 4, "imageUrl": "u"})
    body = encode_for_wire(ProductDraft.from_product(product, amount=5))
    assert not body.is_multipart
    assert body.json == {"_id": "a1", "name": "Mug", "price": 190.0, "amount": 5, "imageUrl": "u"}
    assert body.request_kwargs() == {"json": body.json}


def test_partial_draft_only_encodes_set_fields():
    body = encode_for_wire(ProductDraft(identity="9", identity_source="id", amount=0))
    assert body.json == {"amount": 0, "id": "9"}


def test_multipart_encoding_with_attachment_drops_image_url():
    draft = ProductDraft(
        identity="a1",
        identity_source="_id",
        name="Mug",
        price=190.0,
        amount=4,
        description="Blue",
        image_url="https://old/image.png",
        attachment=Attachment("mug.png", "image/png", b"\x89PNG"),
    )
    body = encode_for_wire(draft)
    assert body.is_multipart
    assert body.files == {"image": ("mug.png", b"\x89PNG", "image/png")}
    assert body.data == {"name": "Mug", "price": "190", "amount": "4", "description": "Blue", "_id": "a1"}
    assert "imageUrl" not in body.data
    assert set(body.request_kwargs()) == {"data", "files"}


def test_unknown_draft_fields_survive_both_encodings():
    draft = ProductDraft(identity="a1", identity_source="_id", name="Mug", isRecommended=True)
    assert encode_for_wire(draft).json == {"name": "Mug", "isRecommended": True, "_id": "a1"}

    with_image = ProductDraft.from_product(
        decode_product({"_id": "a1", "name": "Mug", "isRecommended": True}),
        attachment=Attachment("mug.png", "image/png", b"\x89PNG"),
    )
    body = encode_for_wire(with_image)
    assert body.data["isRecommended"] == "true"
    assert body.data["name"] == "Mug"


def test_duplicate_keeps_unknown_fields():
    original = decode_product({"_id": "a1", "name": "Mug", "price": 190, "isRecommended": True})
    copy = ProductDraft.duplicate_of(original)
    assert copy.identity is None
    assert encode_for_wire(copy).json["isRecommended"] is True
