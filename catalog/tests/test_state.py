import asyncio

import pytest

from catalog.lifecycle import LoadStatus
from catalog.models import ProductDraft
from catalog.state import CatalogState


@pytest.mark.asyncio
async def test_load_replaces_snapshot(offline_client):
    state = CatalogState(offline_client)
    await state.ensure_loaded()

    assert [p.identity for p in state.items] == ["1", "2"]
    assert state.lifecycle.status is LoadStatus.SUCCEEDED
    assert await state.ensure_loaded() is None


@pytest.mark.asyncio
async def test_mutations_flow_into_snapshot(offline_client):
    state = CatalogState(offline_client)
    await state.load()

    created = await state.add(ProductDraft(name="C", price=30, amount=1))
    assert state.items[-1] == created

    await state.save(ProductDraft(identity="1", identity_source="id", amount=9), partial=True)
    assert next(p for p in state.items if p.identity == "1").amount == 9

    await state.remove("2")
    assert [p.identity for p in state.items] == ["1", "3"]


@pytest.mark.asyncio
async def test_duplicate_appends_copy(offline_client):
    state = CatalogState(offline_client)
    await state.load()
    copy = await state.duplicate(state.items[0])
    assert copy.name == "A (copy)"
    assert len(state.items) == 3


@pytest.mark.asyncio
async def test_results_after_close_are_discarded(offline_client):
    state = CatalogState(offline_client)
    await state.load()

    pending = asyncio.create_task(state.add(ProductDraft(name="Late")))
    state.close()
    created = await pending

    assert created.name == "Late"
    assert [p.name for p in state.items] == ["A", "B"]


@pytest.mark.asyncio
async def test_failed_load_keeps_previous_snapshot(offline_client, monkeypatch):
    state = CatalogState(offline_client)
    await state.load()

    async def broken():
        raise RuntimeError("disk gone")

    monkeypatch.setattr(offline_client, "list", broken)
    await state.load()

    assert state.lifecycle.status is LoadStatus.FAILED
    assert state.lifecycle.state.error == "disk gone"
    assert len(state.items) == 2
