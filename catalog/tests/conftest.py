import json

import httpx
import pytest

from catalog.client import ProductClient
from catalog.remote import RemoteCatalog
from catalog.services.mirror_store import MirrorStore
from shoplib.storage import JsonStore

BASE_URL = "http://catalog.test/api"

SEED = [
    {"id": 1, "name": "A", "price": 10, "amount": 2},
    {"id": 2, "name": "B", "price": 50, "amount": 0},
]


def offline_handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


def remote_with(handler) -> RemoteCatalog:
    return RemoteCatalog(BASE_URL, timeout_seconds=1.0, transport=httpx.MockTransport(handler))


@pytest.fixture
def make_remote():
    return remote_with


@pytest.fixture
def seed_file(tmp_path):
    path = tmp_path / "products.seed.json"
    path.write_text(json.dumps(SEED), encoding="utf-8")
    return path


@pytest.fixture
def mirror_file(tmp_path):
    return tmp_path / "mirror" / "mirror.json"


@pytest.fixture
def mirror(mirror_file, seed_file):
    return MirrorStore(JsonStore(mirror_file, backups=2), seed_path=seed_file)


@pytest.fixture
def offline_client(mirror):
    return ProductClient(remote_with(offline_handler), mirror)
