"""Common helpers shared by the catalog client."""

from .storage import JsonStore, EncryptedJsonStore, StoreError  # noqa: F401
from .config import ClientConfig, load_client_config
from .network import build_api_url, normalise_base_url, resource_path

__all__ = [
    "JsonStore",
    "EncryptedJsonStore",
    "StoreError",
    "ClientConfig",
    "load_client_config",
    "build_api_url",
    "normalise_base_url",
    "resource_path",
]
