"""Storage-side services for the catalog client."""

from .mirror_store import MirrorStore, load_seed

__all__ = ["MirrorStore", "load_seed"]
