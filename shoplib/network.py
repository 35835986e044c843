"""URL helpers shared by the catalog client."""
from __future__ import annotations

from urllib.parse import quote


def normalise_base_url(raw_base: str) -> str:
    """Return ``raw_base`` stripped of whitespace and trailing slashes."""

    base = (raw_base or "").strip().rstrip("/")
    if not base:
        raise ValueError("base URL is required")
    if not base.startswith(("http://", "https://")):
        raise ValueError("base URL must be http or https")
    return base


def build_api_url(base: str, path: str = "/") -> str:
    """Combine a base URL with a path while avoiding double slashes."""

    base = (base or "").rstrip("/")
    if not path:
        return base
    suffix = path if path.startswith("/") else f"/{path}"
    return f"{base}{suffix}"


def resource_path(collection: str, identity: str | None = None) -> str:
    """Return ``/collection`` or ``/collection/<identity>`` with the id escaped."""

    path = "/" + collection.strip("/")
    if identity is None:
        return path
    return f"{path}/{quote(str(identity), safe='')}"
