"""Configuration helpers for the catalog client.

Values come from the process environment, optionally primed from a ``.env``
file next to the application. Centralising the lookups here lets tests and
embedding applications pass an explicit mapping instead of patching globals.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
import os

from dotenv import load_dotenv

from .network import normalise_base_url

DEFAULT_BASE_URL = "http://localhost:3000/api/"


@dataclass(frozen=True)
class ClientConfig:
    """Strongly typed configuration for the catalog client."""

    base_dir: Path
    api_base_url: str
    timeout_seconds: float
    mirror_path: Path
    mirror_key: str
    mirror_backups: int
    mirror_secret: str
    seed_path: Optional[Path]
    export_dir: Path

    @property
    def mirror_encrypted(self) -> bool:
        return bool(self.mirror_secret)


def _resolve_path(base_dir: Path, raw: str | None, default: Optional[Path]) -> Optional[Path]:
    raw = (raw or "").strip()
    if not raw:
        return default
    path = Path(raw).expanduser()
    return path if path.is_absolute() else base_dir / path


def _positive_float(raw: str, name: str) -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive")
    return value


def load_client_config(base_dir: Path, env: Mapping[str, str] | None = None) -> ClientConfig:
    """Load client configuration from the given base directory and env mapping."""

    base_dir = Path(base_dir)
    if env is None:
        load_dotenv(base_dir / ".env")
    env_map = dict(os.environ if env is None else env)

    api_base_url = normalise_base_url(env_map.get("CATALOG_API_BASE_URL", DEFAULT_BASE_URL))
    timeout_seconds = _positive_float(
        env_map.get("CATALOG_TIMEOUT_SECONDS", "10"), "CATALOG_TIMEOUT_SECONDS"
    )
    mirror_key = env_map.get("CATALOG_MIRROR_KEY", "products").strip() or "products"
    mirror_backups = max(0, int(env_map.get("CATALOG_MIRROR_BACKUPS", "2")))

    return ClientConfig(
        base_dir=base_dir,
        api_base_url=api_base_url,
        timeout_seconds=timeout_seconds,
        mirror_path=_resolve_path(base_dir, env_map.get("CATALOG_MIRROR_PATH"), base_dir / "mirror.json"),
        mirror_key=mirror_key,
        mirror_backups=mirror_backups,
        mirror_secret=env_map.get("CATALOG_MIRROR_SECRET", "").strip(),
        seed_path=_resolve_path(base_dir, env_map.get("CATALOG_SEED_PATH"), None),
        export_dir=_resolve_path(base_dir, env_map.get("CATALOG_EXPORT_DIR"), base_dir / "exports"),
    )
