"""Durable key/value storage for the catalog client.

The mirror of the product catalog lives in a single JSON document on disk
holding named entries (much like a browser's ``localStorage``). Writes are
atomic and the previous generations are kept as rotating ``.bakN`` files;
when the primary document cannot be read the newest readable backup is used
instead, so an interrupted write never loses the mirror.
"""
from __future__ import annotations

import base64
import hashlib
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterator

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Raised when a persistence operation fails."""


class JsonStore:
    """Named JSON entries persisted in one document with backup recovery."""

    def __init__(self, path: Path | str, backups: int = 2, *, label: str | None = None):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.backups = max(0, backups)
        self.label = label or self.path.name

    # ------------------------------------------------------------------
    # Document I/O
    # ------------------------------------------------------------------
    def _backup_path(self, index: int) -> Path:
        return self.path.with_suffix(self.path.suffix + f".bak{index}")

    def _generations(self) -> Iterator[Path]:
        yield self.path
        for idx in range(1, self.backups + 1):
            yield self._backup_path(idx)

    def _decode(self, blob: bytes) -> Dict[str, Any] | None:
        try:
            data = json.loads(blob.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return None
        return data if isinstance(data, dict) else None

    def _encode(self, data: Dict[str, Any]) -> bytes:
        return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")

    def _read(self, path: Path) -> Dict[str, Any] | None:
        if not path.exists():
            return None
        try:
            blob = path.read_bytes()
        except OSError as exc:  # pragma: no cover - surfaced to callers
            raise StoreError(str(exc)) from exc
        if not blob:
            return {}
        return self._decode(blob)

    def _write(self, data: Dict[str, Any]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with tmp_path.open("wb") as fh:
                fh.write(self._encode(data))
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)
        except OSError as exc:  # pragma: no cover - bubbled up to callers
            raise StoreError(str(exc)) from exc
        finally:
            tmp_path.unlink(missing_ok=True)

    def _rotate_backups(self) -> None:
        for idx in range(self.backups, 0, -1):
            src = self.path if idx == 1 else self._backup_path(idx - 1)
            if src.exists():
                try:
                    os.replace(src, self._backup_path(idx))
                except OSError:
                    continue

    def _load(self) -> Dict[str, Any]:
        for candidate in self._generations():
            data = self._read(candidate)
            if data is None:
                continue
            if candidate != self.path:
                logger.info("Recovered %s from backup %s", self.label, candidate.name)
            return data
        return {}

    def _dump(self, data: Dict[str, Any]) -> None:
        self._rotate_backups()
        self._write(data)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def get(self, key: str, default: Any | None = None) -> Any:
        return self._load().get(key, default)

    def __contains__(self, key: str) -> bool:
        return key in self._load()

    def put(self, key: str, value: Any) -> Any:
        data = self._load()
        data[key] = value
        self._dump(data)
        return value

    def remove(self, key: str) -> bool:
        data = self._load()
        if key not in data:
            return False
        del data[key]
        self._dump(data)
        return True

    def keys(self) -> list[str]:
        return list(self._load())


def _derive_key(secret: str) -> bytes:
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest)


class EncryptedJsonStore(JsonStore):
    """JSON store whose document is encrypted at rest with Fernet.

    Backups are encrypted with the same key, so recovery works exactly as for
    the plain store. A document that fails to decrypt (wrong secret or
    tampering) is treated like a corrupt one.
    """

    def __init__(
        self,
        path: Path | str,
        secret: str,
        backups: int = 2,
        *,
        label: str | None = None,
    ):
        if not secret:
            raise ValueError("secret is required for an encrypted store")
        super().__init__(path, backups=backups, label=label)
        self._fernet = Fernet(_derive_key(secret))

    def _decode(self, blob: bytes) -> Dict[str, Any] | None:
        try:
            decrypted = self._fernet.decrypt(blob)
        except InvalidToken:
            return None
        return super()._decode(decrypted)

    def _encode(self, data: Dict[str, Any]) -> bytes:
        return self._fernet.encrypt(super()._encode(data))
