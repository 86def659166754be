"""Key pair lifecycle for the client: generate, persist, load, clear."""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple

from fhe_core.bfv_scheme import BFVScheme
from fhe_core.ciphertext import HomomorphicScheme
from fhe_core.errors import CryptoInitError
from fhe_core.protocol import KeyPair
from streamlit_app.config import CLIENT_IDENTITY, KEY_DIR

LOGGER = logging.getLogger(__name__)


class KeyStore(Protocol):
    def save(self, key_pair: KeyPair, key_id: str) -> None: ...

    def load(self) -> Optional[KeyPair]: ...

    def delete(self) -> None: ...


class FileKeyStore:
    """One key pair per identity under ``directory``.

    Files: ``<identity>-public.seal``, ``<identity>-secret.seal`` (0600) and
    ``<identity>-meta.json``.
    """

    def __init__(self, directory: str | Path = KEY_DIR, identity: str = CLIENT_IDENTITY) -> None:
        self.directory = Path(directory)
        self.identity = identity

    @property
    def public_path(self) -> Path:
        return self.directory / f"{self.identity}-public.seal"

    @property
    def secret_path(self) -> Path:
        return self.directory / f"{self.identity}-secret.seal"

    @property
    def meta_path(self) -> Path:
        return self.directory / f"{self.identity}-meta.json"

    def _ensure_dir(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def exists(self) -> bool:
        return self.public_path.exists() and self.secret_path.exists()

    def save(self, key_pair: KeyPair, key_id: str) -> None:
        self._ensure_dir()
        self.public_path.write_bytes(key_pair.public_key)
        fd = os.open(self.secret_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as handle:
            handle.write(key_pair.private_key)
        os.chmod(self.secret_path, 0o600)
        meta = {"key_id": key_id, "created_at": datetime.now(timezone.utc).isoformat()}
        self.meta_path.write_text(json.dumps(meta))

    def load(self) -> Optional[KeyPair]:
        if not self.exists():
            return None
        return KeyPair(public_key=self.public_path.read_bytes(), private_key=self.secret_path.read_bytes())

    def metadata(self) -> Dict[str, str]:
        if not self.meta_path.exists():
            return {}
        return json.loads(self.meta_path.read_text())

    def delete(self) -> None:
        for path in (self.public_path, self.secret_path, self.meta_path):
            path.unlink(missing_ok=True)


class MemoryKeyStore:
    """Keeps the key pair in process memory (tests, ephemeral sessions)."""

    def __init__(self) -> None:
        self._stored: Optional[Tuple[KeyPair, str]] = None

    def save(self, key_pair: KeyPair, key_id: str) -> None:
        self._stored = (key_pair, key_id)

    def load(self) -> Optional[KeyPair]:
        return self._stored[0] if self._stored else None

    def delete(self) -> None:
        self._stored = None


class KeyManager:
    """Owns the client's key pair. The private key never leaves this object's store."""

    def __init__(self, scheme: Optional[HomomorphicScheme] = None, store: Optional[KeyStore] = None) -> None:
        self.scheme = scheme or BFVScheme()
        self.store: KeyStore = store if store is not None else FileKeyStore()
        self.active: Optional[KeyPair] = None

    @property
    def key_id(self) -> Optional[str]:
        return self.scheme.key_id(self.active.public_key) if self.active else None

    def generate(self) -> KeyPair:
        try:
            key_pair = self.scheme.generate_keypair()
        except CryptoInitError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise CryptoInitError(f"Key generation failed: {exc}") from exc
        self.active = key_pair
        return key_pair

    def persist(self, key_pair: KeyPair) -> None:
        key_id = self.scheme.key_id(key_pair.public_key)
        self.store.save(key_pair, key_id)
        self.active = key_pair
        LOGGER.info("🔐 Stored key pair key_id=%s", key_id)

    def load_if_present(self) -> Optional[KeyPair]:
        key_pair = self.store.load()
        if key_pair is not None:
            self.active = key_pair
            LOGGER.info("🔑 Loaded key pair key_id=%s", self.scheme.key_id(key_pair.public_key))
        return key_pair

    def ensure(self) -> KeyPair:
        """Load the stored key pair or generate and persist a new one."""
        key_pair = self.load_if_present()
        if key_pair is None:
            key_pair = self.generate()
            self.persist(key_pair)
        return key_pair

    def clear(self) -> None:
        self.store.delete()
        self.active = None
        LOGGER.info("🧹 Cleared stored key pair")
