# -*- coding: utf-8 -*-

"""
API Key Management - Storage and Verification.

Maps bearer API keys to user identities, with JSON file persistence.
The resolved user id is the task owner for every task operation.
"""

import json
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from loguru import logger


class ApiKeyEntry:
    """Single API key entry owned by one user."""

    def __init__(self, id: str, user_id: str, name: str, key: str, created_at: str, enabled: bool = True):
        self.id = id
        self.user_id = user_id
        self.name = name
        self.key = key
        self.created_at = created_at
        self.enabled = enabled

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "key": self.key,
            "created_at": self.created_at,
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ApiKeyEntry":
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            name=data["name"],
            key=data["key"],
            created_at=data["created_at"],
            enabled=data.get("enabled", True),
        )


class ApiKeyManager:
    """Resolves API keys to user ids. Keys persist to JSON when a storage path is set."""

    def __init__(
        self,
        storage_path: Optional[str] = "apikeys.json",
        seed_key: Optional[str] = None,
        seed_user: str = "default",
    ):
        self._keys: Dict[str, ApiKeyEntry] = {}
        self._storage_path = Path(storage_path) if storage_path else None
        self._load()
        if seed_key:
            self._seed(seed_key, seed_user)

    def _generate_key(self) -> str:
        """Generate a new API key with tf- prefix."""
        return f"tf-{secrets.token_hex(24)}"

    def _generate_id(self) -> str:
        """Generate a short unique ID."""
        return secrets.token_hex(4)

    def _load(self) -> None:
        """Load keys from the JSON file if present."""
        if not self._storage_path or not self._storage_path.exists():
            return
        try:
            data = json.loads(self._storage_path.read_text(encoding="utf-8"))
            for entry in data.get("keys", []):
                key_entry = ApiKeyEntry.from_dict(entry)
                self._keys[key_entry.id] = key_entry
            logger.info(f"Loaded {len(self._keys)} API key(s) from {self._storage_path}")
        except Exception as e:
            logger.error(f"Failed to load API keys from {self._storage_path}: {e}")

    def _seed(self, key: str, user_id: str) -> None:
        """Register the key from the environment unless it is already known."""
        if any(entry.key == key for entry in self._keys.values()):
            return
        entry = ApiKeyEntry(
            id=self._generate_id(),
            user_id=user_id,
            name="Default (from env)",
            key=key,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        self._keys[entry.id] = entry
        logger.info(f"Seeded API key for user={user_id} from environment")
        self._save()

    def _save(self) -> None:
        """Persist keys to the JSON file."""
        if not self._storage_path:
            return
        data = {"keys": [entry.to_dict() for entry in self._keys.values()]}
        try:
            self._storage_path.write_text(
                json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8"
            )
        except Exception as e:
            logger.error(f"Failed to save API keys: {e}")

    def create_key(self, user_id: str, name: str) -> dict:
        """Create a new API key for user_id. Returns the full key (shown only once)."""
        entry = ApiKeyEntry(
            id=self._generate_id(),
            user_id=user_id,
            name=name,
            key=self._generate_key(),
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        self._keys[entry.id] = entry
        self._save()
        logger.info(f"API key created: id={entry.id}, user={user_id}, name={name}")
        return entry.to_dict()

    def disable_key(self, key_id: str) -> bool:
        entry = self._keys.get(key_id)
        if not entry:
            return False
        entry.enabled = False
        self._save()
        logger.info(f"API key disabled: id={key_id}")
        return True

    def verify_key(self, bearer_token: str) -> Optional[str]:
        """Return the user id owning an enabled key, or None."""
        if not bearer_token:
            return None
        for entry in self._keys.values():
            if entry.enabled and secrets.compare_digest(entry.key.encode("utf-8"), bearer_token.encode("utf-8")):
                return entry.user_id
        return None
