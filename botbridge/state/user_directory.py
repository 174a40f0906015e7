"""User directory -- JSON-file-backed, keyed by channel user id."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import replace
from pathlib import Path

from ..config.settings import cfg
from ..messaging.events import User

logger = logging.getLogger(__name__)


class UserDirectory:
    """Idempotent upsert store for :class:`User` records."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or cfg.users_path
        self._lock = threading.Lock()
        self._users: dict[str, User] = {}
        self._load()

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            raw = json.loads(self._path.read_text())
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Failed to load user directory: %s", exc)
            return
        self._users = {uid: User.from_dict(data) for uid, data in raw.items()}

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps({uid: u.to_dict() for uid, u in self._users.items()}, indent=2)
        )

    def user_for_id(self, user_id: str, **attrs: str) -> User:
        """Return the user for *user_id*, creating or updating it.

        Empty attribute values never overwrite stored ones.
        """
        updates = {k: v for k, v in attrs.items() if v}
        with self._lock:
            current = self._users.get(user_id)
            user = replace(current, **updates) if current else User(id=user_id, **updates)
            if user != current:
                self._users[user_id] = user
                self._save()
        return user

    def get(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def user_for_name(self, name: str) -> User | None:
        lowered = name.lower()
        for user in self._users.values():
            if user.name.lower() == lowered:
                return user
        return None
