"""Authorized-identity store -- ``tenant_id -> {object_id: is_admin}``."""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterable
from pathlib import Path

from ..config.settings import cfg

logger = logging.getLogger(__name__)

DEFAULT_TENANT = "*"


class AuthorizedUserStore:
    """JSON-file-backed map of authorized directory object ids per tenant.

    Identities seeded without a tenant land under :data:`DEFAULT_TENANT`.
    Lookups consider every tenant.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or cfg.authorized_users_path
        self._lock = threading.Lock()
        self._tenants: dict[str, dict[str, bool]] = {}
        self._load()

    def _load(self) -> None:
        if self._path.exists():
            try:
                self._tenants = json.loads(self._path.read_text())
            except (json.JSONDecodeError, OSError) as exc:
                logger.warning("Failed to load authorized users: %s", exc)

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._tenants, indent=2))

    @property
    def is_empty(self) -> bool:
        return not any(self._tenants.values())

    def seed(self, admins: Iterable[str], tenant_id: str = DEFAULT_TENANT) -> bool:
        """Store *admins* as administrators unless the store already has entries."""
        with self._lock:
            if not self.is_empty:
                return False
            self._tenants[tenant_id] = {object_id: True for object_id in admins}
            self._save()
        logger.info("[auth] Seeded %d admin identities", len(self._tenants[tenant_id]))
        return True

    def authorize(self, object_id: str, tenant_id: str = DEFAULT_TENANT, *, admin: bool = False) -> None:
        with self._lock:
            self._tenants.setdefault(tenant_id, {})[object_id] = admin
            self._save()

    def is_authorized(self, object_id: str) -> bool:
        return any(object_id in members for members in self._tenants.values())

    def admins(self) -> list[str]:
        found = {oid for members in self._tenants.values() for oid, admin in members.items() if admin}
        return sorted(found)
