"""Application settings -- reads from environment and ``.env`` file.

All bridge configuration lives here: connector credentials, the inbound
route, the bot's invocation name, and the authorization switches.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar

from ..util.env_file import EnvFile
from ..util.singletons import register_singleton

_TRUTHY = ("1", "true", "yes", "on")


def _split_csv(raw: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


class Settings:
    """Runtime configuration sourced from environment variables and ``.env``."""

    _DATA_DIR_ENV: ClassVar[str] = "BOTBRIDGE_DATA_DIR"

    def __init__(self) -> None:
        # Resolve .env path: explicit DOTENV_PATH > data_dir/.env > CWD/.env
        dotenv = os.getenv("DOTENV_PATH")
        if not dotenv:
            data_dir = os.getenv(self._DATA_DIR_ENV)
            dotenv = str(Path(data_dir) / ".env") if data_dir else ".env"
        self.env = EnvFile(dotenv)
        self.reload()

    def reload(self) -> None:
        """Re-read the ``.env`` file and environment variables."""
        e = self._read

        self.bot_app_id: str = e("BOT_APP_ID")
        self.bot_app_password: str = e("BOT_APP_PASSWORD")
        self.bot_app_tenant_id: str = e("BOT_APP_TENANT_ID")
        self.bot_port: int = int(e("BOT_PORT") or "3978")
        self.bot_endpoint: str = e("BOT_ENDPOINT") or "/api/messages"
        self.bot_name: str = e("BOT_NAME") or "hubot"

        self.auth_enabled: bool = e("AUTH_ENABLED").lower() in _TRUTHY
        self.auth_initial_admins: tuple[str, ...] = _split_csv(e("AUTH_INITIAL_ADMINS"))
        self.tenant_allowlist: frozenset[str] = frozenset(_split_csv(e("TENANT_ALLOWLIST")))

    # -- derived paths -----------------------------------------------------

    @property
    def data_dir(self) -> Path:
        return Path(os.getenv(self._DATA_DIR_ENV, str(Path.home() / ".botbridge")))

    @property
    def users_path(self) -> Path:
        return self.data_dir / "users.json"

    @property
    def authorized_users_path(self) -> Path:
        return self.data_dir / "authorized_users.json"

    # -- helpers -----------------------------------------------------------

    def _read(self, key: str) -> str:
        return self.env.read(key) or os.getenv(key, "")

    def ensure_dirs(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton
cfg = Settings()


def _reset_cfg() -> None:
    global cfg
    cfg = Settings()


register_singleton(_reset_cfg)
