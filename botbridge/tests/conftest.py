"""Shared pytest fixtures for botbridge tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from botbuilder.schema import ChannelAccount

from botbridge.state.authorized_users import AuthorizedUserStore
from botbridge.state.user_directory import UserDirectory


@pytest.fixture(autouse=True)
def _isolate_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setenv("BOTBRIDGE_DATA_DIR", str(data_dir))
    monkeypatch.setenv("DOTENV_PATH", str(tmp_path / ".env"))
    return data_dir


@pytest.fixture(autouse=True)
def _reset_singletons(_isolate_data_dir: Path):
    from botbridge.util.singletons import reset_all_singletons

    reset_all_singletons()
    yield
    reset_all_singletons()


@pytest.fixture()
def data_dir(_isolate_data_dir: Path) -> Path:
    return _isolate_data_dir


@pytest.fixture()
def users(data_dir: Path) -> UserDirectory:
    return UserDirectory(data_dir / "users.json")


@pytest.fixture()
def authorized(data_dir: Path) -> AuthorizedUserStore:
    return AuthorizedUserStore(data_dir / "authorized_users.json")


@pytest.fixture()
def roster() -> AsyncMock:
    fetcher = AsyncMock()
    fetcher.fetch.return_value = [
        ChannelAccount(id="u1", name="Alice", aad_object_id="obj1"),
        ChannelAccount(id="u2", name="Bob", aad_object_id="obj2"),
    ]
    return fetcher
