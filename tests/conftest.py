"""Shared test fixtures."""

from pathlib import Path

import pytest

from ideate.chat.store import ChatStore
from ideate.knowledge.store import KnowledgeStore


@pytest.fixture(autouse=False)
def _no_turso(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure tests use local file, not remote Turso."""
    monkeypatch.setattr("ideate.config.settings.turso_database_url", "")


@pytest.fixture
def chat_store(tmp_path: Path, _no_turso) -> ChatStore:
    """ChatStore backed by a temp database."""
    return ChatStore(db_path=tmp_path / "chat.db")


@pytest.fixture
def knowledge_store(tmp_path: Path, _no_turso) -> KnowledgeStore:
    """KnowledgeStore backed by a temp database."""
    return KnowledgeStore(db_path=tmp_path / "knowledge.db")
