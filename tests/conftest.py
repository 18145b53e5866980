"""Shared fixtures: an in-memory access store, a controllable clock and an app on SQLite."""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from notehub.core.config import Settings
from notehub.core.security import SessionTokenService
from notehub.domains.access.entities import Lookup, NotebookAccessFacts, Role, Visibility
from notehub.domains.identity.entities import Authenticated, User
from notehub.main import create_app

SECRET = "test-signing-secret"
START = datetime(2024, 9, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeAccessStore:
    """Dict-backed store with the same read contract as the SQL repository."""

    def __init__(self) -> None:
        self.notebooks: Dict[int, Tuple[int, Visibility]] = {}
        self.grants: List[Tuple[int, int, Role]] = []
        self.pages: Dict[int, int] = {}
        self.questions: Dict[int, int] = {}
        self.answers: Dict[int, int] = {}
        self.messages: Dict[int, int] = {}
        self.failing: set = set()
        self.calls: List[Tuple[str, int]] = []

    def add_notebook(self, notebook_id: int, owner_id: int, visibility: Visibility = Visibility.PRIVATE) -> None:
        self.notebooks[notebook_id] = (owner_id, visibility)

    def set_visibility(self, notebook_id: int, visibility: Visibility) -> None:
        owner_id, _ = self.notebooks[notebook_id]
        self.notebooks[notebook_id] = (owner_id, visibility)

    def grant(self, notebook_id: int, user_id: int, role: Role) -> None:
        self.grants.append((notebook_id, user_id, role))

    def revoke(self, notebook_id: int, user_id: int) -> None:
        self.grants = [g for g in self.grants if (g[0], g[1]) != (notebook_id, user_id)]

    async def get_access_facts(self, notebook_id: int, user_id: Optional[int]) -> Lookup[NotebookAccessFacts]:
        self.calls.append(("get_access_facts", notebook_id))
        if "get_access_facts" in self.failing:
            return Lookup.failed("connection reset")
        if notebook_id not in self.notebooks:
            return Lookup.missing()

        owner_id, visibility = self.notebooks[notebook_id]
        roles = frozenset(
            role for nb, uid, role in self.grants if nb == notebook_id and uid == user_id
        )
        return Lookup.found(NotebookAccessFacts(notebook_id, owner_id, visibility, roles))

    async def get_page_notebook_id(self, page_id: int) -> Lookup[int]:
        return self._parent("get_page_notebook_id", self.pages, page_id)

    async def get_question_page_id(self, question_id: int) -> Lookup[int]:
        return self._parent("get_question_page_id", self.questions, question_id)

    async def get_answer_question_id(self, answer_id: int) -> Lookup[int]:
        return self._parent("get_answer_question_id", self.answers, answer_id)

    async def get_message_notebook_id(self, message_id: int) -> Lookup[int]:
        return self._parent("get_message_notebook_id", self.messages, message_id)

    def _parent(self, name: str, table: Dict[int, int], key: int) -> Lookup[int]:
        self.calls.append((name, key))
        if name in self.failing:
            return Lookup.failed("connection reset")
        if key not in table:
            return Lookup.missing()
        return Lookup.found(table[key])


OWNER = Authenticated(user_id=1, email="alice@example.com", name="Alice")
VIEWER = Authenticated(user_id=2, email="bob@example.com", name="Bob")
EDITOR = Authenticated(user_id=3, email="carol@example.com", name="Carol")
STRANGER = Authenticated(user_id=4, email="dave@example.com", name="Dave")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tokens(clock: FakeClock) -> SessionTokenService:
    return SessionTokenService(SECRET, ttl=timedelta(hours=24), clock=clock)


@pytest.fixture
def store() -> FakeAccessStore:
    """Notebook 7 owned by Alice with Bob as Viewer and Carol as Editor, one page, question and answer"""
    store = FakeAccessStore()
    store.add_notebook(7, owner_id=OWNER.user_id)
    store.grant(7, VIEWER.user_id, Role.VIEWER)
    store.grant(7, EDITOR.user_id, Role.EDITOR)
    store.pages[70] = 7
    store.questions[700] = 70
    store.answers[7000] = 700
    store.messages[77] = 7
    return store


def bearer(tokens: SessionTokenService, identity: Authenticated) -> str:
    user = User(id=identity.user_id, name=identity.name, email=identity.email, password_hash="")
    return f"Bearer {tokens.issue(user)}"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'notehub.db'}",
        create_schema=True,
        jwt_secret=SECRET,
        bcrypt_rounds=4,
        log_level="WARNING"
    )


@pytest.fixture
def client(settings: Settings):
    with TestClient(create_app(settings=settings)) as test_client:
        yield test_client
