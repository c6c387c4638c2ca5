"""
Pytest configuration and fixtures for git-comments tests
"""

import os

import pytest
from fastapi.testclient import TestClient

# Never reach for Firestore from tests
os.environ.setdefault("GIT_COMMENTS_KV_BACKEND", "memory")

from main import app  # noqa: E402
from routers.comments import get_comment_store  # noqa: E402
from services.comment_store import CommentStore  # noqa: E402
from services.comments_api import CommentsApi  # noqa: E402
from services.git_storage import GitStorage  # noqa: E402
from services.git_terminal import GitTerminal  # noqa: E402
from services.kv import MemoryKeyValueStore  # noqa: E402

POST_ID = "2024-05-01-hello-world"


@pytest.fixture
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def store(kv) -> CommentStore:
    return CommentStore(kv)


@pytest.fixture
def client(store):
    """TestClient wired to a fresh in-memory comment store."""
    app.dependency_overrides[get_comment_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def api(client) -> CommentsApi:
    return CommentsApi(client)


@pytest.fixture
def storage(tmp_path) -> GitStorage:
    return GitStorage(tmp_path / "git-comments.json")


@pytest.fixture
def terminal(api, storage) -> GitTerminal:
    return GitTerminal(api, storage, POST_ID)


