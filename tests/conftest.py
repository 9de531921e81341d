import pytest

from taskninja.app import create_app
from taskninja.models.task_store import SQLTaskStore


@pytest.fixture
def store(tmp_path):
    s = SQLTaskStore(tmp_path / "tasks.db")
    s.init_schema()
    return s


@pytest.fixture
def app(store):
    return create_app({"TESTING": True, "LIMITER_ENABLED": False}, store=store)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def task_body():
    return {
        "title": "T",
        "description": "D",
        "due_date": "2024-01-01 00:00:00",
        "priority": "high",
        "status": "to-do",
        "category": "c",
    }
