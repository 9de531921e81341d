from datetime import datetime, timezone

import pytest

from taskninja.models.task_model import Task
from taskninja.models.task_store import RecordNotFound, SQLTaskStore


def make_task(**overrides):
    fields = dict(
        title="Write report",
        description="Quarterly numbers",
        due_date=datetime(2024, 3, 1, 17, 0, tzinfo=timezone.utc),
        priority="medium",
        status="to-do",
        category="work",
    )
    fields.update(overrides)
    return Task(**fields)


class UntouchableStore(SQLTaskStore):
    """Fails the test if any operation reaches the database."""

    def __init__(self):
        super().__init__(":memory:")
        self.calls = 0

    def connect(self):
        self.calls += 1
        raise AssertionError("store should not have been queried")


def test_insert_assigns_server_fields(store):
    before = datetime.now(timezone.utc).replace(microsecond=0)
    task = make_task()
    store.insert(task)

    assert task.id >= 1
    assert task.user_id == 1
    assert task.created_at >= before


def test_ids_are_sequential_and_never_reused(store):
    first = make_task()
    second = make_task()
    store.insert(first)
    store.insert(second)
    store.delete(second.id)

    third = make_task()
    store.insert(third)
    assert second.id == first.id + 1
    assert third.id == second.id + 1


def test_get_round_trips_fields(store):
    task = make_task()
    store.insert(task)

    fetched = store.get(task.id)
    assert fetched == task


def test_get_missing_raises(store):
    with pytest.raises(RecordNotFound):
        store.get(999)


@pytest.mark.parametrize("task_id", [0, -1, -42])
def test_non_positive_ids_never_reach_the_store(task_id):
    stub = UntouchableStore()
    with pytest.raises(RecordNotFound):
        stub.get(task_id)
    with pytest.raises(RecordNotFound):
        stub.delete(task_id)
    with pytest.raises(RecordNotFound):
        stub.update(make_task(id=task_id))
    assert stub.calls == 0


def test_update_persists_all_mutable_fields(store):
    task = make_task()
    store.insert(task)

    task.title = "Rewrite report"
    task.status = "completed"
    task.due_date = datetime(2025, 1, 1, tzinfo=timezone.utc)
    store.update(task)

    fetched = store.get(task.id)
    assert fetched.title == "Rewrite report"
    assert fetched.status == "completed"
    assert fetched.due_date == datetime(2025, 1, 1, tzinfo=timezone.utc)
    assert fetched.created_at == task.created_at


def test_update_missing_raises(store):
    with pytest.raises(RecordNotFound):
        store.update(make_task(id=12345))


def test_delete_then_get_raises(store):
    task = make_task()
    store.insert(task)
    store.delete(task.id)

    with pytest.raises(RecordNotFound):
        store.get(task.id)
    with pytest.raises(RecordNotFound):
        store.delete(task.id)


def test_list_orders_by_id(store):
    for title in ("a", "b", "c"):
        store.insert(make_task(title=title))

    assert [t.title for t in store.list()] == ["a", "b", "c"]


def test_default_user_id_is_configurable(tmp_path):
    s = SQLTaskStore(tmp_path / "other.db", default_user_id=7)
    s.init_schema()
    task = make_task()
    s.insert(task)
    assert s.get(task.id).user_id == 7
