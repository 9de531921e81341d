"""Persistence contract for tasks and its backends.

Ids start at 1, so every operation that takes an id rejects anything lower
with RecordNotFound before touching the backend.
"""
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List

from pymongo import ReturnDocument

from taskninja.models.custom_time import as_utc, format_time, parse_time
from taskninja.models.task_model import Task


class RecordNotFound(Exception):
    def __init__(self, message="record not found"):
        super().__init__(message)


class TaskStore(ABC):
    @abstractmethod
    def insert(self, task: Task) -> None:
        """Persist a new task and fill in id, created_at and user_id."""

    @abstractmethod
    def get(self, task_id: int) -> Task:
        """Return the task with the given id or raise RecordNotFound."""

    @abstractmethod
    def update(self, task: Task) -> None:
        """Overwrite every mutable field of the stored task."""

    @abstractmethod
    def delete(self, task_id: int) -> None:
        """Remove the task with the given id or raise RecordNotFound."""

    @abstractmethod
    def list(self) -> List[Task]:
        """Return every task ordered by id."""


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS tasks (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    created_at  TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    title       TEXT NOT NULL,
    description TEXT NOT NULL,
    due_date    TEXT NOT NULL, -- YYYY-MM-DD HH:MM:SS, UTC
    priority    TEXT NOT NULL,
    status      TEXT NOT NULL,
    category    TEXT NOT NULL,
    user_id     INTEGER NOT NULL
);
"""

_COLUMNS = "id, created_at, title, description, due_date, priority, status, category, user_id"


def _row_to_task(row: sqlite3.Row) -> Task:
    return Task(
        id=int(row["id"]),
        created_at=parse_time(row["created_at"]),
        title=row["title"],
        description=row["description"],
        due_date=parse_time(row["due_date"]),
        priority=row["priority"],
        status=row["status"],
        category=row["category"],
        user_id=int(row["user_id"]),
    )


class SQLTaskStore(TaskStore):
    """Relational backend. One short-lived connection per operation."""

    def __init__(self, db_path, default_user_id=1):
        self.db_path = Path(db_path)
        self.default_user_id = default_user_id

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path, timeout=5.0)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def init_schema(self) -> None:
        with self.connect() as conn:
            conn.executescript(SCHEMA_SQL)

    def insert(self, task: Task) -> None:
        args = (
            task.title,
            task.description,
            format_time(task.due_date),
            task.priority,
            task.status,
            task.category,
            self.default_user_id,
        )
        with self.connect() as conn:
            cur = conn.execute(
                """
                INSERT INTO tasks (title, description, due_date, priority, status, category, user_id)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                args,
            )
            row = conn.execute(
                "SELECT id, created_at, user_id FROM tasks WHERE id = ?", (cur.lastrowid,)
            ).fetchone()
        task.id = int(row["id"])
        task.created_at = parse_time(row["created_at"])
        task.user_id = int(row["user_id"])

    def get(self, task_id: int) -> Task:
        if task_id < 1:
            raise RecordNotFound()
        with self.connect() as conn:
            row = conn.execute(f"SELECT {_COLUMNS} FROM tasks WHERE id = ?", (task_id,)).fetchone()
        if row is None:
            raise RecordNotFound()
        return _row_to_task(row)

    def update(self, task: Task) -> None:
        if task.id is None or task.id < 1:
            raise RecordNotFound()
        args = (
            task.title,
            task.description,
            format_time(task.due_date),
            task.priority,
            task.status,
            task.category,
            task.id,
        )
        with self.connect() as conn:
            cur = conn.execute(
                """
                UPDATE tasks
                SET title = ?, description = ?, due_date = ?, priority = ?, status = ?, category = ?
                WHERE id = ?
                """,
                args,
            )
            if cur.rowcount == 0:
                raise RecordNotFound()
            row = conn.execute("SELECT user_id FROM tasks WHERE id = ?", (task.id,)).fetchone()
        task.user_id = int(row["user_id"])

    def delete(self, task_id: int) -> None:
        if task_id < 1:
            raise RecordNotFound()
        with self.connect() as conn:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            if cur.rowcount == 0:
                raise RecordNotFound()

    def list(self) -> List[Task]:
        with self.connect() as conn:
            rows = conn.execute(f"SELECT {_COLUMNS} FROM tasks ORDER BY id ASC").fetchall()
        return [_row_to_task(r) for r in rows]


def _doc_to_task(doc) -> Task:
    return Task(
        id=int(doc["_id"]),
        created_at=as_utc(doc["created_at"]),
        title=doc["title"],
        description=doc["description"],
        due_date=as_utc(doc["due_date"]),
        priority=doc["priority"],
        status=doc["status"],
        category=doc["category"],
        user_id=int(doc["user_id"]),
    )


class MongoTaskStore(TaskStore):
    """Document backend. Integer ids come from a counter document."""

    def __init__(self, db, default_user_id=1):
        self.db = db
        self.default_user_id = default_user_id

    def _next_id(self) -> int:
        counter = self.db.counters.find_one_and_update(
            {"_id": "tasks"},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(counter["seq"])

    def insert(self, task: Task) -> None:
        doc = {
            "_id": self._next_id(),
            "created_at": datetime.now(timezone.utc).replace(microsecond=0),
            "title": task.title,
            "description": task.description,
            "due_date": task.due_date,
            "priority": task.priority,
            "status": task.status,
            "category": task.category,
            "user_id": self.default_user_id,
        }
        self.db.tasks.insert_one(doc)
        task.id = doc["_id"]
        task.created_at = doc["created_at"]
        task.user_id = doc["user_id"]

    def get(self, task_id: int) -> Task:
        if task_id < 1:
            raise RecordNotFound()
        doc = self.db.tasks.find_one({"_id": task_id})
        if doc is None:
            raise RecordNotFound()
        return _doc_to_task(doc)

    def update(self, task: Task) -> None:
        if task.id is None or task.id < 1:
            raise RecordNotFound()
        updates = {
            "title": task.title,
            "description": task.description,
            "due_date": task.due_date,
            "priority": task.priority,
            "status": task.status,
            "category": task.category,
        }
        res = self.db.tasks.find_one_and_update(
            {"_id": task.id},
            {"$set": updates},
            projection={"user_id": True},
            return_document=ReturnDocument.AFTER,
        )
        if not res:
            raise RecordNotFound()
        task.user_id = int(res["user_id"])

    def delete(self, task_id: int) -> None:
        if task_id < 1:
            raise RecordNotFound()
        res = self.db.tasks.delete_one({"_id": task_id})
        if res.deleted_count == 0:
            raise RecordNotFound()

    def list(self) -> List[Task]:
        return [_doc_to_task(d) for d in self.db.tasks.find().sort("_id", 1)]
