from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict

from taskninja.models.custom_time import format_time, parse_time
from taskninja.utils.validator import Validator

# Business rule, not configurable: due dates lie strictly inside this window
DUE_DATE_AFTER = datetime(2023, 10, 7, tzinfo=timezone.utc)
DUE_DATE_BEFORE = datetime(2060, 1, 1, tzinfo=timezone.utc)

WireTime = Annotated[datetime, BeforeValidator(parse_time)]


@dataclass
class Task:
    title: str = ""
    description: str = ""
    due_date: Optional[datetime] = None
    priority: str = ""  # low | medium | high
    status: str = ""  # to-do | in-progress | completed
    category: str = ""
    # Assigned by the store on insert
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    user_id: Optional[int] = None

    def to_dict(self):
        return {
            "id": self.id,
            "created_at": format_time(self.created_at) if self.created_at else None,
            "title": self.title,
            "description": self.description,
            "due_date": format_time(self.due_date) if self.due_date else None,
            "priority": self.priority,
            "status": self.status,
            "category": self.category,
            "user_id": self.user_id,
        }


class TaskInput(BaseModel):
    """Body of POST /tasks. Missing fields are left empty for the validator."""

    model_config = ConfigDict(strict=True, extra="forbid")

    title: str = ""
    description: str = ""
    due_date: Optional[WireTime] = None
    priority: str = ""
    status: str = ""
    category: str = ""


class TaskPatch(BaseModel):
    """Body of PATCH /tasks/<id>. Absent or null fields keep their stored value."""

    model_config = ConfigDict(strict=True, extra="forbid")

    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[WireTime] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    category: Optional[str] = None

    def apply(self, task: Task) -> Task:
        for name, value in self.model_dump(exclude_none=True).items():
            setattr(task, name, value)
        return task


def validate_task(v: Validator, task: Task) -> None:
    v.check(task.title != "", "title", "must be provided")
    v.check(len(task.title.encode("utf-8")) <= 500, "title", "must not be more than 500 bytes long")
    v.check(task.description != "", "description", "must be provided")
    v.check(
        len(task.description.encode("utf-8")) <= 1000,
        "description",
        "must not be more than 1000 bytes long",
    )
    v.check(task.due_date is not None, "due_date", "must be provided")
    if task.due_date is not None:
        v.check(task.due_date > DUE_DATE_AFTER, "due_date", "must be after 2023-10-07")
        v.check(task.due_date < DUE_DATE_BEFORE, "due_date", "must be before 2060")
    v.check(task.priority != "", "priority", "must be provided")
    v.check(task.status != "", "status", "must be provided")
    v.check(task.category != "", "category", "must be provided")
