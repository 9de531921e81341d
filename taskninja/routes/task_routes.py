import re

from flask import Blueprint, current_app, url_for
from werkzeug.exceptions import NotFound

from taskninja.models.task_model import Task, TaskInput, TaskPatch, validate_task
from taskninja.models.task_store import RecordNotFound
from taskninja.utils.db import get_store
from taskninja.utils.json_codec import read_json, write_json
from taskninja.utils.responses import failed_validation_response
from taskninja.utils.validator import Validator

tasks_bp = Blueprint("tasks", __name__)

_ID_RE = re.compile(r"[0-9]+")

# Ids are 64-bit signed integers in every backend
MAX_ID = 2**63 - 1


def read_id_param(raw):
    """Parse a path id; anything that is not a positive base-10 integer is a 404."""
    if len(raw) > len(str(MAX_ID)) or not _ID_RE.fullmatch(raw):
        raise NotFound()
    task_id = int(raw)
    if task_id < 1 or task_id > MAX_ID:
        raise NotFound()
    return task_id


def _fetch(task_id):
    try:
        return get_store().get(task_id)
    except RecordNotFound:
        raise NotFound()


@tasks_bp.get("")
def list_tasks():
    tasks = get_store().list()
    return write_json(200, {"tasks": tasks})


@tasks_bp.post("")
def create_task():
    payload = read_json(TaskInput)
    task = Task(**payload.model_dump())

    v = Validator()
    validate_task(v, task)
    if not v.valid():
        return failed_validation_response(v.errors)

    get_store().insert(task)
    current_app.logger.info("task %d created", task.id)

    location = url_for("tasks.show_task", task_id=task.id)
    return write_json(201, {"task": task}, {"Location": location})


@tasks_bp.get("/<task_id>")
def show_task(task_id):
    task = _fetch(read_id_param(task_id))
    return write_json(200, {"task": task})


@tasks_bp.patch("/<task_id>")
def update_task(task_id):
    task = _fetch(read_id_param(task_id))
    payload = read_json(TaskPatch)
    payload.apply(task)

    v = Validator()
    validate_task(v, task)
    if not v.valid():
        return failed_validation_response(v.errors)

    try:
        get_store().update(task)
    except RecordNotFound:
        # Deleted between the fetch and the write
        raise NotFound()
    return write_json(200, {"task": task})


@tasks_bp.delete("/<task_id>")
def delete_task(task_id):
    try:
        get_store().delete(read_id_param(task_id))
    except RecordNotFound:
        raise NotFound()
    return write_json(200, {"message": "task successfully deleted"})
