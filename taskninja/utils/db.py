from flask import current_app
from pymongo import MongoClient

from taskninja.models.task_store import MongoTaskStore, SQLTaskStore, TaskStore


def build_store(config) -> TaskStore:
    backend = config["DATABASE_BACKEND"]
    user_id = config["DEFAULT_USER_ID"]
    if backend == "sqlite":
        store = SQLTaskStore(config["DATABASE_PATH"], default_user_id=user_id)
        store.init_schema()
        return store
    if backend == "mongo":
        client = MongoClient(config["MONGO_URI"], serverSelectionTimeoutMS=2000)
        return MongoTaskStore(client[config["MONGO_DB_NAME"]], default_user_id=user_id)
    raise ValueError(f"unknown DATABASE_BACKEND {backend!r}")


def init_app(app, store=None):
    if store is None:
        store = build_store(app.config)
    app.extensions["task_store"] = store
    app.logger.info("task store ready: %s", type(store).__name__)


def get_store() -> TaskStore:
    return current_app.extensions["task_store"]
