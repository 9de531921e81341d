import os

# Load .env from project root so local development settings are picked up
from dotenv import load_dotenv

load_dotenv()


def _flag(name, default):
    return os.environ.get(name, default) == "1"


class Config:
    VERSION = "1.0.0"
    ENV = os.environ.get("FLASK_ENV", os.environ.get("ENV", "development"))
    DEBUG = _flag("FLASK_DEBUG", "0")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Token bucket per client address
    LIMITER_ENABLED = _flag("LIMITER_ENABLED", "1")
    LIMITER_RPS = float(os.environ.get("LIMITER_RPS", "2"))
    LIMITER_BURST = int(os.environ.get("LIMITER_BURST", "4"))
    LIMITER_IDLE_SECONDS = float(os.environ.get("LIMITER_IDLE_SECONDS", "180"))
    LIMITER_SWEEP_SECONDS = float(os.environ.get("LIMITER_SWEEP_SECONDS", "60"))

    MAX_BODY_BYTES = int(os.environ.get("MAX_BODY_BYTES", str(1_048_576)))

    DATABASE_BACKEND = os.environ.get("DATABASE_BACKEND", "sqlite")
    DATABASE_PATH = os.environ.get("DATABASE_PATH", "taskninja.db")
    MONGO_URI = os.environ.get("MONGO_URI", "mongodb://localhost:27017/?directConnection=true")
    MONGO_DB_NAME = os.environ.get("MONGO_DB_NAME", "taskninja")
    DEFAULT_USER_ID = int(os.environ.get("DEFAULT_USER_ID", "1"))
