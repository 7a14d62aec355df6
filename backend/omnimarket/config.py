# backend/omnimarket/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite file holding the key-value store (backend/instance/omnimarket.sqlite3)
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///omnimarket.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # A missing "products" key yields the demo starter catalog instead of an empty list
    SEED_STARTER_CATALOG = _env_flag("SEED_STARTER_CATALOG", True)

    DEFAULT_LOW_STOCK_LIMIT = int(os.environ.get("DEFAULT_LOW_STOCK_LIMIT", "10"))

    # Acting context used by the CLI when --actor/--branch are omitted
    DEFAULT_ACTOR_NAME = os.environ.get("DEFAULT_ACTOR_NAME", "Demo User")
    DEFAULT_BRANCH_ID = os.environ.get("DEFAULT_BRANCH_ID", "B001")
