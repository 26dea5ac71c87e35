# order_service/database.py

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base

from .config import DATABASE_URL, DB_CONNECT_TIMEOUT_SECONDS, DB_STATEMENT_TIMEOUT_MS

Base = declarative_base()


def build_engine(url: str = DATABASE_URL):
    """Engine whose every storage call is bounded in time."""
    kwargs = {"pool_pre_ping": True}
    parsed = make_url(url)
    if parsed.get_backend_name() == "postgresql" and parsed.get_driver_name() == "psycopg2":
        kwargs["pool_timeout"] = DB_CONNECT_TIMEOUT_SECONDS
        kwargs["connect_args"] = {
            "connect_timeout": DB_CONNECT_TIMEOUT_SECONDS,
            "options": f"-c statement_timeout={DB_STATEMENT_TIMEOUT_MS}",
        }
    return create_engine(url, **kwargs)


engine = build_engine()
