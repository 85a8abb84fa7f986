import json
import logging
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from sqlalchemy import create_engine, text as sql_text
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

CACHE_TABLE = "kv_store"


def normalize_database_url(database_url):
    url = str(database_url or "").strip()
    if not url:
        return url
    if url.startswith("postgres://"):
        url = "postgresql+psycopg2://" + url[len("postgres://") :]
    elif url.startswith("postgresql://"):
        url = "postgresql+psycopg2://" + url[len("postgresql://") :]

    try:
        parsed = urlparse(url)
        if "channel_binding=" in (parsed.query or ""):
            query_items = [(k, v) for k, v in parse_qsl(parsed.query, keep_blank_values=True) if k != "channel_binding"]
            parsed = parsed._replace(query=urlencode(query_items))
            url = urlunparse(parsed)
    except Exception:
        return url
    return url


def build_engine(database_url):
    database_url = normalize_database_url(database_url)
    if database_url in {"sqlite://", "sqlite:///:memory:"}:
        # One shared connection, otherwise every thread sees its own empty database.
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            future=True,
        )
    return create_engine(database_url, pool_pre_ping=True, future=True)


class KeyValueCache:
    """Named key-value persistence backed by a single SQL table."""

    def __init__(self, database_url=None, engine=None):
        if engine is None:
            engine = build_engine(database_url or "sqlite://")
        self.engine = engine
        self._ensure_table()

    def _ensure_table(self):
        with self.engine.begin() as conn:
            conn.execute(
                sql_text(
                    f"""
                    CREATE TABLE IF NOT EXISTS {CACHE_TABLE} (
                        key TEXT PRIMARY KEY,
                        value TEXT
                    )
                    """
                )
            )

    def get(self, key):
        with self.engine.connect() as conn:
            row = conn.execute(
                sql_text(f"SELECT value FROM {CACHE_TABLE} WHERE key = :key"),
                {"key": key},
            ).fetchone()
        return row[0] if row else None

    def set(self, key, value):
        with self.engine.begin() as conn:
            conn.execute(
                sql_text(
                    f"INSERT INTO {CACHE_TABLE} (key, value) VALUES (:key, :value) "
                    "ON CONFLICT(key) DO UPDATE SET value=EXCLUDED.value"
                ),
                {"key": key, "value": value},
            )

    def delete(self, key):
        with self.engine.begin() as conn:
            conn.execute(
                sql_text(f"DELETE FROM {CACHE_TABLE} WHERE key = :key"),
                {"key": key},
            )

    def get_json(self, key, default=None):
        raw = self.get(key)
        if not raw:
            return default
        try:
            return json.loads(raw)
        except Exception:
            logger.warning("Discarding unreadable cache value for %s", key)
            return default

    def set_json(self, key, value):
        self.set(key, json.dumps(value, ensure_ascii=False))

    def close(self):
        self.engine.dispose()
