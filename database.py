import logging
import psycopg2
from psycopg2.extras import DictCursor
from flask import g
from config import DATABASE_URL, IS_PRODUCTION
from utils.redaction import redact_database_url

logger = logging.getLogger(__name__)


def get_db():
    """Per-request Postgres connection, cached on flask.g."""
    if 'db' not in g:
        try:
            conn = psycopg2.connect(DATABASE_URL, cursor_factory=DictCursor)
        except psycopg2.Error as e:
            logger.error(
                "[DB] Connection Failed (%s) while connecting to %s",
                type(e).__name__,
                redact_database_url(DATABASE_URL),
            )
            raise
        g.db = PostgresDB(conn)
    return g.db


def close_connection(exception=None):
    db = g.pop('db', None)
    if db is not None:
        db.close()


class PostgresDB:
    """
    Thin psycopg2 wrapper.
    Passes SQL through unchanged; expects %s placeholders.
    """
    def __init__(self, conn):
        self._conn = conn

    def execute(self, sql, params=None):
        cur = self._conn.cursor()
        try:
            cur.execute(sql, params)
            return cur
        except psycopg2.Error as e:
            # Raw SQL only outside production
            logger.error(f"[DB] Query Failed: {e}")
            if not IS_PRODUCTION:
                logger.error(f"[DB] SQL: {sql}")
            raise

    def commit(self):
        self._conn.commit()

    def rollback(self):
        self._conn.rollback()

    def close(self):
        self._conn.close()

    def cursor(self):
        return self._conn.cursor()

    # Intentionally omitted: lastrowid (Use RETURNING id + fetchone)
