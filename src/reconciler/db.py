from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

import psycopg

from .config import get_settings

# created_at defaults to clock_timestamp() rather than NOW() so that rows
# inserted by the same transaction still get distinct, increasing values.
SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS contacts (
        id BIGSERIAL PRIMARY KEY,
        phone_number TEXT,
        email TEXT,
        linked_id BIGINT REFERENCES contacts (id),
        link_precedence TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp(),
        deleted_at TIMESTAMPTZ,
        CONSTRAINT contacts_identifier_present
            CHECK (email IS NOT NULL OR phone_number IS NOT NULL),
        CONSTRAINT contacts_link_precedence_valid
            CHECK (link_precedence IN ('primary', 'secondary')),
        CONSTRAINT contacts_link_matches_precedence CHECK (
            (link_precedence = 'primary' AND linked_id IS NULL)
            OR (link_precedence = 'secondary' AND linked_id IS NOT NULL AND linked_id <> id)
        )
    )
    """,
    "CREATE INDEX IF NOT EXISTS contacts_email_idx ON contacts (email) WHERE deleted_at IS NULL",
    "CREATE INDEX IF NOT EXISTS contacts_phone_number_idx ON contacts (phone_number) WHERE deleted_at IS NULL",
    "CREATE INDEX IF NOT EXISTS contacts_linked_id_idx ON contacts (linked_id) WHERE deleted_at IS NULL",
)


@contextmanager
def get_connection(database_url: str | None = None) -> Iterator[psycopg.Connection[Any]]:
    conn = psycopg.connect(database_url or get_settings().database_url)
    try:
        yield conn
    finally:
        conn.close()


def ensure_schema(conn: psycopg.Connection[Any]) -> None:
    """Create the contacts table and its lookup indexes when missing."""
    with conn.transaction():
        with conn.cursor() as cur:
            for statement in SCHEMA_STATEMENTS:
                cur.execute(statement)


__all__ = ["SCHEMA_STATEMENTS", "ensure_schema", "get_connection"]
