from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional

import psycopg
from psycopg import errors as pg_errors
from psycopg.rows import dict_row

from shared.logging import get_logger

from ..db import ensure_schema, get_connection
from ..errors import ConflictRetryableError, StoreUnavailableError
from ..models import Contact, LinkPrecedence
from .contacts import ContactRepository, ContactStore

logger = get_logger("reconciler.repository.postgres")

_COLUMNS = "id, email, phone_number, linked_id, link_precedence, created_at, updated_at, deleted_at"

# Both surface as OperationalError subclasses, so they must be matched first.
_CONFLICT_ERRORS = (pg_errors.SerializationFailure, pg_errors.DeadlockDetected)


def _contact_from_row(row: Dict[str, Any]) -> Contact:
    return Contact(**row)


class PostgresContactRepository(ContactRepository):
    """Contact queries issued on a connection with an open transaction."""

    def __init__(self, conn: psycopg.Connection[Any]) -> None:
        self.conn = conn

    def find_by_email_or_phone(self, email: Optional[str], phone_number: Optional[str]) -> List[Contact]:
        clauses: List[str] = []
        params: List[object] = []
        if email is not None:
            clauses.append("email = %s")
            params.append(email)
        if phone_number is not None:
            clauses.append("phone_number = %s")
            params.append(phone_number)
        if not clauses:
            return []
        where = " OR ".join(clauses)

        with self.conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM contacts
                WHERE deleted_at IS NULL
                  AND ({where})
                ORDER BY created_at ASC, id ASC
                """,
                params,
            )
            return [_contact_from_row(row) for row in cur.fetchall()]

    def find_by_ids_or_linked_ids(self, ids: Iterable[int]) -> List[Contact]:
        id_list = sorted(set(ids))
        if not id_list:
            return []

        with self.conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM contacts
                WHERE deleted_at IS NULL
                  AND (id = ANY(%s) OR linked_id = ANY(%s))
                ORDER BY created_at ASC, id ASC
                """,
                (id_list, id_list),
            )
            return [_contact_from_row(row) for row in cur.fetchall()]

    def create(
        self,
        email: Optional[str],
        phone_number: Optional[str],
        linked_id: Optional[int],
        precedence: LinkPrecedence,
    ) -> Contact:
        if email is None and phone_number is None:
            raise ValueError("A contact needs an email or a phone number")

        with self.conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                INSERT INTO contacts (email, phone_number, linked_id, link_precedence)
                VALUES (%s, %s, %s, %s)
                RETURNING {_COLUMNS}
                """,
                (email, phone_number, linked_id, precedence.value),
            )
            row = cur.fetchone()
        return _contact_from_row(row)

    def update_precedence_and_link(
        self,
        contact_id: int,
        precedence: LinkPrecedence,
        linked_id: Optional[int],
    ) -> None:
        with self.conn.cursor() as cur:
            cur.execute(
                """
                UPDATE contacts
                SET link_precedence = %s,
                    linked_id = %s,
                    updated_at = clock_timestamp()
                WHERE id = %s AND deleted_at IS NULL
                """,
                (precedence.value, linked_id, contact_id),
            )
            if cur.rowcount == 0:
                raise ValueError(f"Contact not found for id={contact_id}")

    def list_all(self) -> List[Contact]:
        with self.conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM contacts
                WHERE deleted_at IS NULL
                ORDER BY created_at ASC, id ASC
                """
            )
            return [_contact_from_row(row) for row in cur.fetchall()]


class PostgresContactStore(ContactStore):
    """Runs each unit of work in its own SERIALIZABLE transaction."""

    def __init__(self, database_url: str, *, bootstrap_schema: bool = True) -> None:
        self.database_url = database_url
        self.bootstrap_schema = bootstrap_schema
        self._opened = False

    def open(self) -> None:
        try:
            with get_connection(self.database_url) as conn:
                if self.bootstrap_schema:
                    ensure_schema(conn)
                else:
                    conn.execute("SELECT 1")
        except psycopg.OperationalError as exc:
            logger.error("contact_store_open_failed", error=str(exc))
            raise StoreUnavailableError(str(exc)) from exc
        self._opened = True
        logger.info("contact_store_opened", bootstrap_schema=self.bootstrap_schema)

    def close(self) -> None:
        self._opened = False
        logger.info("contact_store_closed")

    @contextmanager
    def transaction(self) -> Iterator[PostgresContactRepository]:
        if not self._opened:
            raise RuntimeError("Contact store is not open")

        try:
            with get_connection(self.database_url) as conn:
                conn.isolation_level = psycopg.IsolationLevel.SERIALIZABLE
                with conn.transaction():
                    yield PostgresContactRepository(conn)
        except _CONFLICT_ERRORS as exc:
            raise ConflictRetryableError(str(exc)) from exc
        except psycopg.OperationalError as exc:
            raise StoreUnavailableError(str(exc)) from exc


__all__ = ["PostgresContactRepository", "PostgresContactStore"]
