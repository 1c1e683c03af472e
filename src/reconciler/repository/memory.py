from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from ..models import Contact, LinkPrecedence
from .contacts import ContactRepository, ContactStore


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _MonotonicClock:
    """Wall clock that never repeats or goes backwards."""

    def __init__(self, now: Callable[[], datetime] = _utcnow) -> None:
        self._now = now
        self._last: datetime | None = None

    def __call__(self) -> datetime:
        current = self._now()
        if self._last is not None and current <= self._last:
            current = self._last + timedelta(microseconds=1)
        self._last = current
        return current


class InMemoryContactRepository(ContactRepository):
    """Works on a private copy of the table; the store publishes it on commit."""

    def __init__(self, rows: Dict[int, Contact], next_id: int, clock: _MonotonicClock) -> None:
        self.rows = rows
        self.next_id = next_id
        self._clock = clock

    def _ordered(self, contacts: Iterable[Contact]) -> List[Contact]:
        live = [contact for contact in contacts if contact.deleted_at is None]
        return sorted(live, key=lambda contact: contact.sort_key)

    def find_by_email_or_phone(self, email: Optional[str], phone_number: Optional[str]) -> List[Contact]:
        if email is None and phone_number is None:
            return []
        return self._ordered(
            contact
            for contact in self.rows.values()
            if (email is not None and contact.email == email)
            or (phone_number is not None and contact.phone_number == phone_number)
        )

    def find_by_ids_or_linked_ids(self, ids: Iterable[int]) -> List[Contact]:
        wanted = set(ids)
        return self._ordered(
            contact
            for contact in self.rows.values()
            if contact.id in wanted or contact.linked_id in wanted
        )

    def create(
        self,
        email: Optional[str],
        phone_number: Optional[str],
        linked_id: Optional[int],
        precedence: LinkPrecedence,
    ) -> Contact:
        if email is None and phone_number is None:
            raise ValueError("A contact needs an email or a phone number")
        now = self._clock()
        contact = Contact(
            id=self.next_id,
            email=email,
            phone_number=phone_number,
            linked_id=linked_id,
            link_precedence=precedence,
            created_at=now,
            updated_at=now,
        )
        self.rows[contact.id] = contact
        self.next_id += 1
        return contact.model_copy()

    def update_precedence_and_link(
        self,
        contact_id: int,
        precedence: LinkPrecedence,
        linked_id: Optional[int],
    ) -> None:
        current = self.rows.get(contact_id)
        if current is None or current.deleted_at is not None:
            raise ValueError(f"Contact not found for id={contact_id}")
        self.rows[contact_id] = current.model_copy(
            update={
                "link_precedence": precedence,
                "linked_id": linked_id,
                "updated_at": self._clock(),
            }
        )

    def list_all(self) -> List[Contact]:
        return self._ordered(self.rows.values())


class InMemoryContactStore(ContactStore):
    """Process-local contact store.

    Transactions are serialised by a single lock, which gives the same outcome
    as SERIALIZABLE isolation without conflicts to retry.
    """

    def __init__(self, now: Callable[[], datetime] = _utcnow) -> None:
        self._lock = threading.Lock()
        self._rows: Dict[int, Contact] = {}
        self._next_id = 1
        self._clock = _MonotonicClock(now)
        self._opened = False
        self.commits = 0
        self.rollbacks = 0

    def open(self) -> None:
        self._opened = True

    def close(self) -> None:
        self._opened = False

    @contextmanager
    def transaction(self) -> Iterator[InMemoryContactRepository]:
        if not self._opened:
            raise RuntimeError("Contact store is not open")
        with self._lock:
            repo = InMemoryContactRepository(dict(self._rows), self._next_id, self._clock)
            try:
                yield repo
            except BaseException:
                self.rollbacks += 1
                raise
            self._rows = repo.rows
            self._next_id = repo.next_id
            self.commits += 1

    def snapshot(self) -> List[Contact]:
        """Committed rows ordered by creation."""
        with self._lock:
            return sorted(self._rows.values(), key=lambda contact: contact.sort_key)


__all__ = ["InMemoryContactRepository", "InMemoryContactStore"]
