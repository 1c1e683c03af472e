from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Iterable, List, Optional

from ..models import Contact, LinkPrecedence


class ContactRepository(ABC):
    """Contact table access bound to one open transaction.

    Every listing is ordered by ``(created_at, id)`` ascending.
    """

    @abstractmethod
    def find_by_email_or_phone(self, email: Optional[str], phone_number: Optional[str]) -> List[Contact]:
        """Return contacts whose email or phone number equals the given value.

        A ``None`` argument drops its clause; both ``None`` returns nothing.
        """

    @abstractmethod
    def find_by_ids_or_linked_ids(self, ids: Iterable[int]) -> List[Contact]:
        """Return contacts whose ``id`` or ``linked_id`` is in ``ids``."""

    @abstractmethod
    def create(
        self,
        email: Optional[str],
        phone_number: Optional[str],
        linked_id: Optional[int],
        precedence: LinkPrecedence,
    ) -> Contact:
        """Insert a contact and return it with its assigned id and timestamps."""

    @abstractmethod
    def update_precedence_and_link(
        self,
        contact_id: int,
        precedence: LinkPrecedence,
        linked_id: Optional[int],
    ) -> None:
        """Rewrite the precedence and link of an existing contact."""

    @abstractmethod
    def list_all(self) -> List[Contact]:
        """Return every contact."""


class ContactStore(ABC):
    """Process-wide handle on the contact table.

    ``transaction()`` yields a repository; leaving the block normally commits,
    leaving it with an exception rolls back.
    """

    @abstractmethod
    def open(self) -> None:
        ...

    @abstractmethod
    def close(self) -> None:
        ...

    @abstractmethod
    def transaction(self) -> AbstractContextManager[ContactRepository]:
        ...


__all__ = ["ContactRepository", "ContactStore"]
