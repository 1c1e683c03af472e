from __future__ import annotations

from ..config import ReconcilerSettings
from .contacts import ContactRepository, ContactStore
from .memory import InMemoryContactRepository, InMemoryContactStore
from .postgres import PostgresContactRepository, PostgresContactStore


def build_store(settings: ReconcilerSettings) -> ContactStore:
    if settings.contacts_store == "memory":
        return InMemoryContactStore()
    return PostgresContactStore(settings.database_url, bootstrap_schema=settings.bootstrap_schema)


__all__ = [
    "ContactRepository",
    "ContactStore",
    "InMemoryContactRepository",
    "InMemoryContactStore",
    "PostgresContactRepository",
    "PostgresContactStore",
    "build_store",
]
