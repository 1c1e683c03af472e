from __future__ import annotations


class ReconcilerError(Exception):
    """Base class for identity reconciliation failures."""


class InvalidInputError(ReconcilerError, ValueError):
    """Neither an email nor a phone number was supplied."""

    def __init__(self, message: str = "Either email or phoneNumber must be provided") -> None:
        super().__init__(message)


class ConflictRetryableError(ReconcilerError):
    """The store aborted the transaction because it raced a concurrent one."""


class StoreUnavailableError(ReconcilerError):
    """The contact store could not be reached."""


class ClusterInvariantError(ReconcilerError):
    """Stored contacts violate the one-primary-per-cluster invariant."""

    def __init__(self, contact_ids: list[int]) -> None:
        self.contact_ids = contact_ids
        super().__init__(f"No primary contact among linked contacts {contact_ids}")


__all__ = [
    "ClusterInvariantError",
    "ConflictRetryableError",
    "InvalidInputError",
    "ReconcilerError",
    "StoreUnavailableError",
]
