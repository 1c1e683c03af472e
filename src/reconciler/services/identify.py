from __future__ import annotations

import time
from typing import Callable

from shared.logging import get_logger

from ..config import ReconcilerSettings
from ..errors import ConflictRetryableError, InvalidInputError
from ..models import IdentifyRequest, IdentifyResponse
from ..pipeline import match_cluster, project, reconcile
from ..repository.contacts import ContactStore

logger = get_logger("reconciler.identify")


class IdentifyService:
    """Resolves an (email, phone number) observation to its identity cluster.

    Each call is one transaction: match, reconcile, re-read, project. When the
    store aborts the transaction because a concurrent request touched the same
    clusters, the whole unit of work is replayed from scratch, up to
    ``max_attempts`` times in total.
    """

    def __init__(
        self,
        store: ContactStore,
        *,
        max_attempts: int = 3,
        retry_base_delay: float = 0.05,
        retry_max_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._store = store
        self._max_attempts = max_attempts
        self._retry_base_delay = retry_base_delay
        self._retry_max_delay = retry_max_delay
        self._sleep = sleep

    @classmethod
    def from_settings(cls, store: ContactStore, settings: ReconcilerSettings) -> "IdentifyService":
        return cls(
            store,
            max_attempts=settings.identify_max_attempts,
            retry_base_delay=settings.identify_retry_base_delay,
            retry_max_delay=settings.identify_retry_max_delay,
        )

    def identify(self, request: IdentifyRequest) -> IdentifyResponse:
        if request.is_empty():
            raise InvalidInputError()

        attempt = 1
        while True:
            try:
                return self._identify_once(request)
            except ConflictRetryableError as exc:
                if attempt >= self._max_attempts:
                    logger.error("identify_retries_exhausted", attempts=attempt, error=str(exc))
                    raise
                delay = min(self._retry_base_delay * (2 ** (attempt - 1)), self._retry_max_delay)
                logger.warning(
                    "identify_conflict_retry",
                    attempt=attempt,
                    max_attempts=self._max_attempts,
                    delay=delay,
                    error=str(exc),
                )
                self._sleep(delay)
                attempt += 1

    def _identify_once(self, request: IdentifyRequest) -> IdentifyResponse:
        email = request.email
        phone_number = request.phone_number
        with self._store.transaction() as repo:
            cluster = match_cluster(repo, email, phone_number)
            outcome = reconcile(repo, cluster, email, phone_number)
            members = repo.find_by_ids_or_linked_ids([outcome.primary.id])
            summary = project(outcome.primary, members)

        logger.info(
            "identify_resolved",
            primary_contact_id=summary.primary_contact_id,
            matched=len(cluster),
            created_id=outcome.created.id if outcome.created else None,
            merged=outcome.merged,
        )
        return IdentifyResponse(contact=summary)


__all__ = ["IdentifyService"]
