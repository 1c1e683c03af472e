from __future__ import annotations

from typing import Iterable, List, Optional, Set

from ..models import Contact
from ..repository.contacts import ContactRepository


def collect_seed_ids(matches: Iterable[Contact]) -> Set[int]:
    """Ids of the matched contacts plus the primaries their secondaries point at."""
    seed: Set[int] = set()
    for contact in matches:
        seed.add(contact.id)
        if not contact.is_primary and contact.linked_id is not None:
            seed.add(contact.linked_id)
    return seed


def match_cluster(
    repo: ContactRepository,
    email: Optional[str],
    phone_number: Optional[str],
) -> List[Contact]:
    """Return every contact in the clusters touched by ``email`` or ``phone_number``.

    The result may span several clusters that are about to be merged. An empty
    list means neither identifier has been seen before. Clusters are stars of
    depth one, so a single expansion from the seed ids reaches every member.
    """
    matches = repo.find_by_email_or_phone(email, phone_number)
    if not matches:
        return []
    return repo.find_by_ids_or_linked_ids(collect_seed_ids(matches))


__all__ = ["collect_seed_ids", "match_cluster"]
