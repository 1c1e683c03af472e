from __future__ import annotations

from typing import List, Optional, Sequence

from shared.logging import get_logger

from ..errors import ClusterInvariantError
from ..models import Contact, LinkPrecedence
from ..repository.contacts import ContactRepository
from .types import ReconcileOutcome

logger = get_logger("reconciler.pipeline.reconciler")


def elect_primary(cluster: Sequence[Contact]) -> Contact:
    """Pick the oldest primary, breaking created_at ties by the lower id."""
    primaries = [contact for contact in cluster if contact.is_primary]
    if not primaries:
        raise ClusterInvariantError([contact.id for contact in cluster])
    return min(primaries, key=lambda contact: contact.sort_key)


def novel_fields(
    members: Sequence[Contact],
    email: Optional[str],
    phone_number: Optional[str],
) -> List[str]:
    """Names of the given identifiers that no member carries yet."""
    novel: List[str] = []
    if email is not None and all(member.email != email for member in members):
        novel.append("email")
    if phone_number is not None and all(member.phone_number != phone_number for member in members):
        novel.append("phone_number")
    return novel


def reconcile(
    repo: ContactRepository,
    cluster: Sequence[Contact],
    email: Optional[str],
    phone_number: Optional[str],
) -> ReconcileOutcome:
    """Fold ``cluster`` into a single star around its oldest primary.

    ``cluster`` is the Matcher output. Must run inside the caller's
    transaction: demotions, re-links and the optional insert either all
    commit or none do.
    """
    if not cluster:
        primary = repo.create(email, phone_number, None, LinkPrecedence.PRIMARY)
        logger.info("contact_primary_created", contact_id=primary.id)
        return ReconcileOutcome(primary=primary, created=primary)

    primary = elect_primary(cluster)
    outcome = ReconcileOutcome(primary=primary)

    for contact in cluster:
        if contact.id == primary.id:
            continue
        if contact.is_primary:
            repo.update_precedence_and_link(contact.id, LinkPrecedence.SECONDARY, primary.id)
            outcome.demoted_ids.append(contact.id)
        elif contact.linked_id != primary.id:
            repo.update_precedence_and_link(contact.id, LinkPrecedence.SECONDARY, primary.id)
            outcome.repointed_ids.append(contact.id)

    if outcome.demoted_ids or outcome.repointed_ids:
        logger.info(
            "contact_clusters_merged",
            primary_contact_id=primary.id,
            demoted_ids=outcome.demoted_ids,
            repointed_ids=outcome.repointed_ids,
        )

    members = repo.find_by_ids_or_linked_ids([primary.id])
    novel = novel_fields(members, email, phone_number)
    if novel:
        outcome.created = repo.create(email, phone_number, primary.id, LinkPrecedence.SECONDARY)
        logger.info(
            "contact_secondary_created",
            primary_contact_id=primary.id,
            contact_id=outcome.created.id,
            novel_fields=novel,
        )

    return outcome


__all__ = ["elect_primary", "novel_fields", "reconcile"]
