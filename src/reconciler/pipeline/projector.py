from __future__ import annotations

from typing import List, Optional, Sequence

from ..models import Contact, ContactSummary


def _append_unique(values: List[str], value: Optional[str]) -> None:
    if value and value not in values:
        values.append(value)


def project(primary: Contact, members: Sequence[Contact]) -> ContactSummary:
    """Build the consolidated view of a cluster.

    The primary's identifiers come first, then the secondaries' in creation
    order; repeated values keep their first position.
    """
    secondaries = sorted(
        (member for member in members if member.id != primary.id),
        key=lambda member: member.sort_key,
    )

    emails: List[str] = []
    phone_numbers: List[str] = []
    for contact in [primary, *secondaries]:
        _append_unique(emails, contact.email)
        _append_unique(phone_numbers, contact.phone_number)

    return ContactSummary(
        primary_contact_id=primary.id,
        emails=emails,
        phone_numbers=phone_numbers,
        secondary_contact_ids=[member.id for member in secondaries],
    )


__all__ = ["project"]
