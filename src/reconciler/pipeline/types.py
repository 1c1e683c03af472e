from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ..models import Contact


@dataclass(slots=True)
class ReconcileOutcome:
    primary: Contact
    created: Contact | None = None
    demoted_ids: List[int] = field(default_factory=list)
    repointed_ids: List[int] = field(default_factory=list)

    @property
    def merged(self) -> bool:
        return bool(self.demoted_ids)


__all__ = ["ReconcileOutcome"]
