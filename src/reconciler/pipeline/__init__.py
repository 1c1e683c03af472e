from .matcher import collect_seed_ids, match_cluster
from .projector import project
from .reconciler import elect_primary, novel_fields, reconcile
from .types import ReconcileOutcome

__all__ = [
    "ReconcileOutcome",
    "collect_seed_ids",
    "elect_primary",
    "match_cluster",
    "novel_fields",
    "project",
    "reconcile",
]
