"""
Tests for the matcher, reconciler and projector stages.

Tests cover:
- Direct match plus one-level cluster expansion
- Oldest-primary election and its id tie-break
- Demotion of competing primaries and re-linking of their secondaries
- Novelty detection and the single secondary insert
- Projection ordering and de-duplication
"""

from datetime import datetime, timezone

import pytest

from reconciler.errors import ClusterInvariantError
from reconciler.models import Contact, LinkPrecedence
from reconciler.pipeline import (
    collect_seed_ids,
    elect_primary,
    match_cluster,
    novel_fields,
    project,
    reconcile,
)

PRIMARY = LinkPrecedence.PRIMARY
SECONDARY = LinkPrecedence.SECONDARY


def _contact(contact_id, *, email=None, phone=None, linked_id=None, precedence=PRIMARY, second=0):
    created = datetime(2024, 1, 1, 0, 0, second, tzinfo=timezone.utc)
    return Contact(
        id=contact_id,
        email=email,
        phone_number=phone,
        linked_id=linked_id,
        link_precedence=precedence,
        created_at=created,
        updated_at=created,
    )


@pytest.fixture
def two_clusters(store):
    """
    Cluster A: primary 1 (a@x.com) with secondary 2 (phone 111).
    Cluster B: primary 3 (b@x.com, phone 999) with secondary 4 (phone 222).
    """
    with store.transaction() as repo:
        a = repo.create("a@x.com", None, None, PRIMARY)
        a2 = repo.create("a@x.com", "111", a.id, SECONDARY)
        b = repo.create("b@x.com", "999", None, PRIMARY)
        b2 = repo.create("b@x.com", "222", b.id, SECONDARY)
    return {"a": a, "a2": a2, "b": b, "b2": b2}


class TestMatcher:
    def test_empty_store_has_no_cluster(self, store):
        with store.transaction() as repo:
            assert match_cluster(repo, "a@x.com", "123") == []

    def test_secondary_match_pulls_in_primary_and_siblings(self, store, two_clusters):
        with store.transaction() as repo:
            cluster = match_cluster(repo, None, "111")

        assert [c.id for c in cluster] == [two_clusters["a"].id, two_clusters["a2"].id]

    def test_match_spanning_two_clusters(self, store, two_clusters):
        with store.transaction() as repo:
            cluster = match_cluster(repo, "a@x.com", "222")

        assert [c.id for c in cluster] == [
            two_clusters["a"].id,
            two_clusters["a2"].id,
            two_clusters["b"].id,
            two_clusters["b2"].id,
        ]

    def test_absent_field_does_not_match_null_columns(self, store, two_clusters):
        with store.transaction() as repo:
            cluster = match_cluster(repo, "nobody@x.com", None)

        assert cluster == []

    def test_collect_seed_ids_adds_linked_primary(self):
        matches = [
            _contact(5, phone="1", linked_id=2, precedence=SECONDARY),
            _contact(7, email="e"),
        ]

        assert collect_seed_ids(matches) == {2, 5, 7}


class TestElectPrimary:
    def test_oldest_primary_wins(self):
        cluster = [
            _contact(3, email="c", second=5),
            _contact(1, email="a", second=9),
            _contact(2, phone="1", linked_id=1, precedence=SECONDARY, second=1),
        ]

        assert elect_primary(cluster).id == 3

    def test_created_at_tie_breaks_on_lowest_id(self):
        cluster = [_contact(8, email="b"), _contact(4, email="a")]

        assert elect_primary(cluster).id == 4

    def test_cluster_without_primary_is_an_invariant_violation(self):
        cluster = [
            _contact(2, email="a", linked_id=1, precedence=SECONDARY),
            _contact(3, phone="1", linked_id=1, precedence=SECONDARY),
        ]

        with pytest.raises(ClusterInvariantError) as excinfo:
            elect_primary(cluster)
        assert excinfo.value.contact_ids == [2, 3]


class TestNovelFields:
    def test_absent_inputs_are_already_satisfied(self):
        members = [_contact(1, email="a")]

        assert novel_fields(members, None, None) == []

    def test_values_split_across_rows_are_not_novel(self):
        members = [_contact(1, email="a"), _contact(2, phone="1", linked_id=1, precedence=SECONDARY)]

        assert novel_fields(members, "a", "1") == []

    def test_reports_each_unseen_field(self):
        members = [_contact(1, email="a")]

        assert novel_fields(members, "b", "9") == ["email", "phone_number"]


class TestReconcile:
    def test_no_cluster_creates_primary(self, store):
        with store.transaction() as repo:
            outcome = reconcile(repo, [], "a@x.com", None)

        assert outcome.created is outcome.primary
        assert outcome.primary.link_precedence is PRIMARY
        assert outcome.primary.linked_id is None

    def test_merge_demotes_newer_primary_and_relinks_its_secondaries(self, store, two_clusters):
        with store.transaction() as repo:
            cluster = match_cluster(repo, "a@x.com", "999")
            outcome = reconcile(repo, cluster, "a@x.com", "999")

        a, b, b2 = two_clusters["a"], two_clusters["b"], two_clusters["b2"]
        assert outcome.primary.id == a.id
        assert outcome.demoted_ids == [b.id]
        assert outcome.repointed_ids == [b2.id]
        assert outcome.merged is True
        assert outcome.created is None

        rows = {c.id: c for c in store.snapshot()}
        assert rows[b.id].link_precedence is SECONDARY
        assert rows[b.id].linked_id == a.id
        assert rows[b2.id].linked_id == a.id

    def test_novel_phone_adds_one_secondary_with_both_values(self, store, two_clusters):
        with store.transaction() as repo:
            cluster = match_cluster(repo, "a@x.com", "555")
            outcome = reconcile(repo, cluster, "a@x.com", "555")

        assert outcome.created is not None
        assert outcome.created.email == "a@x.com"
        assert outcome.created.phone_number == "555"
        assert outcome.created.linked_id == two_clusters["a"].id
        assert outcome.created.link_precedence is SECONDARY
        assert len(store.snapshot()) == 5

    def test_known_pair_inserts_nothing(self, store, two_clusters):
        with store.transaction() as repo:
            cluster = match_cluster(repo, "b@x.com", "222")
            outcome = reconcile(repo, cluster, "b@x.com", "222")

        assert outcome.created is None
        assert outcome.demoted_ids == []
        assert outcome.repointed_ids == []
        assert len(store.snapshot()) == 4


class TestProject:
    def test_primary_values_come_first_and_duplicates_collapse(self):
        primary = _contact(1, email="a@x.com", second=5)
        members = [
            _contact(3, email="a@x.com", phone="2", linked_id=1, precedence=SECONDARY, second=9),
            primary,
            _contact(2, email="b@x.com", phone="1", linked_id=1, precedence=SECONDARY, second=7),
        ]

        summary = project(primary, members)

        assert summary.primary_contact_id == 1
        assert summary.emails == ["a@x.com", "b@x.com"]
        assert summary.phone_numbers == ["1", "2"]
        assert summary.secondary_contact_ids == [2, 3]

    def test_lone_primary(self):
        primary = _contact(1, phone="123")

        summary = project(primary, [primary])

        assert summary.emails == []
        assert summary.phone_numbers == ["123"]
        assert summary.secondary_contact_ids == []
