"""Unit tests for CommitRangeResolver — creation, deletion, non-fast-forward and caching."""

from __future__ import annotations

from conftest import A, C1, C2, C3, M1, T1, FakeObjectStore
from pushgate.gate.commit_range import CommitRangeResolver
from pushgate.gate.models import EMPTY_OBJECT

DIVERGED = "ab" * 20


def _diverged_store() -> FakeObjectStore:
    """master: C1 ← C2 ← C3; DIVERGED rewrites history on top of C1."""
    return FakeObjectStore(
        objects={C1: "commit", C2: "commit", C3: "commit", DIVERGED: "commit"},
        parents={C1: [], C2: [C1], C3: [C2], DIVERGED: [C1]},
        refs={"refs/heads/master": C3},
    )


class TestDeletion:
    def test_deletion_is_empty(self, linear_store):
        resolver = CommitRangeResolver(linear_store)
        assert resolver.commits_between(C2, EMPTY_OBJECT, "refs/heads/master") == []

    def test_deletion_makes_no_backend_calls(self, linear_store):
        CommitRangeResolver(linear_store).commits_between(A, EMPTY_OBJECT, "refs/heads/feature")
        assert linear_store.calls == []


class TestCreation:
    def test_first_branch_of_fresh_repository(self):
        store = FakeObjectStore(objects={C1: "commit"}, parents={C1: []})
        resolver = CommitRangeResolver(store)
        assert resolver.commits_between(EMPTY_OBJECT, C1, "refs/heads/master") == [C1]

    def test_commits_on_other_refs_are_excluded(self, linear_store):
        # master points at C2, so only C3 is new on the created branch
        resolver = CommitRangeResolver(linear_store)
        assert resolver.commits_between(EMPTY_OBJECT, C3, "refs/heads/feature") == [C3]

    def test_created_ref_itself_is_not_an_other_ref(self):
        store = FakeObjectStore(
            objects={C1: "commit", C2: "commit"},
            parents={C1: [], C2: [C1]},
            refs={"refs/heads/master": C2},
        )
        resolver = CommitRangeResolver(store)
        assert resolver.commits_between(EMPTY_OBJECT, C2, "refs/heads/master") == [C1, C2]
        assert resolver.commits_between(EMPTY_OBJECT, C2, None) == []

    def test_tag_on_existing_commit_introduces_nothing(self, linear_store):
        resolver = CommitRangeResolver(linear_store)
        assert resolver.commits_between(EMPTY_OBJECT, C2, "refs/tags/v0.9") == []

    def test_annotated_tag_is_peeled(self, linear_store):
        resolver = CommitRangeResolver(linear_store)
        assert resolver.commits_between(EMPTY_OBJECT, T1, "refs/tags/v1.0") == [C3]

    def test_never_includes_commits_reachable_from_other_refs(self, linear_store):
        linear_store.refs["refs/tags/v0.1"] = C1
        linear_store.refs["refs/heads/topic"] = C3
        resolver = CommitRangeResolver(linear_store)
        result = resolver.commits_between(EMPTY_OBJECT, M1, "refs/heads/integration")
        assert result == [M1]

    def test_lists_local_refs(self, linear_store):
        CommitRangeResolver(linear_store).commits_between(EMPTY_OBJECT, C3, "refs/heads/feature")
        assert linear_store.count("all_local_refs") == 1


class TestUpdate:
    def test_fast_forward(self, linear_store):
        resolver = CommitRangeResolver(linear_store)
        assert resolver.commits_between(C1, C3, "refs/heads/master") == [C2, C3]

    def test_non_fast_forward(self):
        resolver = CommitRangeResolver(_diverged_store())
        assert resolver.commits_between(C3, DIVERGED, "refs/heads/master") == [DIVERGED]

    def test_rewind_introduces_nothing(self):
        resolver = CommitRangeResolver(_diverged_store())
        assert resolver.commits_between(C3, C1, "refs/heads/master") == []

    def test_merge_brings_side_commits(self, linear_store):
        resolver = CommitRangeResolver(linear_store)
        assert resolver.commits_between(C2, M1, "refs/heads/master") == [C3, M1]

    def test_update_does_not_list_refs(self, linear_store):
        CommitRangeResolver(linear_store).commits_between(C1, C3, "refs/heads/master")
        assert linear_store.count("all_local_refs") == 0


class TestCaching:
    def test_same_triple_hits_backend_once(self, linear_store):
        resolver = CommitRangeResolver(linear_store)
        first = resolver.commits_between(C1, C3, "refs/heads/master")
        second = resolver.commits_between(C1, C3, "refs/heads/master")
        assert first == second
        assert linear_store.count("rev_list") == 1

    def test_distinct_excluded_ref_is_a_distinct_entry(self, linear_store):
        resolver = CommitRangeResolver(linear_store)
        resolver.commits_between(EMPTY_OBJECT, C3, "refs/heads/a")
        resolver.commits_between(EMPTY_OBJECT, C3, "refs/heads/b")
        assert linear_store.count("rev_list") == 2

    def test_returned_list_is_a_copy(self, linear_store):
        resolver = CommitRangeResolver(linear_store)
        resolver.commits_between(C1, C3, "refs/heads/master").clear()
        assert resolver.commits_between(C1, C3, "refs/heads/master") == [C2, C3]
