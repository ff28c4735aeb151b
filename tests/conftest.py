"""Shared fakes: an in-memory object store with a commit graph, and a scripted policy engine."""

from __future__ import annotations

import pytest

from pushgate.gate.models import AccessDecision, Operation

# Readable 40-hex object ids
A = "a" * 40
B = "b" * 40
C1 = "c1" * 20
C2 = "c2" * 20
C3 = "c3" * 20
M1 = "d1" * 20
T1 = "e1" * 20
BLOB = "f1" * 20
TREE = "f2" * 20


def commit_lines(
    commit_id: str,
    author: str | None = "Jane Doe <jane@example.org>",
    files: list[str] | None = None,
    merge: str | None = None,
    message: str = "Change things",
) -> list[str]:
    """Build ``show --name-status --pretty=short`` output for a commit."""
    lines = [f"commit {commit_id}"]
    if merge is not None:
        lines.append(f"Merge: {merge}")
    if author is not None:
        lines.append(f"Author: {author}")
    lines += ["", f"    {message}"]
    if files:
        lines.append("")
        lines += files
    return lines


class FakeObjectStore:
    """In-memory ``ObjectStore``.  Records every call in ``calls``.

    ``parents`` maps commit id → parent ids; ``refs`` maps ref name → object id;
    ``tag_targets`` maps annotated tag id → tagged commit id.
    """

    def __init__(
        self,
        objects: dict[str, str] | None = None,
        shows: dict[str, list[str]] | None = None,
        parents: dict[str, list[str]] | None = None,
        refs: dict[str, str] | None = None,
        tag_targets: dict[str, str] | None = None,
    ) -> None:
        self.objects = objects or {}
        self.shows = shows or {}
        self.parents = parents or {}
        self.refs = refs or {}
        self.tag_targets = tag_targets or {}
        self.calls: list[tuple] = []

    # -- helpers -------------------------------------------------------

    def count(self, method: str, arg: str | None = None) -> int:
        return sum(1 for c in self.calls if c[0] == method and (arg is None or c[1] == arg))

    def _peel(self, rev: str) -> str:
        rev = self.refs.get(rev, rev)
        return self.tag_targets.get(rev, rev)

    def _ancestry(self, rev: str) -> list[str]:
        """Commits reachable from *rev*, parents before children."""
        order: list[str] = []
        seen: set[str] = set()

        def visit(commit: str) -> None:
            if commit in seen:
                return
            seen.add(commit)
            for parent in self.parents.get(commit, []):
                visit(parent)
            order.append(commit)

        visit(self._peel(rev))
        return order

    # -- ObjectStore protocol ------------------------------------------

    def object_type(self, object_id: str) -> str | None:
        self.calls.append(("object_type", object_id))
        return self.objects.get(object_id)

    def object_exists(self, object_id: str) -> bool:
        self.calls.append(("object_exists", object_id))
        return object_id in self.objects

    def show(self, object_id: str) -> list[str]:
        self.calls.append(("show", object_id))
        return list(self.shows.get(object_id, []))

    def rev_list(self, include: list[str], exclude: list[str]) -> list[str]:
        self.calls.append(("rev_list", tuple(include), tuple(exclude)))
        excluded: set[str] = set()
        for rev in exclude:
            excluded.update(self._ancestry(rev))
        result: list[str] = []
        for rev in include:
            for commit in self._ancestry(rev):
                if commit not in excluded and commit not in result:
                    result.append(commit)
        return result

    def all_local_refs(self) -> list[str]:
        self.calls.append(("all_local_refs",))
        return [r for r in self.refs if r.startswith(("refs/heads/", "refs/tags/"))]

    def branches_containing(self, commit_id: str, include_remote: bool = False) -> list[str]:
        self.calls.append(("branches_containing", commit_id))
        return [r for r in self._branch_refs(include_remote) if commit_id in self._ancestry(r)]

    def branches_not_containing(self, commit_id: str, include_remote: bool = False) -> list[str]:
        self.calls.append(("branches_not_containing", commit_id))
        return [r for r in self._branch_refs(include_remote) if commit_id not in self._ancestry(r)]

    def _branch_refs(self, include_remote: bool) -> list[str]:
        prefixes = ("refs/heads/", "refs/remotes/") if include_remote else ("refs/heads/",)
        return [r for r in self.refs if r.startswith(prefixes)]


class FakePolicyEngine:
    """Returns a fixed decision and keeps every operation it was asked about."""

    def __init__(self, allowed: bool = True, errors: list[str] | None = None) -> None:
        self.decision = AccessDecision(allowed=allowed, errors=errors or [])
        self.operations: list[Operation] = []

    def check_access(self, operation: Operation) -> AccessDecision:
        self.operations.append(operation)
        return self.decision


@pytest.fixture
def linear_store() -> FakeObjectStore:
    """master: C1 ← C2 ← C3, plus a merge commit M1 of C2 and C3 and an annotated tag T1 → C3."""
    return FakeObjectStore(
        objects={
            C1: "commit", C2: "commit", C3: "commit", M1: "commit",
            T1: "tag", BLOB: "blob", TREE: "tree",
        },
        shows={
            C1: commit_lines(C1, files=["A\tREADME.md"]),
            C2: commit_lines(C2, author="Bob <bob@example.org>", files=["M\tREADME.md", "A\tsrc/app.py"]),
            C3: commit_lines(C3, files=["R087\tsrc/app.py\tsrc/main.py"]),
            M1: commit_lines(M1, merge="c2c2c2c... c3c3c3c...", files=["M\tsrc/main.py"]),
            T1: [
                "tag v1.0",
                "Tagger: Release Bot <release@example.org>",
                "",
                "Release 1.0",
                "",
                *commit_lines(C3, files=["R087\tsrc/app.py\tsrc/main.py"]),
            ],
        },
        parents={C1: [], C2: [C1], C3: [C2], M1: [C2, C3]},
        refs={"refs/heads/master": C2},
        tag_targets={T1: C3},
    )
