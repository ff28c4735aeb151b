"""Typed contracts for the push gate."""

from __future__ import annotations

from enum import Enum
from typing import Literal, Protocol, runtime_checkable

from pydantic import BaseModel, Field, computed_field

# An all-zero id stands for "no object": the source of a ref creation or the
# target of a ref deletion.  Never looked up in the backend.
EMPTY_OBJECT = "0" * 40

_OBJECT_ID_PATTERN = r"^(?:[0-9a-f]{40}|[0-9a-f]{64})$"


def is_empty_object(object_id: str) -> bool:
    """Return ``True`` for the all-zero sentinel (SHA-1 or SHA-256 width)."""
    return bool(object_id) and set(object_id) == {"0"}


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ObjectType(str, Enum):
    BLOB = "blob"
    TREE = "tree"
    COMMIT = "commit"
    TAG = "tag"
    EMPTY = "empty"


class RefType(str, Enum):
    HEADS = "heads"
    TAGS = "tags"
    REMOTES = "remotes"
    INVALID = "invalid"


class ActionKind(str, Enum):
    CREATED = "created"
    DELETED = "deleted"
    MERGED = "merged"
    MODIFIED = "modified"


class OperationKind(str, Enum):
    COMMIT = "commit"
    TAG = "tag"
    BRANCH = "branch"


class PushEvent(str, Enum):
    """Terminal outcome of a ref update, dispatched on (new object type, ref type)."""

    BRANCH_COMMIT = "branch-commit"
    LIGHTWEIGHT_TAG = "lightweight-tag"
    ANNOTATED_TAG = "annotated-tag"
    BRANCH_DELETION = "branch-deletion"
    TAG_DELETION = "tag-deletion"


class FileStatus(str, Enum):
    """Single-letter status codes from ``git show --name-status``."""

    ADDED = "A"
    COPIED = "C"
    DELETED = "D"
    MODIFIED = "M"
    RENAMED = "R"
    TYPE_CHANGED = "T"
    UNMERGED = "U"
    UNKNOWN = "X"
    PAIRING_BROKEN = "B"


class ItemAction(str, Enum):
    ADDED = "added"
    COPIED = "copied"
    DELETED = "deleted"
    MODIFIED = "modified"
    MOVED = "moved"
    OTHER = "other"


class ItemType(str, Enum):
    FILE = "file"
    FILE_DELETED = "file-deleted"


_STATUS_ACTIONS: dict[FileStatus, ItemAction] = {
    FileStatus.ADDED: ItemAction.ADDED,
    FileStatus.COPIED: ItemAction.COPIED,
    FileStatus.DELETED: ItemAction.DELETED,
    FileStatus.MODIFIED: ItemAction.MODIFIED,
    FileStatus.RENAMED: ItemAction.MOVED,
    FileStatus.TYPE_CHANGED: ItemAction.OTHER,
    FileStatus.UNMERGED: ItemAction.OTHER,
    FileStatus.UNKNOWN: ItemAction.OTHER,
    FileStatus.PAIRING_BROKEN: ItemAction.OTHER,
}


# ---------------------------------------------------------------------------
# Operation model handed to the policy engine
# ---------------------------------------------------------------------------

class Item(BaseModel):
    """One changed path.  ``old_path`` is only set on copy/rename records."""

    path: str = Field(min_length=1)
    status: FileStatus
    old_path: str | None = None

    @computed_field
    @property
    def action(self) -> ItemAction:
        return _STATUS_ACTIONS[self.status]

    @computed_field
    @property
    def item_type(self) -> ItemType:
        if self.status is FileStatus.DELETED:
            return ItemType.FILE_DELETED
        return ItemType.FILE


class Label(BaseModel):
    """State transition of one reference."""

    ref_name: str = Field(min_length=1)
    ref_type: RefType
    action: ActionKind
    operation_kind: OperationKind


class CommitSummary(BaseModel):
    commit_id: str
    author: str | None = None
    action: ActionKind
    merge_parents: list[str] | None = None


class CommitRecord(BaseModel):
    """Parsed form of one ``show`` response."""

    author: str | None = None
    merge_parents: list[str] | None = Field(
        default=None, description="Parent ids from the Merge: header; None when not a merge."
    )
    items: list[Item] = Field(default_factory=list)


class Operation(BaseModel):
    repository_id: str
    operation_kind: OperationKind
    event: PushEvent
    username: str = ""
    labels: list[Label] = Field(default_factory=list)
    commits: list[CommitSummary] = Field(default_factory=list)
    items: dict[str, Item] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Request / result models
# ---------------------------------------------------------------------------

class RefUpdate(BaseModel):
    """A single ``<ref> <old> <new>`` triple as received by the hook."""

    ref_name: str = Field(min_length=1)
    old_object: str = Field(pattern=_OBJECT_ID_PATTERN)
    new_object: str = Field(pattern=_OBJECT_ID_PATTERN)
    username: str | None = Field(
        default=None, description="Acting user supplied by the caller; overrides the author line."
    )


class AccessDecision(BaseModel):
    allowed: bool
    errors: list[str] = Field(default_factory=list)


class GateDiagnostic(BaseModel):
    """Structured error / warning emitted while evaluating a ref update."""

    severity: Literal["error", "warning"]
    stage: str = Field(description="Pipeline stage that raised this (config/resolve/classify/policy/...)")
    message: str
    ref_name: str | None = None
    object_id: str | None = None


class GateDecision(BaseModel):
    ref_name: str
    allowed: bool
    exit_code: int = 0
    diagnostics: list[GateDiagnostic] = Field(default_factory=list)
    operation: Operation | None = None

    @property
    def messages(self) -> list[str]:
        return [d.message for d in self.diagnostics if d.severity == "error"]


# ---------------------------------------------------------------------------
# Collaborator protocols
# ---------------------------------------------------------------------------

@runtime_checkable
class ObjectStore(Protocol):
    """Backend queries against one repository.

    The gate depends on this protocol only; ``GitObjectStore`` is the
    production implementation and tests inject fakes.
    """

    def object_type(self, object_id: str) -> str | None:
        """Return the object's type name, or ``None`` if it does not exist."""
        ...

    def object_exists(self, object_id: str) -> bool:
        ...

    def show(self, object_id: str) -> list[str]:
        """Return the name-status ``show`` output of *object_id* as lines."""
        ...

    def rev_list(self, include: list[str], exclude: list[str]) -> list[str]:
        """Return commits reachable from *include* but not *exclude*, oldest first."""
        ...

    def all_local_refs(self) -> list[str]:
        """Return every local branch and tag ref name."""
        ...

    def branches_containing(self, commit_id: str, include_remote: bool = False) -> list[str]:
        ...

    def branches_not_containing(self, commit_id: str, include_remote: bool = False) -> list[str]:
        ...


@runtime_checkable
class PolicyEngine(Protocol):
    def check_access(self, operation: Operation) -> AccessDecision:
        """Return the allow/deny decision for *operation*."""
        ...
