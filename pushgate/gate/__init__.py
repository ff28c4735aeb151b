"""Push-time access gate: ref-update classification and commit-range resolution."""

from .classifiers import (
    classify_action,
    classify_commit,
    classify_push_event,
    classify_ref,
    label_for,
    ref_operation_kind,
)
from .commit_range import CommitRangeResolver
from .commit_record import parse_commit_record
from .errors import (
    BackendUnavailableError,
    ConfigurationError,
    ExitCode,
    GateError,
    InvalidObjectError,
    InvalidRefError,
    MissingRepositoryDirectoryError,
    NoRepositoryFoundError,
    UnexpectedTypeError,
)
from .git_store import GitObjectStore
from .models import (
    EMPTY_OBJECT,
    AccessDecision,
    ActionKind,
    FileStatus,
    GateDecision,
    Item,
    Label,
    ObjectType,
    Operation,
    OperationKind,
    PushEvent,
    RefType,
    RefUpdate,
)
from .object_cache import ObjectMetadataCache
from .operation_builder import OperationBuilder
from .push_gate import PushGate, push_exit_code, render_messages

__all__ = [
    "AccessDecision",
    "ActionKind",
    "BackendUnavailableError",
    "classify_action",
    "classify_commit",
    "classify_push_event",
    "classify_ref",
    "CommitRangeResolver",
    "ConfigurationError",
    "EMPTY_OBJECT",
    "ExitCode",
    "FileStatus",
    "GateDecision",
    "GateError",
    "GitObjectStore",
    "InvalidObjectError",
    "InvalidRefError",
    "Item",
    "Label",
    "label_for",
    "MissingRepositoryDirectoryError",
    "NoRepositoryFoundError",
    "ObjectMetadataCache",
    "ObjectType",
    "Operation",
    "OperationBuilder",
    "OperationKind",
    "parse_commit_record",
    "push_exit_code",
    "PushEvent",
    "PushGate",
    "ref_operation_kind",
    "RefType",
    "RefUpdate",
    "render_messages",
    "UnexpectedTypeError",
]
