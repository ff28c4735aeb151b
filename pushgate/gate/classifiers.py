"""Ref and action classification.

``classify_ref`` and ``ref_operation_kind`` are pure.  ``classify_action``
only consults the cache for merge detection, and only when it gets that far.
"""

from __future__ import annotations

from .errors import InvalidRefError, UnexpectedTypeError
from .models import (
    ActionKind,
    Label,
    ObjectType,
    OperationKind,
    PushEvent,
    RefType,
    is_empty_object,
)
from .object_cache import ObjectMetadataCache

# Checked in this order; exact, case-sensitive prefixes.
_REF_PREFIXES: tuple[tuple[str, RefType], ...] = (
    ("refs/tags/", RefType.TAGS),
    ("refs/heads/", RefType.HEADS),
    ("refs/remotes/", RefType.REMOTES),
)


def classify_ref(ref_name: str) -> RefType:
    for prefix, ref_type in _REF_PREFIXES:
        if ref_name.startswith(prefix):
            return ref_type
    return RefType.INVALID


def classify_action(
    old_object: str,
    new_object: str,
    cache: ObjectMetadataCache,
    branch_or_tag: bool = False,
) -> ActionKind:
    """Classify one transition, first match wins: created, deleted, merged, modified.

    With *branch_or_tag* the update is a whole ref, so merges collapse into
    ``MODIFIED``; only single commits inside a pushed range report ``MERGED``.
    """
    if is_empty_object(old_object):
        return ActionKind.CREATED
    if is_empty_object(new_object):
        return ActionKind.DELETED
    if not branch_or_tag and cache.merge_parents(new_object) is not None:
        return ActionKind.MERGED
    return ActionKind.MODIFIED


def classify_commit(commit_id: str, cache: ObjectMetadataCache) -> ActionKind:
    """Action of one commit inside a pushed range: ``MERGED`` or ``MODIFIED``.

    A commit is never created or deleted on its own, whatever the ref did.
    """
    if cache.merge_parents(commit_id) is not None:
        return ActionKind.MERGED
    return ActionKind.MODIFIED


def ref_operation_kind(ref_type: RefType) -> OperationKind:
    if ref_type in (RefType.HEADS, RefType.REMOTES):
        return OperationKind.BRANCH
    if ref_type is RefType.TAGS:
        return OperationKind.TAG
    raise InvalidRefError(f"Unexpected reference type '{ref_type.value}' received.")


def classify_push_event(new_type: ObjectType, ref_type: RefType, ref_name: str = "") -> PushEvent:
    """Dispatch a ref update on (new object type, ref type).

    Raises
    ------
    InvalidRefError
        For an unrecognised ref, or an annotated tag outside ``refs/tags/``.
    UnexpectedTypeError
        When a blob or tree is pushed to a ref.
    """
    if ref_type is RefType.INVALID:
        raise InvalidRefError(f"'{ref_name}' is not a branch, tag or remote reference.")
    if new_type in (ObjectType.BLOB, ObjectType.TREE):
        raise UnexpectedTypeError(
            f"Cannot update '{ref_name}' to a {new_type.value}; expected a commit or tag."
        )

    is_tag_ref = ref_type is RefType.TAGS
    if new_type is ObjectType.TAG:
        if not is_tag_ref:
            raise InvalidRefError(
                f"Annotated tag pushed to '{ref_name}', which is not under refs/tags/."
            )
        return PushEvent.ANNOTATED_TAG
    if new_type is ObjectType.EMPTY:
        return PushEvent.TAG_DELETION if is_tag_ref else PushEvent.BRANCH_DELETION
    return PushEvent.LIGHTWEIGHT_TAG if is_tag_ref else PushEvent.BRANCH_COMMIT


def label_for(
    ref_name: str,
    old_object: str,
    new_object: str,
    cache: ObjectMetadataCache,
) -> Label:
    ref_type = classify_ref(ref_name)
    return Label(
        ref_name=ref_name,
        ref_type=ref_type,
        action=classify_action(old_object, new_object, cache, branch_or_tag=True),
        operation_kind=ref_operation_kind(ref_type),
    )
