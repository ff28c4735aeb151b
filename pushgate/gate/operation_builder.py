"""Operation Builder — folds one ref update into the ``Operation`` the policy engine sees."""

from __future__ import annotations

import logging

from .classifiers import (
    classify_commit,
    classify_push_event,
    classify_ref,
    label_for,
    ref_operation_kind,
)
from .commit_range import CommitRangeResolver
from .commit_record import parse_file_items
from .models import (
    CommitSummary,
    GateDiagnostic,
    Item,
    Operation,
    OperationKind,
    PushEvent,
    RefUpdate,
    is_empty_object,
)
from .object_cache import ObjectMetadataCache

logger = logging.getLogger(__name__)


def _operation_kind(event: PushEvent, old_object: str) -> OperationKind:
    if event in (PushEvent.LIGHTWEIGHT_TAG, PushEvent.ANNOTATED_TAG, PushEvent.TAG_DELETION):
        return OperationKind.TAG
    if event is PushEvent.BRANCH_COMMIT and not is_empty_object(old_object):
        return OperationKind.COMMIT
    return OperationKind.BRANCH


class OperationBuilder:
    """Builds an ``Operation`` for a single ``RefUpdate``.

    Parameters
    ----------
    repository_id:
        Identifier the policy engine knows this repository by.
    cache:
        Per-invocation ``ObjectMetadataCache``.
    resolver:
        ``CommitRangeResolver`` sharing the cache's object store.
    """

    def __init__(
        self,
        repository_id: str,
        cache: ObjectMetadataCache,
        resolver: CommitRangeResolver,
    ) -> None:
        self._repository_id = repository_id
        self._cache = cache
        self._resolver = resolver

    def build(self, update: RefUpdate) -> tuple[Operation, list[GateDiagnostic]]:
        """Classify *update*, enumerate its commits and fold their file statuses.

        Returns
        -------
        (operation, diagnostics)
            *diagnostics* only holds soft conditions; fatal ones raise
            ``GateError`` subclasses and no operation is produced.
        """
        diagnostics: list[GateDiagnostic] = []
        ref_name = update.ref_name
        old_object, new_object = update.old_object, update.new_object

        ref_type = classify_ref(ref_name)
        ref_operation_kind(ref_type)  # unrecognised refs fail before any backend call
        self._cache.type_of(old_object)
        new_type = self._cache.type_of(new_object)
        event = classify_push_event(new_type, ref_type, ref_name)
        label = label_for(ref_name, old_object, new_object, self._cache)

        commits: list[CommitSummary] = []
        items: dict[str, Item] = {}
        for commit_id in self._resolver.commits_between(old_object, new_object, ref_name):
            lines = self._cache.show(commit_id)
            for item in parse_file_items(lines):
                items[item.path] = item
            commits.append(CommitSummary(
                commit_id=commit_id,
                author=self._cache.author(commit_id),
                action=classify_commit(commit_id, self._cache),
                merge_parents=self._cache.merge_parents(commit_id),
            ))
        # Nothing new reachable (tag of a known commit, rewind): describe new itself.
        if not commits and not is_empty_object(new_object):
            for item in parse_file_items(self._cache.show(new_object)):
                items[item.path] = item

        username = update.username
        if not username:
            author = None if is_empty_object(new_object) else self._cache.author(new_object)
            if author is None:
                diagnostics.append(GateDiagnostic(
                    severity="warning",
                    stage="author",
                    message=f"No author or tagger found for '{ref_name}'; evaluating with an empty username.",
                    ref_name=ref_name,
                    object_id=new_object,
                ))
                logger.warning("no author for %s at %s", ref_name, new_object)
            username = author or ""

        operation = Operation(
            repository_id=self._repository_id,
            operation_kind=_operation_kind(event, old_object),
            event=event,
            username=username,
            labels=[label],
            commits=commits,
            items=items,
        )
        logger.info(
            "%s %s: %s by %r, %d commit(s), %d item(s)",
            label.action.value, ref_name, event.value, username, len(commits), len(items),
        )
        return operation, diagnostics
