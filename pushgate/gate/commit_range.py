"""Commit Range Resolver — which commits does a ref update introduce?

Never assumes ``new`` descends from ``old``: a non-fast-forward update is
just "reachable from new, not from old", which rev-list answers directly.
"""

from __future__ import annotations

import logging

from .models import ObjectStore, is_empty_object

logger = logging.getLogger(__name__)


class CommitRangeResolver:
    """Enumerates the commits of a ref update, oldest first.

    * deletion (``new`` empty): nothing.
    * creation (``old`` empty): commits reachable from ``new`` and from no
      other local branch or tag.  ``excluded_ref`` is left out of the
      "other refs" set so a ref that was already written is not mistaken for
      a preexisting one.
    * update: commits reachable from ``new`` but not from ``old``.

    Results are cached per ``(old, new, excluded_ref)`` for the lifetime of
    the resolver.
    """

    def __init__(self, store: ObjectStore) -> None:
        self._store = store
        self._cache: dict[tuple[str, str, str | None], list[str]] = {}

    def commits_between(
        self,
        old_object: str,
        new_object: str,
        excluded_ref: str | None = None,
    ) -> list[str]:
        key = (old_object, new_object, excluded_ref)
        if key not in self._cache:
            self._cache[key] = self._resolve(old_object, new_object, excluded_ref)
        return list(self._cache[key])

    def _resolve(self, old_object: str, new_object: str, excluded_ref: str | None) -> list[str]:
        if is_empty_object(new_object):
            return []

        if is_empty_object(old_object):
            other_refs = [ref for ref in self._store.all_local_refs() if ref != excluded_ref]
            commits = self._store.rev_list([new_object], other_refs)
            logger.debug(
                "%d new commit(s) on created ref %s (excluding %d other refs)",
                len(commits), excluded_ref or new_object, len(other_refs),
            )
            return commits

        commits = self._store.rev_list([new_object], [old_object])
        logger.debug("%d commit(s) in %s..%s", len(commits), old_object, new_object)
        return commits
