"""Object Metadata Cache — memoizes backend answers per object id.

One cache belongs to one hook invocation.  Records are filled lazily and
never invalidated: the repository does not change while the hook runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .commit_record import parse_author, parse_merge_parents
from .errors import InvalidObjectError, UnexpectedTypeError
from .models import ObjectStore, ObjectType, is_empty_object

logger = logging.getLogger(__name__)

_SHOWABLE_TYPES = (ObjectType.COMMIT, ObjectType.TAG)


@dataclass
class ObjectRecord:
    type: ObjectType | None = None
    valid: bool | None = None
    log: list[str] | None = None
    merge_checked: bool = False
    merge_parents: list[str] | None = field(default=None)


class ObjectMetadataCache:
    """Caches type, validity, ``show`` output and merge parents of objects.

    Parameters
    ----------
    store:
        ``ObjectStore`` the answers come from.  Each question is asked of it
        at most once per object id.
    """

    def __init__(self, store: ObjectStore) -> None:
        self._store = store
        self._records: dict[str, ObjectRecord] = {}

    @property
    def store(self) -> ObjectStore:
        return self._store

    def record(self, object_id: str) -> ObjectRecord:
        return self._records.setdefault(object_id, ObjectRecord())

    def is_valid(self, object_id: str) -> bool:
        if is_empty_object(object_id):
            return True
        rec = self.record(object_id)
        if rec.valid is None:
            raw_type = self._store.object_type(object_id)
            if raw_type is not None:
                try:
                    rec.type = ObjectType(raw_type)
                except ValueError as exc:
                    raise UnexpectedTypeError(
                        f"Object '{object_id}' has unknown type '{raw_type}'"
                    ) from exc
            rec.valid = raw_type is not None
        return rec.valid

    def type_of(self, object_id: str) -> ObjectType:
        """Return the type of *object_id*; the empty sentinel is ``EMPTY`` without a backend call.

        Raises
        ------
        InvalidObjectError
            If the object does not exist in the repository.
        """
        if is_empty_object(object_id):
            return ObjectType.EMPTY
        if not self.is_valid(object_id):
            raise InvalidObjectError(f"Object '{object_id}' is not valid in this repository")
        return self.record(object_id).type

    def show(self, object_id: str) -> list[str]:
        """Return the ``show`` lines of a commit or tag.

        Raises
        ------
        UnexpectedTypeError
            If the object is neither a commit nor a tag.
        """
        object_type = self.type_of(object_id)
        if object_type not in _SHOWABLE_TYPES:
            raise UnexpectedTypeError(
                f"Expected object '{object_id}' to be a commit or tag, "
                f"is type '{object_type.value}' instead."
            )
        rec = self.record(object_id)
        if rec.log is None:
            rec.log = self._store.show(object_id)
        return rec.log

    def author(self, object_id: str) -> str | None:
        return parse_author(self.show(object_id))

    def merge_parents(self, object_id: str) -> list[str] | None:
        """Return merge parents of *object_id*, or ``None`` if it is not a merge."""
        rec = self.record(object_id)
        if not rec.merge_checked:
            rec.merge_parents = parse_merge_parents(self.show(object_id))
            rec.merge_checked = True
            if rec.merge_parents is not None:
                logger.debug("%s is a merge of %s", object_id, ", ".join(rec.merge_parents))
        return rec.merge_parents
