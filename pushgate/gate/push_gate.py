"""PushGate — ALLOW/DENY for each reference a push updates.

Pipeline per ref:
    classify (ref, action) → resolve objects → enumerate commits →
    fold commit records into an ``Operation`` → allow-list / tag-removal
    switch → policy engine

Fatal conditions raised anywhere in the pipeline are turned into a denied
``GateDecision`` here and nowhere else; they never downgrade to "allow".
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .commit_range import CommitRangeResolver
from .errors import ExitCode, GateError
from .git_store import GitObjectStore
from .models import (
    GateDecision,
    GateDiagnostic,
    ObjectStore,
    PolicyEngine,
    PushEvent,
    RefUpdate,
)
from .object_cache import ObjectMetadataCache
from .operation_builder import OperationBuilder

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pushgate.config import GateConfig

logger = logging.getLogger(__name__)

DEFAULT_TAG_DELETE_DENIED_MESSAGE = "** ERROR: You are not allowed to delete tags."


class PushGate:
    """Evaluates ref updates against one repository.

    A gate owns the object cache and commit-range cache, so one instance
    covers exactly one hook invocation.

    Parameters
    ----------
    repository_id:
        Identifier handed to the policy engine.
    store:
        ``ObjectStore`` for the repository.
    policy_engine:
        Decides users outside *allowed_users*.  ``None`` denies them.
    allowed_users:
        Usernames exempt from policy evaluation.
    allow_tag_removal:
        When ``False``, tag deletions are denied before the policy engine is asked.
    """

    def __init__(
        self,
        repository_id: str,
        store: ObjectStore,
        policy_engine: PolicyEngine | None = None,
        *,
        allowed_users: Iterable[str] = (),
        allow_tag_removal: bool = True,
        tag_delete_denied_message: str = DEFAULT_TAG_DELETE_DENIED_MESSAGE,
    ) -> None:
        self._policy = policy_engine
        self._allowed_users = frozenset(allowed_users)
        self._allow_tag_removal = allow_tag_removal
        self._tag_delete_denied_message = tag_delete_denied_message
        self.cache = ObjectMetadataCache(store)
        self.resolver = CommitRangeResolver(store)
        self._builder = OperationBuilder(repository_id, self.cache, self.resolver)

    @classmethod
    def from_config(cls, config: GateConfig) -> PushGate:
        """Wire a gate from configuration: git backend plus optional HTTP policy engine."""
        from pushgate.policy.http_engine import HttpPolicyEngine

        store = GitObjectStore(
            config.repo_path, timeout=config.git_timeout, git_binary=config.git_binary
        )
        store.verify()
        engine = (
            HttpPolicyEngine(config.policy_url, timeout=config.policy_timeout)
            if config.policy_url
            else None
        )
        return cls(
            config.repo_id,
            store,
            engine,
            allowed_users=config.allowed_users,
            allow_tag_removal=config.allow_tag_removal,
            tag_delete_denied_message=config.tag_delete_denied_message,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def evaluate(self, update: RefUpdate) -> GateDecision:
        """Decide a single ref update."""
        ref_name = update.ref_name
        try:
            operation, diagnostics = self._builder.build(update)
        except GateError as exc:
            logger.error("%s: %s", ref_name, exc)
            return _deny(ref_name, exc.exit_code, exc.stage, str(exc), object_id=update.new_object)

        def decision(allowed: bool, exit_code: ExitCode, stage: str = "policy", message: str = "") -> GateDecision:
            diags = list(diagnostics)
            if message:
                diags.append(GateDiagnostic(
                    severity="error", stage=stage, message=message, ref_name=ref_name,
                ))
            return GateDecision(
                ref_name=ref_name,
                allowed=allowed,
                exit_code=int(exit_code),
                diagnostics=diags,
                operation=operation,
            )

        if operation.username in self._allowed_users:
            logger.info("%s: %r is allow-listed", ref_name, operation.username)
            return decision(True, ExitCode.ALLOWED)

        if operation.event is PushEvent.TAG_DELETION and not self._allow_tag_removal:
            return decision(False, ExitCode.NO_ACCESS, "tag-removal", self._tag_delete_denied_message)

        if self._policy is None:
            return decision(
                False, ExitCode.NO_ACCOUNT, "account",
                f"User '{operation.username}' is not allowed to push and no policy engine is configured.",
            )

        try:
            access = self._policy.check_access(operation)
        except GateError as exc:
            logger.error("%s: policy engine failed: %s", ref_name, exc)
            return decision(False, exc.exit_code, exc.stage, str(exc))

        if access.allowed:
            return decision(True, ExitCode.ALLOWED)

        message = "\n\n".join(access.errors) or f"Access denied for '{ref_name}'."
        logger.info("%s: denied by policy engine", ref_name)
        return decision(False, ExitCode.NO_ACCESS, "policy", message)

    def evaluate_push(self, updates: Iterable[RefUpdate]) -> list[GateDecision]:
        """Decide every ref of a push, in the order supplied.

        A failing ref never stops evaluation of the others, so every
        diagnostic reaches the pusher.
        """
        return [self.evaluate(update) for update in updates]

    def close(self) -> None:
        """Release the policy engine's connections, if it holds any."""
        close = getattr(self._policy, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> PushGate:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _deny(
    ref_name: str,
    exit_code: ExitCode,
    stage: str,
    message: str,
    *,
    object_id: str | None = None,
) -> GateDecision:
    return GateDecision(
        ref_name=ref_name,
        allowed=False,
        exit_code=int(exit_code),
        diagnostics=[GateDiagnostic(
            severity="error", stage=stage, message=message,
            ref_name=ref_name, object_id=object_id,
        )],
    )


def push_exit_code(decisions: list[GateDecision]) -> int:
    """Exit code for a whole push: the first failing ref's code, else 0."""
    for d in decisions:
        if not d.allowed:
            return d.exit_code
    return int(ExitCode.ALLOWED)


def render_messages(decisions: list[GateDecision]) -> str:
    """Join the error messages of all decisions into the block shown to the pusher."""
    blocks = [message for d in decisions for message in d.messages]
    return "\n\n".join(blocks)
