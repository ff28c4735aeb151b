"""Exit codes and the failure taxonomy of the push gate.

Every fatal condition is an exception carrying the exit code the hook
process ends with.  Only ``PushGate.evaluate`` (and the CLI above it)
turns an exception into a code; everything below it just raises.
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    ALLOWED = 0
    WRONG_ARGC = 1
    NO_CONFIG = 2
    NO_ACCOUNT = 3
    NO_GIT_DIR = 4
    INVALID_REF = 5
    UNEXPECTED_TYPE = 6
    NO_ACCESS = 7
    BACKEND_UNAVAILABLE = 8
    NO_REPOSITORY = 9
    INVALID_OBJECT = 10


class GateError(Exception):
    """Base class for conditions that abort evaluation of a reference."""

    exit_code: ExitCode = ExitCode.NO_ACCESS
    stage: str = "gate"


class ConfigurationError(GateError):
    exit_code = ExitCode.NO_CONFIG
    stage = "config"


class MissingRepositoryDirectoryError(GateError):
    exit_code = ExitCode.NO_GIT_DIR
    stage = "repository"


class NoRepositoryFoundError(GateError):
    exit_code = ExitCode.NO_REPOSITORY
    stage = "repository"


class InvalidRefError(GateError):
    """Ref name has no recognised prefix, or an annotated tag is pushed outside ``refs/tags/``."""

    exit_code = ExitCode.INVALID_REF
    stage = "classify"


class UnexpectedTypeError(GateError):
    """Object exists but its type is not allowed where it was reached."""

    exit_code = ExitCode.UNEXPECTED_TYPE
    stage = "classify"


class InvalidObjectError(GateError):
    """Object id is not the empty sentinel and does not exist in the repository."""

    exit_code = ExitCode.INVALID_OBJECT
    stage = "resolve"


class BackendUnavailableError(GateError):
    """A backend call failed, timed out or could not be started.

    Kept distinct from ``InvalidObjectError`` so "bad input" and
    "tooling broke" are told apart.
    """

    exit_code = ExitCode.BACKEND_UNAVAILABLE
    stage = "backend"
