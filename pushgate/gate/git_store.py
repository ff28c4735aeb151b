"""Object Store Adapter backed by the ``git`` binary.

This is the only module that shells out.  Every command runs with
``git -C <repo_path>`` so nothing depends on the working directory, and
every call is bounded by a timeout: a hook that hangs blocks the pusher.
The inherited environment is passed through unchanged so the quarantine
object directory of an in-progress push stays visible.
"""

from __future__ import annotations

import logging
import subprocess
import time
from pathlib import Path

from .errors import BackendUnavailableError, MissingRepositoryDirectoryError, NoRepositoryFoundError

logger = logging.getLogger(__name__)

_NOT_A_REPOSITORY = "not a git repository"


class GitObjectStore:
    """Implements the ``ObjectStore`` protocol for a local repository."""

    def __init__(
        self,
        repo_path: Path | str,
        *,
        timeout: float = 30.0,
        git_binary: str = "git",
    ) -> None:
        self.repo_path = Path(repo_path)
        self.timeout = timeout
        self.git_binary = git_binary

    # ------------------------------------------------------------------
    # Command execution
    # ------------------------------------------------------------------

    def _run_git(
        self,
        args: list[str],
        *,
        check: bool = True,
        stdin: str | None = None,
    ) -> subprocess.CompletedProcess[str]:
        """Run a git command in the repository.

        Raises
        ------
        NoRepositoryFoundError
            If git reports that ``repo_path`` is not a repository.
        BackendUnavailableError
            If git cannot be started, times out, or (with ``check``) exits non-zero.
        """
        cmd = [self.git_binary, "-C", str(self.repo_path), *args]
        start = time.perf_counter()
        try:
            result = subprocess.run(
                cmd,
                input=stdin,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise BackendUnavailableError(
                f"git {args[0]} timed out after {self.timeout}s"
            ) from exc
        except OSError as exc:
            raise BackendUnavailableError(f"could not run {self.git_binary}: {exc}") from exc

        logger.debug(
            "git %s exited %d in %.1fms",
            " ".join(args), result.returncode, (time.perf_counter() - start) * 1000,
        )

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            if _NOT_A_REPOSITORY in stderr.lower():
                raise NoRepositoryFoundError(f"No git repository found at {self.repo_path}")
            if check:
                raise BackendUnavailableError(
                    f"git {args[0]} failed with exit code {result.returncode}: {stderr}"
                )
        return result

    def verify(self) -> None:
        """Check that ``repo_path`` exists and holds a repository."""
        if not self.repo_path.is_dir():
            raise MissingRepositoryDirectoryError(
                f"Repository directory {self.repo_path} does not exist"
            )
        self._run_git(["rev-parse", "--git-dir"])

    # ------------------------------------------------------------------
    # ObjectStore protocol
    # ------------------------------------------------------------------

    def object_type(self, object_id: str) -> str | None:
        result = self._run_git(["cat-file", "-t", object_id], check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def object_exists(self, object_id: str) -> bool:
        return self._run_git(["cat-file", "-e", object_id], check=False).returncode == 0

    def show(self, object_id: str) -> list[str]:
        result = self._run_git([
            "-c", "core.quotepath=off",
            "show", "--no-color", "--name-status", "--find-renames",
            "--pretty=short", "--date=iso8601", object_id, "--",
        ])
        lines = result.stdout.splitlines()
        while lines and not lines[-1].strip():
            lines.pop()
        return lines

    def rev_list(self, include: list[str], exclude: list[str]) -> list[str]:
        # Revisions go through stdin: the exclusion list can hold every ref in the repo.
        revisions = [*include, *(f"^{rev}" for rev in exclude)]
        result = self._run_git(
            ["rev-list", "--reverse", "--stdin"],
            stdin="\n".join(revisions) + "\n",
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def all_local_refs(self) -> list[str]:
        result = self._run_git(
            ["for-each-ref", "--format=%(refname)", "refs/heads/", "refs/tags/"]
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def branches_containing(self, commit_id: str, include_remote: bool = False) -> list[str]:
        return self._branches("--contains", commit_id, include_remote)

    def branches_not_containing(self, commit_id: str, include_remote: bool = False) -> list[str]:
        return self._branches("--no-contains", commit_id, include_remote)

    def _branches(self, mode: str, commit_id: str, include_remote: bool) -> list[str]:
        args = ["branch", "--format=%(refname)", mode, commit_id]
        if include_remote:
            args.insert(1, "--all")
        result = self._run_git(args)
        return [
            line.strip()
            for line in result.stdout.splitlines()
            if line.strip().startswith("refs/")
        ]
