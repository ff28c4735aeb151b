#!/usr/bin/env python
"""Git server hook: decide whether each pushed reference may be updated.

Update-hook style (one ref per invocation)::

    python run_hook.py /etc/pushgate/repo.env refs/heads/master <old> <new>

Pre-receive style (``<old> <new> <ref>`` lines on stdin, all refs in one run)::

    python run_hook.py /etc/pushgate/repo.env < updates

The config file uses dotenv syntax::

    PUSHGATE_REPO_ID=42
    PUSHGATE_POLICY_URL=https://vcs.example.org/api/push-access
    PUSHGATE_ALLOWED_USERS=Release Bot <release@example.org>
    PUSHGATE_ALLOW_TAG_REMOVAL=false

Exit 0 allows the update; any other code refuses it (see ``ExitCode``).
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import TextIO

from dotenv import load_dotenv
from pydantic import ValidationError

from pushgate.config import GateConfig
from pushgate.gate import ExitCode, GateError, PushGate, RefUpdate, push_exit_code, render_messages

logger = logging.getLogger("pushgate.hook")


class _HookArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(int(ExitCode.WRONG_ARGC), f"{self.prog}: error: {message}\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = _HookArgumentParser(description="Push-time access gate for git references.")
    parser.add_argument("config", help="Path of the dotenv-format configuration file")
    parser.add_argument(
        "update", nargs="*", metavar="REF OLD NEW",
        help="Ref name, old object id and new object id (omit to read pre-receive lines from stdin)",
    )
    parser.add_argument("--user", default=None, help="Acting username; defaults to $PUSHGATE_USER or the commit author")
    return parser


def _read_updates(stream: TextIO, username: str | None) -> list[RefUpdate]:
    updates: list[RefUpdate] = []
    for line in stream:
        if not line.strip():
            continue
        parts = line.split()
        if len(parts) != 3:
            raise ValueError(f"Expected '<old> <new> <ref>', got: {line.strip()!r}")
        old_object, new_object, ref_name = parts
        updates.append(RefUpdate(
            ref_name=ref_name, old_object=old_object, new_object=new_object, username=username,
        ))
    return updates


def main(argv: list[str] | None = None, stdin: TextIO | None = None) -> int:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args(argv)

    if len(args.update) not in (0, 3):
        parser.print_usage(sys.stderr)
        return int(ExitCode.WRONG_ARGC)

    try:
        config = GateConfig.from_file(args.config)
    except GateError as exc:
        print(str(exc), file=sys.stderr)
        return int(exc.exit_code)

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    username = args.user or os.environ.get("PUSHGATE_USER") or None
    try:
        if args.update:
            ref_name, old_object, new_object = args.update
            updates = [RefUpdate(
                ref_name=ref_name, old_object=old_object, new_object=new_object, username=username,
            )]
        else:
            updates = _read_updates(stdin or sys.stdin, username)
    except ValidationError as exc:
        print(f"Error: invalid object id: {exc}", file=sys.stderr)
        return int(ExitCode.INVALID_OBJECT)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return int(ExitCode.WRONG_ARGC)

    try:
        gate = PushGate.from_config(config)
    except GateError as exc:
        logger.error("cannot open repository: %s", exc)
        print(str(exc), file=sys.stderr)
        return int(exc.exit_code)

    with gate:
        decisions = gate.evaluate_push(updates)
    block = render_messages(decisions)
    if block:
        print(block + "\n", file=sys.stderr)
    return push_exit_code(decisions)


if __name__ == "__main__":
    sys.exit(main())
