r"""Commit Record Parser — one ``show --name-status --pretty=short`` response → ``CommitRecord``.

Layout of the response for a commit::

    commit <id>
    Merge: <parent> <parent>          (merges only)
    Author: <name and email>
    <blank>
        <indented message>
    <blank>
    <status>\t<path>[\t<new path>]
    ...

An annotated tag prints its own ``tag``/``Tagger:`` header block first,
followed by the same layout for the tagged commit.
"""

from __future__ import annotations

import re

from .models import CommitRecord, FileStatus, Item

_AUTHOR_RE = re.compile(r"^(?:Author|Tagger):(.*)$")
_MERGE_RE = re.compile(r"^Merge:(.*)$")
_STATUS_LINE_RE = re.compile(r"^(?P<code>[ACDMRTUXB])\d*\t(?P<path>[^\t]+)(?:\t(?P<new_path>[^\t]+))?$")


def _header(lines: list[str]):
    """Yield the header lines, up to the first blank line."""
    for line in lines:
        if not line.strip():
            return
        yield line


def parse_author(lines: list[str]) -> str | None:
    """Return the first ``Author:``/``Tagger:`` value of the header, trimmed."""
    for line in _header(lines):
        m = _AUTHOR_RE.match(line)
        if m:
            return m.group(1).strip() or None
    return None


def parse_merge_parents(lines: list[str]) -> list[str] | None:
    """Return the parent ids of a ``Merge:`` header line, or ``None``.

    Presence of the line decides "is a merge", whatever the parent count.
    Abbreviated ids may carry ``...`` truncation markers, which are removed.
    """
    for line in _header(lines):
        m = _MERGE_RE.match(line)
        if m:
            parents = [p.replace(".", "") for p in m.group(1).split()]
            return [p for p in parents if p]
    return None


def _status_block(lines: list[str]) -> list[str]:
    """Return the trailing run of status lines, in output order."""
    block: list[str] = []
    for line in reversed(lines):
        if not line.strip() or not _STATUS_LINE_RE.match(line):
            break
        block.append(line)
    block.reverse()
    return block


def parse_file_items(lines: list[str]) -> list[Item]:
    """Decode the file-status section into items, preserving output order.

    A copy/rename line yields two items: the new path with ``old_path`` set,
    then the source path carrying the same bare status letter.
    """
    items: list[Item] = []
    for line in _status_block(lines):
        m = _STATUS_LINE_RE.match(line)
        status = FileStatus(m.group("code"))
        path = m.group("path")
        new_path = m.group("new_path")
        if new_path is not None:
            items.append(Item(path=new_path, status=status, old_path=path))
        items.append(Item(path=path, status=status))
    return items


def parse_commit_record(lines: list[str]) -> CommitRecord:
    return CommitRecord(
        author=parse_author(lines),
        merge_parents=parse_merge_parents(lines),
        items=parse_file_items(lines),
    )
