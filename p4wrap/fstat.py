"""Parser for `p4 fstat` report text.

`p4 fstat` prints one block per file, blocks separated by a blank line. Every line is
prefixed by one or more `"... "` markers; the marker count is the line's level:

    ... depotFile //depot/path/to/foo.js
    ... isMapped
    ... headRev 2
    ... ... otherOpen0 user@workspace
    ... ... otherAction0 edit
    ... ... otherOpen 1

Level 1 lines are plain `key value` fields. A field with no value (`isMapped`) maps to
`True`; values are otherwise kept as the literal string, never coerced to numbers.

Level 2 lines describe the other clients that have the file open. Their keys carry an
index suffix (`otherAction0`), and are collected into `record["other"]`, a list with one
dict per index keyed by the bare field name (`{"Open": ..., "Action": ...}`). Indices must
arrive in order without gaps. The block ends with an unindexed `otherOpen <count>` line
that must agree with the number of entries collected.

Any violation (unknown level, unordered index, count mismatch, malformed level 2 key)
rejects the whole report: `parse_fstat()` raises `P4Error(kind=INVALID_REPORT)` without
saying which line failed. A report with exactly one block returns that block's dict;
anything else (including empty output) returns a list.
"""

from __future__ import annotations

import re

from .errors import ErrorKind, P4Error

FstatRecord = dict[str, object]

_MARKER = "... "
_ENTRY_SEPARATOR = "\n\n"
_OTHER_PREFIX = "other"
_OTHER_TERMINATOR = "otherOpen"
_OTHER_KEY_RE = re.compile(r"^other[a-zA-Z]+(\d+)$")

INVALID_REPORT_MESSAGE = "Invalid fstat output!"


class _InvalidReport(Exception):
    pass


def parse_fstat(text: str) -> FstatRecord | list[FstatRecord]:
    """Parse `p4 fstat` output into one record or a list of records."""
    records: list[FstatRecord] = []
    try:
        for entry in text.split(_ENTRY_SEPARATOR):
            if not entry.strip():
                continue
            records.append(_parse_entry(entry))
    except _InvalidReport:
        raise P4Error(kind=ErrorKind.INVALID_REPORT, message=INVALID_REPORT_MESSAGE) from None

    if len(records) == 1:
        return records[0]
    return records


def _parse_entry(entry: str) -> FstatRecord:
    record: FstatRecord = {}
    for raw in entry.split("\n"):
        level, key, value = _split_line(raw)
        if not key:
            continue
        if level == 1:
            record[key] = value
        elif level == 2:
            others = record.setdefault("other", [])
            if not isinstance(others, list):
                raise _InvalidReport(raw)
            _apply_other(others, key, value)
        else:
            raise _InvalidReport(raw)
    return record


def _split_line(line: str) -> tuple[int, str, str | bool]:
    level = 0
    while line.startswith(_MARKER):
        line = line[len(_MARKER):]
        level += 1
    if level == 0 and not line.strip():
        # Stray blank line inside a block.
        return 1, "", True
    key, _, value = line.partition(" ")
    return level, key, (value if value else True)


def _apply_other(others: list[FstatRecord], key: str, value: str | bool) -> None:
    if key == _OTHER_TERMINATOR:
        if not isinstance(value, str) or not value.isdigit() or int(value) != len(others):
            raise _InvalidReport(key)
        return

    m = _OTHER_KEY_RE.match(key)
    if m is None:
        raise _InvalidReport(key)
    digits = m.group(1)
    idx = int(digits)
    if idx == len(others):
        others.append({})
    elif idx != len(others) - 1:
        raise _InvalidReport(key)
    field = key[len(_OTHER_PREFIX):-len(digits)]
    others[idx][field] = value
