"""Split a plain TeX bibliography into one raw record per \\bibitem."""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Iterator

from errors import BibEmptyError, BibSyntaxError, BibUnclosedError
from extractors import BIBITEM_MARKER, END_MARKER, extract_key
from models import RawRecord

LOGGER = logging.getLogger(__name__)


class DividerState(enum.Enum):
    SEEK_FIRST_ITEM = "seek_first_item"
    IN_ENTRY = "in_entry"
    DONE = "done"


def divide(stream: Iterable[str | bytes]) -> Iterator[RawRecord]:
    """Yield a RawRecord for every ``\\bibitem`` found in stream.

    Lines belonging to an item are trimmed and concatenated without a
    separator; blank lines are dropped. Reading stops at
    ``\\end{thebibliography}``.

    Raises:
        BibEmptyError: the stream ended before the first ``\\bibitem``.
        BibUnclosedError: the stream ended before the end marker. The record
            accumulated so far is yielded first.
    """
    state = DividerState.SEEK_FIRST_ITEM
    key = ""
    parts: list[str] = []
    emitted = 0

    for line in _lines(stream):
        if state is DividerState.SEEK_FIRST_ITEM:
            if BIBITEM_MARKER in line:
                key = _key_or_empty(line)
                state = DividerState.IN_ENTRY
            continue

        if BIBITEM_MARKER in line:
            yield RawRecord(key=key, body="".join(parts))
            emitted += 1
            parts = []
            key = _key_or_empty(line)
        elif END_MARKER in line:
            yield RawRecord(key=key, body="".join(parts))
            emitted += 1
            state = DividerState.DONE
            break
        else:
            stripped = line.strip()
            if stripped:
                parts.append(stripped)

    if state is DividerState.SEEK_FIRST_ITEM:
        raise BibEmptyError()

    if state is DividerState.IN_ENTRY:
        yield RawRecord(key=key, body="".join(parts))
        emitted += 1
        LOGGER.debug("Divider: input ended after %s records without end marker", emitted)
        raise BibUnclosedError()

    LOGGER.debug("Divider: %s records", emitted)


def _lines(stream: Iterable[str | bytes]) -> Iterator[str]:
    for raw in stream:
        line = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        yield line.rstrip("\r\n")


def _key_or_empty(line: str) -> str:
    try:
        return extract_key(line)
    except BibSyntaxError as exc:
        LOGGER.warning("Divider: cannot read bibitem key, a key will be generated: %s", exc)
        return ""
