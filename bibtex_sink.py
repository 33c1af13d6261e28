"""BibTeX writer for converted entries."""

from __future__ import annotations

import io
import logging
from typing import IO, Any

from models import Entry

LOGGER = logging.getLogger(__name__)

ENTRY_SEPARATOR = "\n\n"


def render_entry(entry: Entry) -> str:
    """Return the ``@online`` block for entry followed by a blank line.

    Field order is fixed: author, title, year, url, urldate. year is left
    out when it is 0, url when empty and urldate when no visit date is set.
    """
    lines = [
        f"@online{{{entry.key},",
        f'\tauthor = "{entry.authors_field()}",',
        f"\ttitle = {{{{{entry.title}}}}},",
    ]
    if entry.year:
        lines.append(f'\tyear = "{entry.year}",')
    if entry.url:
        lines.append(f"\turl = {{{entry.url}}},")
    if entry.visited is not None:
        visited = entry.visited
        lines.append(f'\turldate = "{visited.year}-{visited.month}-{visited.day}",')
    lines.append("}")
    return "\n".join(lines) + ENTRY_SEPARATOR


def write_entry(entry: Entry, output: IO[Any]) -> None:
    """Write one rendered entry to a text or binary stream.

    Write errors are not caught.
    """
    text = render_entry(entry)
    if _is_text_stream(output):
        output.write(text)
    else:
        output.write(text.encode("utf-8"))
    LOGGER.debug("Wrote BibTeX entry key=%s", entry.key)


def _is_text_stream(output: IO[Any]) -> bool:
    # Text wrappers expose an encoding (tempfile wrappers forward it); StringIO reports None.
    return isinstance(output, io.TextIOBase) or getattr(output, "encoding", None) is not None
