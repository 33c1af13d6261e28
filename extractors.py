"""String helpers that pull keys, URLs and years out of TeX bibliography text."""

from __future__ import annotations

import re

from errors import BibSyntaxError

BIBITEM_MARKER = "\\bibitem{"
END_MARKER = "\\end{thebibliography}"
URL_TOKEN = "\\url{"

# Longest raw field still accepted as a year: four digits plus surrounding blanks.
_MAX_YEAR_FIELD_LEN = 6
_YEAR_RE = re.compile(r"[0-9]{4}")


def extract_key(line: str) -> str:
    """Return the key of a ``\\bibitem{key}`` line.

    The key is whatever sits between the first ``{`` and the last ``}``.
    Raises BibSyntaxError when the marker or the closing brace is missing.
    """
    if BIBITEM_MARKER not in line:
        raise BibSyntaxError(f"Syntax error: no bibitem marker in {line!r}")

    start = line.find("{")
    end = line.rfind("}")
    if end == -1 or end < start:
        raise BibSyntaxError(f"Syntax error: unbalanced braces in {line!r}")

    return line[start + 1:end]


def extract_url(text: str) -> str:
    """Return the argument of the last ``\\url{...}`` in text, or "" if there is none."""
    start = text.rfind(URL_TOKEN)
    if start == -1:
        return ""

    start += len(URL_TOKEN)
    end = text.find("}", start)
    if end == -1:
        return text[start:]
    return text[start:end]


def extract_year(field: str) -> int:
    """Return the year held by a comma-separated field, or 0.

    Only short fields that are exactly four digits once trimmed count, so
    page ranges or titles that merely start with digits are not mistaken
    for a year.
    """
    if len(field) > _MAX_YEAR_FIELD_LEN:
        return 0

    match = _YEAR_RE.fullmatch(field.strip())
    if match is None:
        return 0
    return int(match.group(0))
