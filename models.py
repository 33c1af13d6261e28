"""Shared typed models for the conversion pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import IO, Any

NO_DEFAULT_YEAR = 0
NO_DEFAULT_URLDATE: date | None = None


@dataclass(frozen=True, slots=True)
class RawRecord:
    """One unparsed bibliography item as cut out by the divider."""

    key: str
    body: str


@dataclass(frozen=True, slots=True)
class Entry:
    """Structured bibliography entry ready to be rendered."""

    key: str
    authors: tuple[str, ...]
    title: str
    year: int = 0
    url: str = ""
    visited: date | None = None

    @classmethod
    def create(
        cls,
        key: str,
        authors: list[str] | tuple[str, ...],
        title: str,
        year: int = 0,
        url: str = "",
        visited: date | None = None,
    ) -> Entry:
        """Build an entry, synthesizing a key when none is given."""
        authors = tuple(authors)
        if not key:
            key = synthesize_key(title, year, authors)
        return cls(key=key, authors=authors, title=title, year=year, url=url, visited=visited)

    def authors_field(self) -> str:
        return " and ".join(self.authors)


def synthesize_key(title: str, year: int, authors: tuple[str, ...]) -> str:
    """Return "<title>-<year>-<first author>" (first author part dropped if none)."""
    if authors:
        return f"{title}-{year}-{authors[0]}"
    return f"{title}-{year}"


@dataclass(frozen=True)
class ConverterConfig:
    """Settings for one conversion run."""

    input: IO[Any]
    output: IO[Any]
    default_year: int = NO_DEFAULT_YEAR
    default_visited: date | None = NO_DEFAULT_URLDATE
