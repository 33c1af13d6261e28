"""Turn raw bibitem records into structured entries (no field tags in the input)."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import NamedTuple

from extractors import extract_url, extract_year
from models import ConverterConfig, Entry, RawRecord

LOGGER = logging.getLogger(__name__)


class Fields(NamedTuple):
    authors: tuple[str, ...]
    title: str
    year: int


def disambiguate(tokens: list[str], url_present: bool) -> Fields:
    """Assign author/title/year roles to comma-separated tokens by position.

    Rules by token count:
    - 1: the token is the title.
    - 2: author, title. With a URL the second token is taken to be the URL
      remnant and the title stays empty.
    - 3: author, title, year|URL when a URL or a trailing year is present,
      otherwise author, author, title.
    - 4+: authors..., title, then an optional year and an optional URL at
      the end. The year is looked up in the last two tokens.
    """
    n = len(tokens)
    authors: list[str] = []
    title = ""
    year = 0

    if n == 1:
        title = tokens[0]
    elif n == 2:
        authors = tokens[:1]
        if not url_present:
            title = tokens[1]
    elif n == 3:
        authors = tokens[:1]
        year = extract_year(tokens[2])
        if not url_present and year == 0:
            authors.append(tokens[1])
            title = tokens[2]
        else:
            title = tokens[1]
    else:
        last_author = n - 2
        title_index = n - 1
        if url_present:
            last_author -= 1
            title_index -= 1

        year = extract_year(tokens[-1])
        if year == 0:
            year = extract_year(tokens[-2])
        if year != 0:
            last_author -= 1
            title_index -= 1

        authors = tokens[:last_author + 1]
        title = tokens[title_index]

    return Fields(
        authors=tuple(author.strip() for author in authors),
        title=title.strip(),
        year=year,
    )


def parse_record(record: RawRecord, config: ConverterConfig) -> Entry:
    """Build an Entry from one raw record, applying the configured defaults.

    Never raises on odd input: a body that fits no rule still yields an
    entry, just a poorly filled one.
    """
    url = extract_url(record.body)
    fields = disambiguate(record.body.split(","), url_present=bool(url))

    year = fields.year or config.default_year
    entry = Entry.create(
        key=record.key,
        authors=fields.authors,
        title=fields.title,
        year=year,
        url=url,
        visited=config.default_visited,
    )
    if not record.key:
        LOGGER.debug("Parser: generated key %r", entry.key)
    return entry


def parse_records(records: Iterable[RawRecord], config: ConverterConfig) -> Iterator[Entry]:
    for record in records:
        yield parse_record(record, config)
