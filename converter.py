"""Three-stage TeX -> BibTeX conversion: divider -> parser -> writer.

Each stage runs in its own thread and hands items to the next one through a
bounded queue, so a slow writer holds back the parser and the divider. Order
is preserved end to end because every queue has one producer and one
consumer.

The caller waits on a single outcome queue that receives either the first
error or the completion signal, whichever comes first. Stages are never
cancelled: once an error is reported the others may keep running, but their
output is no longer looked at.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any

from bibtex_sink import write_entry
from divider import divide
from entry_parser import parse_records
from models import ConverterConfig

LOGGER = logging.getLogger(__name__)

STAGE_QUEUE_SIZE = 10

# Marks the end of a stage queue.
_CLOSED = object()


class Tex2BibConverter:
    """Converts a plain TeX bibliography into BibTeX, one conversion per instance."""

    def __init__(self, config: ConverterConfig) -> None:
        self.config = config
        self._records: queue.Queue[Any] = queue.Queue(maxsize=STAGE_QUEUE_SIZE)
        self._entries: queue.Queue[Any] = queue.Queue(maxsize=STAGE_QUEUE_SIZE)
        self._outcome: queue.Queue[BaseException | int] = queue.Queue()
        self._threads: list[threading.Thread] = []
        self.entries_written = 0

    def convert(self) -> None:
        """Start the three stages. Use wait() to collect the result."""
        if self._threads:
            raise RuntimeError("Conversion already started")

        for name, target in (
            ("tex2bib-writer", self._writer),
            ("tex2bib-parser", self._parser),
            ("tex2bib-divider", self._divider),
        ):
            thread = threading.Thread(target=target, name=name, daemon=True)
            self._threads.append(thread)
            thread.start()

    def wait(self) -> int:
        """Block until the conversion finishes or fails.

        Returns the number of entries written. Re-raises the first error
        reported by any stage.
        """
        outcome = self._outcome.get()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def _divider(self) -> None:
        LOGGER.debug("Divider stage started")
        try:
            for record in divide(self.config.input):
                self._records.put(record)
        except Exception as exc:
            LOGGER.debug("Divider stage stopped: %s", exc)
            # Reported before closing the queue so it beats the completion signal.
            self._report(exc)
        finally:
            self._records.put(_CLOSED)

    def _parser(self) -> None:
        LOGGER.debug("Parser stage started")
        try:
            records = iter(self._records.get, _CLOSED)
            for entry in parse_records(records, self.config):
                self._entries.put(entry)
        except Exception as exc:
            LOGGER.exception("Parser stage failed: %s", exc)
            self._report(exc)
        finally:
            self._entries.put(_CLOSED)

    def _writer(self) -> None:
        LOGGER.debug("Writer stage started")
        try:
            while True:
                entry = self._entries.get()
                if entry is _CLOSED:
                    break
                write_entry(entry, self.config.output)
                self.entries_written += 1
        except Exception as exc:
            LOGGER.debug("Writer stage stopped: %s", exc)
            self._report(exc)
            return

        LOGGER.debug("Writer stage finished after %s entries", self.entries_written)
        self._outcome.put(self.entries_written)

    def _report(self, exc: BaseException) -> None:
        self._outcome.put(exc)


def convert(config: ConverterConfig) -> int:
    """Run a full conversion and return the number of entries written."""
    converter = Tex2BibConverter(config)
    converter.convert()
    written = converter.wait()
    LOGGER.info("Conversion complete: entries=%s", written)
    return written
