"""Errors raised while dividing a TeX bibliography."""

from __future__ import annotations


class BibError(RuntimeError):
    """Base class for bibliography conversion failures."""


class BibEmptyError(BibError):
    """Input ended before any \\bibitem marker was seen."""

    def __init__(self, message: str = "Empty bibliography") -> None:
        super().__init__(message)


class BibUnclosedError(BibError):
    """Input ended before \\end{thebibliography}."""

    def __init__(self, message: str = "Missing \\end{thebibliography}") -> None:
        super().__init__(message)


class BibSyntaxError(BibError):
    """A line expected to hold a \\bibitem{...} key did not."""

    def __init__(self, message: str = "Syntax error") -> None:
        super().__init__(message)
