"""Exception taxonomy for changelog parsing and changelog file handling.

Every parse failure is fatal to the single parse call that raised it; no
partial document is ever produced.  Errors raised while interpreting a
release heading carry that heading so callers can report exactly which
line of the changelog was at fault.
"""

from __future__ import annotations

from pathlib import Path


class ChangelogError(Exception):
    """Base class for all changekeeper errors."""


class ChangelogParseError(ChangelogError):
    """A changelog's Markdown text could not be turned into a document."""

    message = "Could not parse changelog"

    def __init__(self, detail: str | None = None, *, heading: str | None = None) -> None:
        self.detail = detail
        self.heading = heading
        text = self.message
        if detail:
            text = f"{text} - {detail}"
        if heading is not None:
            text = f"{text} (heading: {heading!r})"
        super().__init__(text)


class NotARootDocumentError(ChangelogParseError):
    message = "No root node in changelog markdown"


class MalformedMarkdownError(ChangelogParseError):
    message = "Could not parse changelog markdown"


class InvalidVersionError(ChangelogParseError):
    message = "Invalid semver version in release entry"


class InvalidReleaseYearError(ChangelogParseError):
    message = "Invalid year in release entry"


class InvalidReleaseMonthError(ChangelogParseError):
    message = "Invalid month in release entry"


class InvalidReleaseDayError(ChangelogParseError):
    message = "Invalid day in release entry"


class InvalidReleaseDateError(ChangelogParseError):
    message = "Invalid date in release entry"


class AmbiguousReleaseDateError(ChangelogParseError):
    """Raised when a release date maps to more than one instant.

    Release dates are always built at UTC midnight, which has exactly one
    instant, so the parser never raises this.  It exists so callers can
    handle the complete taxonomy.
    """

    message = "Ambiguous date in release entry"


class ChangelogFileError(ChangelogError):
    """Wraps a parse error with the path of the changelog that failed."""

    def __init__(self, path: Path | str, cause: ChangelogParseError) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Could not parse changelog\nPath: {self.path}\nError: {cause}")
