"""Decide what a second-level changelog heading denotes."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

from changekeeper.errors import (
    ChangelogParseError,
    InvalidReleaseDateError,
    InvalidReleaseDayError,
    InvalidReleaseMonthError,
    InvalidReleaseYearError,
    InvalidVersionError,
)
from changekeeper.models import SemanticVersion

_UNRELEASED_HEADING_RE = re.compile(r"^\[?unreleased\]?$", re.IGNORECASE)

# Version first, then the first YYYY-MM-DD or YYYY/MM/DD token anywhere after it.
_RELEASE_HEADING_RE = re.compile(
    r"^\[?(\d+\.\d+\.\d+)\]?.*?(\d{4})[-/](\d{2})[-/](\d{2})"
)


class HeadingKind(StrEnum):
    """What a depth-2 heading stands for."""

    UNRELEASED = "unreleased"
    RELEASE = "release"
    IGNORED = "ignored"


@dataclass(frozen=True)
class ClassifiedHeading:
    """A heading and, for releases, its parsed version and raw date fields.

    The date fields are plain integers; whether they form a real calendar
    date is only checked by :meth:`release_date`.
    """

    heading: str
    kind: HeadingKind
    version: SemanticVersion | None = None
    year: int | None = None
    month: int | None = None
    day: int | None = None

    def release_date(self) -> datetime:
        """Return the release date at midnight UTC.

        Raises:
            InvalidReleaseDateError: If the fields do not name a real day.
        """
        if self.year is None or self.month is None or self.day is None:
            raise InvalidReleaseDateError("heading has no release date", heading=self.heading)
        try:
            return datetime(self.year, self.month, self.day, tzinfo=UTC)
        except ValueError as exc:
            raise InvalidReleaseDateError(str(exc), heading=self.heading) from exc


def _parse_int(value: str, error: type[ChangelogParseError], heading: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise error(str(exc), heading=heading) from exc


def classify(heading: str) -> ClassifiedHeading:
    """Classify *heading* as the Unreleased section, a release, or neither.

    Raises:
        InvalidVersionError: The version token is not ``major.minor.patch``.
        InvalidReleaseYearError: The year token is not an integer.
        InvalidReleaseMonthError: The month token is not an integer.
        InvalidReleaseDayError: The day token is not an integer.
    """
    text = heading.strip()

    if _UNRELEASED_HEADING_RE.match(text):
        return ClassifiedHeading(heading=heading, kind=HeadingKind.UNRELEASED)

    match = _RELEASE_HEADING_RE.match(text)
    if match is None:
        return ClassifiedHeading(heading=heading, kind=HeadingKind.IGNORED)

    raw_version, raw_year, raw_month, raw_day = match.groups()
    try:
        version = SemanticVersion.parse(raw_version)
    except InvalidVersionError as exc:
        raise InvalidVersionError(exc.detail, heading=heading) from exc

    return ClassifiedHeading(
        heading=heading,
        kind=HeadingKind.RELEASE,
        version=version,
        year=_parse_int(raw_year, InvalidReleaseYearError, heading),
        month=_parse_int(raw_month, InvalidReleaseMonthError, heading),
        day=_parse_int(raw_day, InvalidReleaseDayError, heading),
    )
