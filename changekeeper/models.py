"""Pydantic v2 models for the changelog document."""

from __future__ import annotations

import functools
import re
from collections.abc import Mapping
from datetime import UTC, date, datetime
from enum import StrEnum
from types import MappingProxyType

from packaging.version import Version
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from changekeeper.errors import InvalidVersionError

# major.minor.patch with no leading zeros, as semver requires.  Stricter than
# packaging.version, which also accepts pre-releases, epochs and "v" prefixes.
_SEMVER_RE = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")


class BumpLevel(StrEnum):
    """Which version coordinate a release increments."""

    major = "major"
    minor = "minor"
    patch = "patch"


@functools.total_ordering
class SemanticVersion(BaseModel):
    """A ``major.minor.patch`` version, ordered as :class:`packaging.version.Version`."""

    model_config = ConfigDict(frozen=True)

    major: int = Field(..., ge=0)
    minor: int = Field(..., ge=0)
    patch: int = Field(..., ge=0)

    @classmethod
    def parse(cls, value: str) -> SemanticVersion:
        """Parse ``"1.2.3"`` into a version.

        Raises:
            InvalidVersionError: If *value* is not a plain semver triple.
        """
        match = _SEMVER_RE.match(value.strip())
        if match is None:
            raise InvalidVersionError(f"expected major.minor.patch, got {value!r}")
        major, minor, patch = (int(group) for group in match.groups())
        return cls(major=major, minor=minor, patch=patch)

    def bump(self, level: BumpLevel) -> SemanticVersion:
        """Return the next version for *level*."""
        if level == BumpLevel.major:
            return SemanticVersion(major=self.major + 1, minor=0, patch=0)
        if level == BumpLevel.minor:
            return SemanticVersion(major=self.major, minor=self.minor + 1, patch=0)
        return SemanticVersion(major=self.major, minor=self.minor, patch=self.patch + 1)

    def as_version(self) -> Version:
        return Version(str(self))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def __lt__(self, other: SemanticVersion) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.as_version() < other.as_version()


def utc_midnight(value: date | datetime) -> datetime:
    """Normalise a date (or datetime) to midnight UTC on the same calendar day."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        value = value.date()
    return datetime(value.year, value.month, value.day, tzinfo=UTC)


class ReleaseEntry(BaseModel):
    """One versioned, dated section of a changelog."""

    model_config = ConfigDict(frozen=True)

    version: SemanticVersion
    date: datetime
    body: str = ""


class ChangelogDocument(BaseModel):
    """A parsed changelog: pending changes plus releases, newest first.

    ``releases`` is keyed by the canonical version string and keeps the
    order the releases appeared in the source document.  It is exposed as a
    read-only mapping: documents are never mutated, promotion builds a new one.
    """

    model_config = ConfigDict(frozen=True)

    unreleased: str | None = None
    releases: Mapping[str, ReleaseEntry] = Field(default_factory=dict, validate_default=True)

    @field_validator("releases", mode="after")
    @classmethod
    def freeze_releases(cls, value: Mapping[str, ReleaseEntry]) -> Mapping[str, ReleaseEntry]:
        return MappingProxyType(dict(value))

    @model_validator(mode="after")
    def release_keys_match_versions(self) -> ChangelogDocument:
        """Ensure every key is the canonical form of its entry's version."""
        for key, entry in self.releases.items():
            if key != str(entry.version):
                raise ValueError(
                    f"release key {key!r} does not match entry version {str(entry.version)!r}"
                )
        return self

    @property
    def versions(self) -> list[SemanticVersion]:
        return [entry.version for entry in self.releases.values()]

    @property
    def latest_release(self) -> ReleaseEntry | None:
        """The first (newest) release in document order, if any."""
        return next(iter(self.releases.values()), None)

    def get_release(self, version: SemanticVersion | str) -> ReleaseEntry | None:
        return self.releases.get(str(version))

    @classmethod
    def parse(cls, text: str) -> ChangelogDocument:
        """Shortcut for :func:`changekeeper.changelog.parse_changelog`."""
        from changekeeper.changelog import parse_changelog

        return parse_changelog(text)

    def to_text(self) -> str:
        """Shortcut for :func:`changekeeper.changelog.render_changelog`."""
        from changekeeper.changelog import render_changelog

        return render_changelog(self)
