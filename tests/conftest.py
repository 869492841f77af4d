"""Shared test fixtures for the changekeeper test suite.

``KEEP_A_CHANGELOG`` is an excerpt of the keep-a-changelog project's own
changelog, already in canonical form, so it must survive a parse/render
round trip unchanged.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from changekeeper.models import ChangelogDocument, ReleaseEntry, SemanticVersion

REPOSITORY_URL = "https://github.com/olivierlacan/keep-a-changelog"

KEEP_A_CHANGELOG = """\
# Changelog

All notable changes to this project will be documented in this file.

The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.0.0/),
and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html).

## [Unreleased]

## [1.1.1] - 2023-03-05

### Added

- Arabic translation (#444).
- v1.1 French translation.
- v1.1 Norwegian Bokmål translation (#383).
- Centralize all links into `/data/links.json` so they can be updated easily

### Fixed

- Improve French translation (#377).
- Display notice when translation isn't for most recent version

### Changed

- Upgrade dependencies: Ruby 3.2.1, Middleman, etc.

### Removed

- Unused normalize.css file

## [1.1.0] - 2019-02-15

### Added

- Danish translation (#297).
- Changelog inconsistency section in Bad Practices.

## [1.0.0] - 2017-06-20

### Added

- New visual identity by [@tylerfortune8](https://github.com/tylerfortune8).
- "Why keep a changelog?" section.

### Changed

- Start versioning based on the current English version at 0.3.0 to help
  translation authors keep things up-to-date.
- Merge "Why can’t people just use a git log diff?" with "Commit log
  diffs".

## [0.3.0] - 2015-12-03

### Added

- RU translation from [@aishek](https://github.com/aishek).

## [0.2.0] - 2015-10-06

### Changed

- Remove exclusionary mentions of "open source" since this project can
  benefit both "open" and "closed" source projects equally.

## [0.1.0] - 2015-10-06

## [0.0.1] - 2014-05-31

### Added

- This CHANGELOG file to hopefully serve as an evolving example of a
  standardized open source project CHANGELOG.
"""

KEEP_A_CHANGELOG_VERSIONS = ["1.1.1", "1.1.0", "1.0.0", "0.3.0", "0.2.0", "0.1.0", "0.0.1"]


def make_release(version: str, day: str, body: str = "") -> ReleaseEntry:
    """Build a ReleaseEntry from ``"1.2.3"`` and ``"YYYY-MM-DD"`` strings."""
    year, month, dom = (int(part) for part in day.split("-"))
    return ReleaseEntry(
        version=SemanticVersion.parse(version),
        date=datetime(year, month, dom, tzinfo=UTC),
        body=body,
    )


def make_document(*entries: ReleaseEntry, unreleased: str | None = None) -> ChangelogDocument:
    """Build a document whose releases follow the order of *entries*."""
    return ChangelogDocument(
        unreleased=unreleased,
        releases={str(entry.version): entry for entry in entries},
    )


@pytest.fixture()
def keep_a_changelog() -> str:
    return KEEP_A_CHANGELOG


@pytest.fixture()
def changelog_file(tmp_path: Path) -> Path:
    """A canonical CHANGELOG.md with pending changes, inside a package directory."""
    package_dir = tmp_path / "package"
    package_dir.mkdir()
    path = package_dir / "CHANGELOG.md"
    path.write_text(
        "# Changelog\n"
        "\n"
        "## [Unreleased]\n"
        "\n"
        "### Added\n"
        "\n"
        "- Support for Node.js 20.\n"
        "\n"
        "## [0.8.16] - 2023-02-27\n"
        "\n"
        "- Added node version 19.7.0.\n"
        "\n"
        f"[unreleased]: {REPOSITORY_URL}/compare/v0.8.16...HEAD\n"
        f"[0.8.16]: {REPOSITORY_URL}/releases/tag/v0.8.16\n",
        encoding="utf-8",
    )
    return path
