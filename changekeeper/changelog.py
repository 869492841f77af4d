"""Parse and serialize Keep a Changelog documents.

:func:`parse_changelog` turns hand-written Markdown into a
:class:`~changekeeper.models.ChangelogDocument`; :func:`render_changelog`
writes a document back out in canonical form.  Canonical text survives a
parse/render round trip byte for byte.  Anything else (``YYYY/MM/DD``
dates, extra blank lines, a custom preamble, non-release headings) is
normalised on the way through.
"""

from __future__ import annotations

import logging

from changekeeper.classifier import HeadingKind, classify
from changekeeper.links import generate_links
from changekeeper.models import ChangelogDocument, ReleaseEntry, SemanticVersion
from changekeeper.scanner import scan

logger = logging.getLogger(__name__)

PREAMBLE = (
    "# Changelog\n"
    "\n"
    "All notable changes to this project will be documented in this file.\n"
    "\n"
    "The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.0.0/),\n"
    "and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html)."
)

UNRELEASED_HEADING = "## [Unreleased]"


def parse_changelog(text: str) -> ChangelogDocument:
    """Parse changelog Markdown into a document.

    The Unreleased section is kept only when it has a body.  Release
    headings become entries keyed by version in document order; if a
    version appears twice the later section replaces the earlier one.
    Other depth-2 headings are dropped along with their bodies.

    Raises:
        ChangelogParseError: Any subclass, naming the heading at fault
            where there is one.
    """
    unreleased: str | None = None
    releases: dict[str, ReleaseEntry] = {}

    for section in scan(text):
        heading = classify(section.heading)

        if heading.kind == HeadingKind.UNRELEASED:
            if section.body:
                unreleased = section.body
            continue

        if heading.kind == HeadingKind.IGNORED or heading.version is None:
            logger.debug("Ignoring non-release heading %r", section.heading)
            continue

        key = str(heading.version)
        if key in releases:
            # Last one wins; the earlier entry keeps its position.
            logger.debug("Duplicate release %s; keeping the later section", key)
        releases[key] = ReleaseEntry(
            version=heading.version,
            date=heading.release_date(),
            body=section.body,
        )

    return ChangelogDocument(unreleased=unreleased, releases=releases)


def _release_heading(entry: ReleaseEntry) -> str:
    return f"## [{entry.version}] - {entry.date:%Y-%m-%d}"


def render_changelog(document: ChangelogDocument) -> str:
    """Serialize *document* as canonical changelog Markdown.

    The Unreleased heading is always written, even with nothing under it.
    Sections are separated by one blank line and the text ends with a
    single newline.
    """
    parts = [PREAMBLE]

    unreleased = (document.unreleased or "").strip()
    parts.append(f"{UNRELEASED_HEADING}\n\n{unreleased}" if unreleased else UNRELEASED_HEADING)

    for entry in document.releases.values():
        heading = _release_heading(entry)
        body = entry.body.strip()
        parts.append(f"{heading}\n\n{body}" if body else heading)

    return "\n\n".join(parts) + "\n"


def render_changelog_file(
    document: ChangelogDocument,
    repository_url: str,
    starting_version_floor: SemanticVersion | None = None,
) -> str:
    """Return the full on-disk text: the changelog followed by its link block."""
    links = generate_links(document, repository_url, starting_version_floor)
    return f"{render_changelog(document)}\n{links}\n"
