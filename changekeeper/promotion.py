"""Promote a changelog's Unreleased section into a new dated release."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime

from changekeeper.models import ChangelogDocument, ReleaseEntry, SemanticVersion, utc_midnight
from changekeeper.scanner import top_level_blocks

logger = logging.getLogger(__name__)

NO_CHANGES = "- No changes."

CHANGED_TITLE = "Changed"
CHANGED_HEADING = f"### {CHANGED_TITLE}"

_SUBSECTION_DEPTH = 3


def dependency_change_lines(package_ids: Iterable[str], version: SemanticVersion | str) -> list[str]:
    """Render the sorted ``- Updated `id` to `version`.`` bullets for *package_ids*."""
    return sorted({f"- Updated `{package_id}` to `{version}`." for package_id in package_ids})


def merge_changed_section(body: str, change_lines: str) -> str:
    """Add *change_lines* to the ``### Changed`` subsection of *body*.

    When *body* already has a Changed subsection the lines go at its end,
    leaving every other subsection where it was.  Otherwise a new Changed
    subsection is appended after the existing content.  Subsections are
    found on the parsed block structure, so ``#`` lines inside code blocks
    are never mistaken for headings.
    """
    blocks = top_level_blocks(body)
    changed = next(
        (
            index
            for index, block in enumerate(blocks)
            if block.depth == _SUBSECTION_DEPTH and block.heading == CHANGED_TITLE
        ),
        None,
    )
    if changed is None:
        return f"{body.rstrip()}\n\n{CHANGED_HEADING}\n\n{change_lines}".strip()

    # A subsection ends at the next heading of depth 3 or shallower.
    following = blocks[changed + 1 :]
    stop = next(
        (i for i, block in enumerate(following) if 0 < block.depth <= _SUBSECTION_DEPTH),
        len(following),
    )
    content = following[:stop]
    end = following[stop].start if stop < len(following) else len(body)

    # Extend a trailing bullet list in place; anything else gets a blank line.
    separator = "\n" if content and content[-1].type == "bullet_list" else "\n\n"
    merged = f"{body[:end].rstrip()}{separator}{change_lines}"

    rest = body[end:].strip()
    if rest:
        merged = f"{merged}\n\n{rest}"
    return merged.strip()


def _release_body(unreleased: str | None, extra_change_lines: Sequence[str]) -> str:
    change_lines = "\n".join(line.rstrip() for line in extra_change_lines if line.strip())
    unreleased = (unreleased or "").strip()

    if unreleased and change_lines:
        return merge_changed_section(unreleased, change_lines)
    if unreleased:
        return unreleased
    if change_lines:
        return f"{CHANGED_HEADING}\n\n{change_lines}"
    return NO_CHANGES


def promote(
    document: ChangelogDocument,
    version: SemanticVersion,
    release_date: date | datetime,
    extra_change_lines: Sequence[str] = (),
) -> ChangelogDocument:
    """Return a new document with the Unreleased changes released as *version*.

    The new entry goes first; existing releases follow unchanged and in
    their original order.  The result never has an Unreleased section.
    When there is nothing to release the entry body is ``- No changes.``.
    If *version* already has an entry it is replaced and moved to the top.

    Parameters
    ----------
    document:
        The changelog to promote.  It is not modified.
    version:
        Version of the new release.
    release_date:
        Release day; normalised to midnight UTC.
    extra_change_lines:
        Additional Markdown lines (typically dependency bumps) recorded
        under ``### Changed``.
    """
    entry = ReleaseEntry(
        version=version,
        date=utc_midnight(release_date),
        body=_release_body(document.unreleased, extra_change_lines),
    )

    key = str(version)
    releases: dict[str, ReleaseEntry] = {key: entry}
    for existing_key, existing in document.releases.items():
        if existing_key == key:
            logger.warning("Release %s already exists; replacing it", key)
            continue
        releases[existing_key] = existing

    logger.debug("Promoted unreleased changes to %s (%d release(s) total)", key, len(releases))
    return ChangelogDocument(unreleased=None, releases=releases)
