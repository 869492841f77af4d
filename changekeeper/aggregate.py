"""Combine the changes of several packages into one release-notes document.

Each package contributes either its Unreleased changes or the body of a
given release.  The result is a Markdown document with one ``## <id>``
section per package, suitable for a release description.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum

from changekeeper.models import ChangelogDocument, SemanticVersion
from changekeeper.promotion import NO_CHANGES


class EntryStatus(StrEnum):
    """What a package's changelog holds for the requested section."""

    CHANGES = "changes"
    EMPTY = "empty"
    NOT_PRESENT = "not_present"


@dataclass(frozen=True)
class PackageEntry:
    status: EntryStatus
    body: str = ""


def select_entry(
    document: ChangelogDocument,
    version: SemanticVersion | str | None = None,
) -> PackageEntry:
    """Pick the Unreleased body, or the body of *version*, from *document*."""
    if version is None:
        if document.unreleased:
            return PackageEntry(EntryStatus.CHANGES, document.unreleased)
        return PackageEntry(EntryStatus.EMPTY)

    release = document.get_release(version)
    if release is None:
        return PackageEntry(EntryStatus.NOT_PRESENT)
    if not release.body:
        return PackageEntry(EntryStatus.EMPTY)
    return PackageEntry(EntryStatus.CHANGES, release.body)


def aggregate_release_notes(entries: Mapping[str, PackageEntry]) -> str:
    """Render *entries* (keyed by package id) as release notes.

    Packages are listed alphabetically.  A package with an empty entry is
    listed as ``- No changes.``; one without the requested release is left
    out.
    """
    sections: list[str] = []
    for package_id in sorted(entries):
        entry = entries[package_id]
        if entry.status == EntryStatus.NOT_PRESENT:
            continue
        body = entry.body if entry.status == EntryStatus.CHANGES else NO_CHANGES
        sections.append(f"## {package_id}\n\n{body}")

    return "\n\n".join(sections).strip() + "\n\n"
