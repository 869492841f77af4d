"""Build the trailing ``[label]: url`` comparison-link block of a changelog."""

from __future__ import annotations

from changekeeper.models import ChangelogDocument, SemanticVersion


def generate_links(
    document: ChangelogDocument,
    repository_url: str,
    starting_version_floor: SemanticVersion | None = None,
) -> str:
    """Return the link definitions for *document*, newest first.

    Releases are taken in document order.  When *starting_version_floor*
    is given, releases below it are left out entirely, so the oldest
    remaining release links to its tag instead of comparing against them.

    Parameters
    ----------
    document:
        The changelog to link.
    repository_url:
        Base URL of the repository, used verbatim.
    starting_version_floor:
        Optional lowest version to include.

    Returns
    -------
    str
        One ``[label]: url`` line per release plus ``[unreleased]``,
        joined with newlines and without a trailing newline.
    """
    versions = [
        version
        for version in document.versions
        if starting_version_floor is None or version >= starting_version_floor
    ]

    if versions:
        lines = [f"[unreleased]: {repository_url}/compare/v{versions[0]}...HEAD"]
    else:
        lines = [f"[unreleased]: {repository_url}"]

    for newer, older in zip(versions, versions[1:]):
        lines.append(f"[{newer}]: {repository_url}/compare/v{older}...v{newer}")

    if versions:
        oldest = versions[-1]
        lines.append(f"[{oldest}]: {repository_url}/releases/tag/v{oldest}")

    return "\n".join(lines)
