"""Read and write changelog files.

The core modules work on text only; this is the thin layer that moves
that text to and from disk for the CLI.
"""

from __future__ import annotations

import logging
from pathlib import Path

from changekeeper.changelog import parse_changelog, render_changelog_file
from changekeeper.errors import ChangelogFileError, ChangelogParseError
from changekeeper.models import ChangelogDocument, SemanticVersion

logger = logging.getLogger(__name__)

CHANGELOG_FILE = "CHANGELOG.md"


def resolve_changelog_path(path: str | Path) -> Path:
    """Return *path*, or ``<path>/CHANGELOG.md`` when *path* is a directory."""
    target = Path(path)
    if target.is_dir():
        return target / CHANGELOG_FILE
    return target


def read_changelog(path: str | Path) -> ChangelogDocument:
    """Read and parse the changelog at *path*.

    Raises:
        FileNotFoundError: If the file does not exist.
        ChangelogFileError: If the file is not a parseable changelog.
    """
    changelog_path = resolve_changelog_path(path)
    logger.debug("Reading changelog %s", changelog_path)
    text = changelog_path.read_text(encoding="utf-8")
    try:
        return parse_changelog(text)
    except ChangelogParseError as exc:
        raise ChangelogFileError(changelog_path, exc) from exc


def write_changelog(
    path: str | Path,
    document: ChangelogDocument,
    repository_url: str,
    starting_version_floor: SemanticVersion | None = None,
) -> Path:
    """Write *document* and its comparison links to *path*.

    Creates parent directories as needed and returns the path written.
    """
    changelog_path = resolve_changelog_path(path)
    changelog_path.parent.mkdir(parents=True, exist_ok=True)
    contents = render_changelog_file(document, repository_url, starting_version_floor)
    changelog_path.write_text(contents, encoding="utf-8", newline="\n")
    logger.debug("Wrote changelog %s (%d bytes)", changelog_path, len(contents))
    return changelog_path
