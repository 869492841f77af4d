"""Typer CLI entry point for changekeeper.

Provides these commands:

- ``promote``: Release the Unreleased changes of one or more changelogs as a
  new version and rewrite each file with regenerated comparison links.
- ``show``: Print the Unreleased changes (or a release's changes).
- ``links``: Print the comparison-link block for a changelog.
- ``notes``: Combine several packages' changes into one release-notes document.
- ``next-version``: Print the version that follows a given one.
- ``format``: Rewrite a changelog in canonical form.
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, date, datetime
from pathlib import Path

import typer
from rich.console import Console

from changekeeper import aggregate, promotion, store
from changekeeper.changelog import render_changelog_file
from changekeeper.errors import ChangelogError, InvalidVersionError
from changekeeper.links import generate_links
from changekeeper.models import BumpLevel, ChangelogDocument, SemanticVersion

app = typer.Typer(
    name="changekeeper",
    help="Keep a Changelog tooling: promote unreleased changes and regenerate release links.",
    add_completion=False,
)

# Ensure UTF-8 console output on Windows (prevents cp1252 encoding errors)
if hasattr(sys.stdout, "reconfigure"):
    sys.stdout.reconfigure(encoding="utf-8")

# Status lines go to stderr so stdout stays clean for piping.
_console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(1)


def _parse_version(value: str, option: str) -> SemanticVersion:
    """Parse a version given on the command line, exiting on bad input."""
    try:
        return SemanticVersion.parse(value)
    except InvalidVersionError:
        raise _fail(f"invalid version {value!r} for {option}")


def _parse_version_option(value: str | None, option: str) -> SemanticVersion | None:
    if value is None:
        return None
    return _parse_version(value, option)


def _parse_date_option(value: str | None) -> date:
    if value is None:
        return datetime.now(UTC).date()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise _fail(f"invalid date {value!r} for --date (expected YYYY-MM-DD)")


def _load(path: Path) -> ChangelogDocument:
    """Read the changelog at *path*, turning failures into a CLI exit."""
    try:
        return store.read_changelog(path)
    except FileNotFoundError:
        raise _fail(f"changelog not found: {store.resolve_changelog_path(path)}")
    except ChangelogError as exc:
        raise _fail(str(exc))
    except OSError as exc:
        raise _fail(f"could not read changelog\nPath: {path}\nError: {exc}")


def _resolve_target_version(
    version: str | None,
    bump: BumpLevel | None,
    current_version: str | None,
) -> SemanticVersion:
    if version is not None and bump is not None:
        raise _fail("--version and --bump are mutually exclusive.")
    if version is not None:
        return _parse_version(version, "--version")
    if bump is None:
        raise _fail("one of --version or --bump is required.")
    if current_version is None:
        raise _fail("--bump requires --current-version.")
    return _parse_version(current_version, "--current-version").bump(bump)


def _parse_package_spec(spec: str) -> tuple[str, Path]:
    package_id, sep, path = spec.partition("=")
    if not sep or not package_id.strip() or not path.strip():
        raise _fail(f"expected ID=PATH, got {spec!r}")
    return package_id.strip(), Path(path.strip())


# ---------------------------------------------------------------------------
# Global options
# ---------------------------------------------------------------------------


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log debug details to stderr.",
    ),
) -> None:
    """Manage Keep a Changelog files."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


# ---------------------------------------------------------------------------
# promote command
# ---------------------------------------------------------------------------


@app.command()
def promote(
    paths: list[Path] = typer.Argument(
        ...,
        help="Changelog files (or directories containing CHANGELOG.md) to promote.",
    ),
    repository_url: str = typer.Option(
        ...,
        "--repository-url",
        envvar="CHANGEKEEPER_REPOSITORY_URL",
        help="Repository URL used for the comparison links.",
    ),
    version: str | None = typer.Option(
        None,
        "--version",
        help="Version of the new release (e.g. 1.2.3).",
    ),
    bump: BumpLevel | None = typer.Option(
        None,
        "--bump",
        help="Compute the new version by bumping --current-version.",
    ),
    current_version: str | None = typer.Option(
        None,
        "--current-version",
        help="Version the packages are at now (required with --bump).",
    ),
    declarations_starting_version: str | None = typer.Option(
        None,
        "--declarations-starting-version",
        envvar="CHANGEKEEPER_DECLARATIONS_STARTING_VERSION",
        help="Leave releases older than this version out of the link block.",
    ),
    updated_dependency: list[str] | None = typer.Option(
        None,
        "--updated-dependency",
        "-d",
        help="Package id bumped alongside this release; recorded under 'Changed'. Repeatable.",
    ),
    release_date: str | None = typer.Option(
        None,
        "--date",
        help="Release date as YYYY-MM-DD (defaults to today, UTC).",
    ),
) -> None:
    """Release the Unreleased changes of each changelog as a new version."""
    # --- 1. Validate options ---
    target = _resolve_target_version(version, bump, current_version)
    floor = _parse_version_option(declarations_starting_version, "--declarations-starting-version")
    day = _parse_date_option(release_date)
    change_lines = promotion.dependency_change_lines(updated_dependency or [], target)

    # --- 2. Parse and promote every changelog before touching any of them ---
    promoted = [
        (path, promotion.promote(_load(path), target, day, change_lines)) for path in paths
    ]

    # --- 3. Write ---
    written: list[Path] = []
    for path, document in promoted:
        try:
            written.append(store.write_changelog(path, document, repository_url, floor))
        except OSError as exc:
            done = "".join(f"\n  {p}" for p in written) or " none"
            raise _fail(
                f"could not write changelog\nPath: {path}\nError: {exc}\nAlready written:{done}"
            )
        _console.print(f"[green]Added release entry {target}:[/green] {written[-1]}")

    typer.echo(str(target))


# ---------------------------------------------------------------------------
# show command
# ---------------------------------------------------------------------------


@app.command()
def show(
    path: Path = typer.Argument(..., help="Changelog file or directory."),
    version: str | None = typer.Option(
        None,
        "--version",
        help="Show this release instead of the Unreleased changes.",
    ),
) -> None:
    """Print the Unreleased changes, or the changes of one release."""
    target = _parse_version_option(version, "--version")
    document = _load(path)
    entry = aggregate.select_entry(document, target)

    if entry.status == aggregate.EntryStatus.NOT_PRESENT:
        raise _fail(f"version {target} not found in {store.resolve_changelog_path(path)}")
    if entry.status == aggregate.EntryStatus.EMPTY:
        _console.print("[yellow]No changes.[/yellow]")
        return
    typer.echo(entry.body)


# ---------------------------------------------------------------------------
# links command
# ---------------------------------------------------------------------------


@app.command()
def links(
    path: Path = typer.Argument(..., help="Changelog file or directory."),
    repository_url: str = typer.Option(
        ...,
        "--repository-url",
        envvar="CHANGEKEEPER_REPOSITORY_URL",
        help="Repository URL used for the comparison links.",
    ),
    declarations_starting_version: str | None = typer.Option(
        None,
        "--declarations-starting-version",
        envvar="CHANGEKEEPER_DECLARATIONS_STARTING_VERSION",
        help="Leave releases older than this version out of the link block.",
    ),
) -> None:
    """Print the comparison-link block for a changelog."""
    floor = _parse_version_option(declarations_starting_version, "--declarations-starting-version")
    document = _load(path)
    typer.echo(generate_links(document, repository_url, floor))


# ---------------------------------------------------------------------------
# notes command
# ---------------------------------------------------------------------------


@app.command()
def notes(
    packages: list[str] = typer.Argument(
        ...,
        help="Packages as ID=PATH pairs, PATH being a changelog file or directory.",
    ),
    version: str | None = typer.Option(
        None,
        "--version",
        help="Collect this release instead of the Unreleased changes.",
    ),
) -> None:
    """Combine several packages' changes into one release-notes document."""
    target = _parse_version_option(version, "--version")
    entries: dict[str, aggregate.PackageEntry] = {}
    for spec in packages:
        package_id, path = _parse_package_spec(spec)
        entries[package_id] = aggregate.select_entry(_load(path), target)

    typer.echo(aggregate.aggregate_release_notes(entries), nl=False)


# ---------------------------------------------------------------------------
# next-version command
# ---------------------------------------------------------------------------


@app.command("next-version")
def next_version(
    current: str = typer.Argument(..., help="Current version (e.g. 1.2.3)."),
    bump: BumpLevel = typer.Option(..., "--bump", help="Which coordinate to bump."),
) -> None:
    """Print the version that follows CURRENT."""
    typer.echo(str(_parse_version(current, "CURRENT").bump(bump)))


# ---------------------------------------------------------------------------
# format command
# ---------------------------------------------------------------------------


@app.command("format")
def format_changelog(
    path: Path = typer.Argument(..., help="Changelog file or directory."),
    repository_url: str = typer.Option(
        ...,
        "--repository-url",
        envvar="CHANGEKEEPER_REPOSITORY_URL",
        help="Repository URL used for the comparison links.",
    ),
    declarations_starting_version: str | None = typer.Option(
        None,
        "--declarations-starting-version",
        envvar="CHANGEKEEPER_DECLARATIONS_STARTING_VERSION",
        help="Leave releases older than this version out of the link block.",
    ),
    check: bool = typer.Option(
        False,
        "--check",
        help="Only report whether the file is canonical; exit 1 if it is not.",
    ),
) -> None:
    """Rewrite a changelog in canonical form with regenerated links."""
    floor = _parse_version_option(declarations_starting_version, "--declarations-starting-version")
    document = _load(path)
    changelog_path = store.resolve_changelog_path(path)
    expected = render_changelog_file(document, repository_url, floor)
    # Keep line endings as they are on disk; CRLF text is not canonical.
    with changelog_path.open(encoding="utf-8", newline="") as handle:
        current = handle.read()

    if current == expected:
        _console.print(f"[green]Already canonical:[/green] {changelog_path}")
        return
    if check:
        raise _fail(f"changelog is not in canonical form: {changelog_path}")

    store.write_changelog(changelog_path, document, repository_url, floor)
    _console.print(f"[green]Reformatted:[/green] {changelog_path}")


# ---------------------------------------------------------------------------
# Main entry
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
