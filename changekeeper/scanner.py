"""Split a changelog's Markdown into second-level sections.

Only the block structure matters here: the document is parsed with
markdown-it-py and the direct children of the root node are partitioned
into ``(heading, body)`` pairs.  Bodies are sliced out of the original
text using the parser's source line map rather than re-rendered, so the
author's formatting survives a parse/serialize round trip untouched.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from changekeeper.errors import MalformedMarkdownError, NotARootDocumentError

logger = logging.getLogger(__name__)

# markdown-it normalises all of these to "\n" before computing line numbers.
_NEWLINE_RE = re.compile(r"\r\n?|\n")

_SECTION_DEPTH = 2


@dataclass(frozen=True)
class ScannedSection:
    """A depth-2 heading and the trimmed source text that follows it."""

    heading: str
    body: str


@dataclass(frozen=True)
class Block:
    """A top-level Markdown block and the ``[start, end)`` source span it covers.

    ``depth`` and ``heading`` are 0 and empty for anything but a heading.
    """

    type: str
    depth: int
    heading: str
    start: int
    end: int


@dataclass
class _OpenSection:
    heading: str
    start: int | None = None
    end: int | None = None

    def extend(self, block: Block) -> None:
        if self.start is None:
            self.start = block.start
        self.end = block.end

    def body(self, text: str) -> str:
        if self.start is None or self.end is None:
            return ""
        return text[self.start : self.end].strip()


def _line_offsets(text: str) -> list[int]:
    """Return the character offset at which each source line starts.

    A final entry equal to ``len(text)`` marks the end of the last line.
    """
    offsets = [0]
    offsets.extend(match.end() for match in _NEWLINE_RE.finditer(text))
    offsets.append(len(text))
    return offsets


def _heading_depth(node: SyntaxTreeNode) -> int:
    # tag is "h1" .. "h6" for both ATX and setext headings
    return int(node.tag[1:])


def _rendered_text(node: SyntaxTreeNode) -> str:
    """Concatenate the visible text of an inline subtree.

    Link targets, emphasis markers and backslash escapes are dropped; only
    what a reader would see is kept.
    """
    parts: list[str] = []
    for child in node.children:
        if child.type in ("text", "text_special", "code_inline"):
            parts.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            parts.append(" ")
        elif child.type == "image":
            parts.append(child.content)
        elif child.children:
            parts.append(_rendered_text(child))
    return "".join(parts)


def _heading_text(node: SyntaxTreeNode) -> str:
    if node.children and node.children[0].type == "inline":
        return _rendered_text(node.children[0]).strip()
    return ""


def _parse_tree(text: str) -> SyntaxTreeNode:
    md = MarkdownIt("commonmark")
    try:
        tokens = md.parse(text)
    except Exception as exc:  # noqa: BLE001
        raise MalformedMarkdownError(str(exc)) from exc
    root = SyntaxTreeNode(tokens)
    if root.type != "root":
        raise NotARootDocumentError()
    return root


def top_level_blocks(text: str) -> list[Block]:
    """Return the top-level blocks of *text* with their source spans.

    Raises:
        MalformedMarkdownError: If markdown-it rejects the input.
        NotARootDocumentError: If the parse does not produce a document root.
    """
    root = _parse_tree(text)
    offsets = _line_offsets(text)
    last = len(offsets) - 1

    blocks: list[Block] = []
    for node in root.children:
        if not node.map:
            continue
        start_line, end_line = node.map
        if node.type == "heading":
            depth, heading = _heading_depth(node), _heading_text(node)
        else:
            depth, heading = 0, ""
        blocks.append(
            Block(
                type=node.type,
                depth=depth,
                heading=heading,
                start=offsets[min(start_line, last)],
                end=offsets[min(end_line, last)],
            )
        )
    return blocks


def scan(text: str) -> list[ScannedSection]:
    """Partition *text* into depth-2 sections in document order.

    A depth-2 heading opens a section; a depth-1 heading closes it, and
    anything up to the next depth-2 heading is dropped.  Every other
    top-level block, deeper headings included, extends the open section's
    body.  Link reference definitions never reach the tree, so the trailing
    ``[x]: url`` block is never part of a body.

    Headings are given as rendered text, so ``## [Unreleased](url)`` yields
    ``Unreleased`` and ``## **1.0.0** - 2023-01-01`` yields
    ``1.0.0 - 2023-01-01``.

    Raises:
        MalformedMarkdownError: If markdown-it rejects the input.
        NotARootDocumentError: If the parse does not produce a document root.
    """
    sections: list[_OpenSection] = []
    current: _OpenSection | None = None

    for block in top_level_blocks(text):
        if block.depth == _SECTION_DEPTH:
            current = _OpenSection(heading=block.heading)
            sections.append(current)
            continue
        if 0 < block.depth < _SECTION_DEPTH:
            current = None
            continue
        if current is not None:
            current.extend(block)

    scanned = [
        ScannedSection(heading=section.heading, body=section.body(text))
        for section in sections
    ]
    logger.debug("Scanned %d section(s)", len(scanned))
    return scanned
