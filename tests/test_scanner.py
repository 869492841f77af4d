"""Tests for changekeeper.scanner — splitting Markdown into depth-2 sections.

Covers:
1. Depth-2 headings open sections; deeper headings stay in the body.
2. Depth-1 headings close the open section.
3. Link reference definitions never become body text.
4. Bodies are exact slices of the source text.
5. Headings are reported as rendered text.
6. Malformed input is reported as a parse error.
"""

from __future__ import annotations

import pytest

from changekeeper.errors import MalformedMarkdownError
from changekeeper.scanner import ScannedSection, scan, top_level_blocks


class TestSections:
    def test_empty_document(self) -> None:
        assert scan("") == []

    def test_heading_without_body(self) -> None:
        assert scan("## [Unreleased]") == [ScannedSection("[Unreleased]", "")]

    def test_heading_with_body(self) -> None:
        assert scan("## [Unreleased]\n\n- Some change") == [
            ScannedSection("[Unreleased]", "- Some change")
        ]

    def test_sections_in_document_order(self) -> None:
        text = "## B\n\nsecond\n\n## A\n\nfirst\n"
        assert [s.heading for s in scan(text)] == ["B", "A"]

    def test_deeper_headings_belong_to_body(self) -> None:
        text = "## [1.0.0] - 2023-01-01\n\n### Added\n\n- Thing\n\n### Fixed\n\n- Bug\n"
        (section,) = scan(text)
        assert section.body == "### Added\n\n- Thing\n\n### Fixed\n\n- Bug"

    def test_content_before_first_section_dropped(self) -> None:
        text = "Intro paragraph.\n\n## [Unreleased]\n\n- change\n"
        assert scan(text) == [ScannedSection("[Unreleased]", "- change")]

    def test_repeated_headings_are_separate_sections(self) -> None:
        text = "## Notes\n\none\n\n## Notes\n\ntwo\n"
        assert scan(text) == [ScannedSection("Notes", "one"), ScannedSection("Notes", "two")]

    def test_setext_heading_depth(self) -> None:
        text = "Unreleased\n----------\n\n- change\n"
        assert scan(text) == [ScannedSection("Unreleased", "- change")]


class TestSectionClosing:
    def test_depth_one_heading_closes_section(self) -> None:
        text = "## [Unreleased]\n\n- kept\n\n# Appendix\n\n- dropped\n"
        assert scan(text) == [ScannedSection("[Unreleased]", "- kept")]

    def test_new_section_reopens_after_close(self) -> None:
        text = "## A\n\na\n\n# Title\n\nignored\n\n## B\n\nb\n"
        assert scan(text) == [ScannedSection("A", "a"), ScannedSection("B", "b")]


class TestHeadingText:
    def test_inline_link_target_dropped(self) -> None:
        text = "## [Unreleased](https://github.com/o/r/compare/v1.0.0...HEAD)\n\n- Pending fix\n"
        assert scan(text) == [ScannedSection("Unreleased", "- Pending fix")]

    def test_emphasis_markers_dropped(self) -> None:
        (section,) = scan("## **1.0.0** - _2023-01-01_\n\n- Initial\n")
        assert section.heading == "1.0.0 - 2023-01-01"

    def test_escapes_resolved(self) -> None:
        (section,) = scan("## \\[Unreleased\\]\n\n- change\n")
        assert section.heading == "[Unreleased]"

    def test_code_span_text_kept(self) -> None:
        (section,) = scan("## `1.0.0` - 2023-01-01\n")
        assert section.heading == "1.0.0 - 2023-01-01"

    def test_unresolved_brackets_kept(self) -> None:
        (section,) = scan("## [1.0.0] - 2023-01-01\n")
        assert section.heading == "[1.0.0] - 2023-01-01"


class TestTopLevelBlocks:
    def test_spans_and_depths(self) -> None:
        text = "### Changed\n\n- a\n\n```sh\n# not a heading\n```\n"
        blocks = top_level_blocks(text)
        assert [(b.type, b.depth, b.heading) for b in blocks] == [
            ("heading", 3, "Changed"),
            ("bullet_list", 0, ""),
            ("fence", 0, ""),
        ]
        assert text[blocks[2].start : blocks[2].end] == "```sh\n# not a heading\n```\n"


class TestLinkDefinitions:
    def test_trailing_link_block_excluded(self) -> None:
        text = (
            "## [1.0.0] - 2023-01-01\n"
            "\n"
            "- Change\n"
            "\n"
            "[unreleased]: https://example.com/compare/v1.0.0...HEAD\n"
            "[1.0.0]: https://example.com/releases/tag/v1.0.0\n"
        )
        # With a matching definition the heading is a link; only its text is kept.
        assert scan(text) == [ScannedSection("1.0.0 - 2023-01-01", "- Change")]

    def test_section_of_only_definitions_is_empty(self) -> None:
        text = "## [Unreleased]\n\n[unreleased]: https://example.com\n"
        assert scan(text) == [ScannedSection("Unreleased", "")]


class TestBodySlicing:
    def test_preserves_original_formatting(self) -> None:
        body = (
            "* star bullet\n"
            "    continued with odd indent\n"
            "\n"
            "```toml\n"
            "[buildpack]\n"
            "```\n"
            "\n"
            "> quoted *emphasis*"
        )
        (section,) = scan(f"## [Unreleased]\n\n{body}\n\n\n")
        assert section.body == body

    def test_crlf_line_endings(self) -> None:
        text = "## [Unreleased]\r\n\r\n- one\r\n- two\r\n\r\n## [1.0.0] - 2023-01-01\r\n"
        sections = scan(text)
        assert sections[0].body == "- one\r\n- two"
        assert sections[1].body == ""


class TestErrors:
    def test_non_text_input_is_malformed(self) -> None:
        with pytest.raises(MalformedMarkdownError):
            scan(None)  # type: ignore[arg-type]
