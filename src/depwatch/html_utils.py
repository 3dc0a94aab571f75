"""HTML release-notes section extraction.

Turns raw markup into an ordered sequence of :class:`Section` blocks: every
heading element of the designated level, paired with the text of the sibling
nodes that follow it up to (not including) the next heading of that level.
"""
from __future__ import annotations

import re

from bs4 import BeautifulSoup
from bs4.element import Comment, NavigableString, Tag

from depwatch.records import Section

DEFAULT_HEADING_TAG = "h3"

_HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})


def extract_sections(
    raw_html: str,
    *,
    heading_tag: str = DEFAULT_HEADING_TAG,
) -> list[Section]:
    """Split *raw_html* into heading/body sections.

    Args:
        raw_html: Raw HTML string.
        heading_tag: Heading element that delimits sections (``h1``..``h6``).

    Returns:
        Sections in document order. Empty list if *raw_html* is empty or
        contains no heading of the requested level.
    """
    tag_name = heading_tag.lower()
    if tag_name not in _HEADING_TAGS:
        raise ValueError(f"heading_tag must be one of h1..h6, got {heading_tag!r}")
    if not raw_html or not raw_html.strip():
        return []

    soup = BeautifulSoup(raw_html, "html.parser")
    sections: list[Section] = []
    for heading in soup.find_all(tag_name):
        title = " ".join(strip_zero_width(heading.get_text(separator=" ")).split())
        parts: list[str] = []
        for sibling in heading.next_siblings:
            if isinstance(sibling, Tag):
                if sibling.name == tag_name:
                    break
                parts.append(sibling.get_text(separator=" "))
            elif isinstance(sibling, NavigableString) and not isinstance(sibling, Comment):
                parts.append(str(sibling))
        body = clean_text("\n".join(p for p in parts if p.strip()))
        sections.append(Section(heading=title, body=body))
    return sections


def render_sections(sections: list[Section]) -> str:
    """Join sections into the prompt body, separated by blank lines."""
    return "\n\n".join(section.render() for section in sections)


def clean_text(text: str) -> str:
    """Collapse whitespace, drop zero-width characters, and trim."""
    return _collapse_whitespace(strip_zero_width(text)).strip()


def _collapse_whitespace(text: str) -> str:
    """Collapse horizontal whitespace (preserving newlines) and limit blanks."""
    text = re.sub(r"[^\S\n]+", " ", text)
    text = re.sub(r" ?\n ?", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text


# U+200B (ZWSP), U+200C (ZWNJ), U+FEFF (BOM): invisible characters that
# silently break word-boundary matching on extracted API names.
_ZERO_WIDTH_RE = re.compile("[\u200b\u200c\ufeff]")


def strip_zero_width(text: str) -> str:
    """Remove zero-width Unicode characters that break regex matching."""
    return _ZERO_WIDTH_RE.sub("", text)
