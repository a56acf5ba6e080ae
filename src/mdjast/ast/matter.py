"""Frontmatter extraction.

A document may open with a YAML header fenced by ``---`` lines::

    ---
    title: Hello
    ---
    # Body
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import yaml

from mdjast.errors import ParseError

FRONTMATTER = re.compile(r"^---(?:\r?\n|\r)(?:([\s\S]*?)(?:\r?\n|\r))?---(?:\r?\n|\r|\Z)")
NEWLINE = re.compile(r"\r?\n|\r")


@dataclass
class Matter:
    """Result of splitting a document into header data and body."""

    content: str
    data: Any = None
    matched: bool = False
    line_offset: int = 0


def parse_yaml(text: str) -> Any:
    """Parse a YAML header, raising ParseError on invalid input."""
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        line = mark.line + 2 if mark is not None else None
        raise ParseError(f"Invalid frontmatter: {exc}", line=line) from exc


def extract_frontmatter(source: str) -> Matter:
    """Split ``source`` into frontmatter data and the remaining body.

    Args:
        source: Raw document text.

    Returns:
        A Matter. When no header is present, ``content`` is the original text,
        ``data`` is None and ``matched`` is False. An empty header also yields
        ``data=None`` but ``matched=True``.
    """
    match = FRONTMATTER.match(source)
    if match is None:
        return Matter(content=source)

    header = match.group(1)
    data = parse_yaml(header) if header else None
    consumed = match.group(0)
    line_offset = len(NEWLINE.findall(consumed))
    return Matter(
        content=source[match.end():],
        data=data,
        matched=True,
        line_offset=line_offset,
    )
