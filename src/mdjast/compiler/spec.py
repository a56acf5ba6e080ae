"""Canonical tree (Jast) types and compile results.

A canonical element is a list ``[tag, props]`` or ``[tag, props, children]``
where ``tag`` is a string or None (transparent grouping). Children are
omitted entirely when empty, and props never hold a ``children`` key.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

import msgspec

from mdjast.ast.spec import SourceFile

JastPrimitive = Union[str, int, float, bool, None]
JastProps = dict
JastElement = list
JastNode = Union[JastPrimitive, JastElement]


def create_jast_element(
    tag: Optional[str], props: Optional[dict] = None, children: Optional[list] = None
) -> JastElement:
    """Build a canonical element, omitting an empty child list."""
    props = {} if props is None else props
    if children:
        return [tag, props, list(children)]
    return [tag, props]


def is_jast_element(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) in (2, 3)
        and (value[0] is None or isinstance(value[0], str))
        and isinstance(value[1], dict)
    )


class Heading(msgspec.Struct):
    """A heading collected from the document, in document order."""

    depth: int
    value: str
    id: Optional[str] = None


@dataclass
class CompileResult:
    """Output of a compile: diagnostics file, tree, frontmatter and headings."""

    file: SourceFile
    tree: JastElement
    frontmatter: Any = None
    headings: List[Heading] = field(default_factory=list)


def dumps_jast(tree: JastNode, pretty: bool = False) -> str:
    """Serialize a canonical tree to JSON.

    Values with no JSON form (callables held in props, say) are written as
    their ``str()``.
    """
    data = msgspec.json.encode(tree, enc_hook=str)
    if pretty:
        data = msgspec.json.format(data, indent=2)
    return data.decode("utf-8")
