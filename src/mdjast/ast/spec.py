"""Intermediate tree produced by the document parser.

The tree is hypertext-shaped: Markdown constructs are already elements
(``p``, ``h1``, ``pre``...), while embedded code keeps dedicated node kinds
holding both their source text and the parsed Python AST (``estree``).
Every node class carries a ``kind`` used for handler dispatch.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Dict, List, Optional, Union

import msgspec

log = logging.getLogger(__name__)


class Position(msgspec.Struct):
    start_line: int
    end_line: int


class Node(msgspec.Struct, kw_only=True):
    kind: ClassVar[str] = "node"
    position: Optional[Position] = None


class Root(Node):
    kind: ClassVar[str] = "root"
    children: List[Node] = []


class Element(Node):
    kind: ClassVar[str] = "element"
    tag_name: str
    properties: Dict[str, Any] = {}
    children: List[Node] = []
    data: Dict[str, Any] = {}


class Text(Node):
    kind: ClassVar[str] = "text"
    value: str


class Comment(Node):
    kind: ClassVar[str] = "comment"
    value: str


class Doctype(Node):
    kind: ClassVar[str] = "doctype"


class Raw(Node):
    kind: ClassVar[str] = "raw"
    value: str


class FlowExpression(Node):
    """``{expression}`` on lines of its own."""

    kind: ClassVar[str] = "flow_expression"
    value: str
    estree: Any = None


class TextExpression(Node):
    """``{expression}`` inside running text."""

    kind: ClassVar[str] = "text_expression"
    value: str
    estree: Any = None


class AttributeValueExpression(msgspec.Struct):
    value: str
    estree: Any = None


class JsxAttribute(msgspec.Struct):
    name: str
    value: Union[str, None, AttributeValueExpression] = None


class JsxExpressionAttribute(msgspec.Struct):
    """A ``{**spread}`` attribute; ``estree`` evaluates to a mapping."""

    value: str
    estree: Any = None


class JsxFlowElement(Node):
    kind: ClassVar[str] = "jsx_flow_element"
    name: Optional[str] = None
    attributes: List[Union[JsxAttribute, JsxExpressionAttribute]] = []
    children: List[Node] = []


class JsxTextElement(Node):
    kind: ClassVar[str] = "jsx_text_element"
    name: Optional[str] = None
    attributes: List[Union[JsxAttribute, JsxExpressionAttribute]] = []
    children: List[Node] = []


class ModuleCode(Node):
    """Top-level ``import``/``export`` code block."""

    kind: ClassVar[str] = "module_code"
    value: str
    estree: Any = None


class SourceMessage(msgspec.Struct):
    reason: str
    line: Optional[int] = None
    source: Optional[str] = None


class SourceFile:
    """The document being compiled, with data and diagnostics attached."""

    def __init__(
        self,
        value: str,
        path: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        self.value = value
        self.path = path
        self.data: Dict[str, Any] = {} if data is None else data
        self.messages: List[SourceMessage] = []

    def message(
        self, reason: str, line: Optional[int] = None, source: Optional[str] = None
    ) -> SourceMessage:
        """Record a warning about the document."""
        message = SourceMessage(reason=reason, line=line, source=source)
        self.messages.append(message)
        where = f"{self.path or '<input>'}:{line}" if line else self.path or "<input>"
        log.warning("%s: %s", where, reason)
        return message

    def __repr__(self) -> str:
        return f"SourceFile(path={self.path!r}, messages={len(self.messages)})"
