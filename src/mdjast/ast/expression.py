"""Scanner and parser for Python code extended with tag literals.

Tag literals (``<Card title="x">{value}</Card>``) may appear wherever a
Python expression operand is expected. Each literal is parsed by hand into the
JSX node kinds of :mod:`mdjast.ast.jsx`, replaced in the source by a
parenthesised placeholder name, and the remaining text is handed to
``ast.parse``. Placeholders are then swapped back for the parsed tag nodes.

Placeholders keep the line structure of the text they replace, so positions
of the surrounding code still point into the document.
"""

from __future__ import annotations

import ast
import bisect
import itertools
import re
from dataclasses import dataclass, field
from typing import Optional, Union

from mdjast.ast.jsx import (
    JSXAttribute,
    JSXElement,
    JSXEmptyExpression,
    JSXExpressionContainer,
    JSXFragment,
    JSXIdentifier,
    JSXMemberExpression,
    JSXNamespacedName,
    JSXNode,
    JSXSpreadAttribute,
    JSXSpreadChild,
    JSXText,
    jsx_name,
)
from mdjast.errors import ParseError

TAG_START = re.compile(r"<(?:[A-Za-z_$]|>)")
TAG_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$-]*")
OPENING_NAME = re.compile(r"<\s*([A-Za-z_$][\w$.:-]*)?")
CLOSING_TAG = re.compile(r"</\s*([A-Za-z_$][\w$.:-]*)?\s*>")

STRING_START = re.compile(r"([rRbBuUfF]{0,2})('''|\"\"\"|'|\")")
WORD = re.compile(r"[^\W\d]\w*")
NUMBER = re.compile(r"\d[\w.]*")

# After these keywords a `<` starts an operand, not a comparison.
OPERAND_KEYWORDS = frozenset(
    {
        "and",
        "assert",
        "await",
        "case",
        "del",
        "elif",
        "else",
        "if",
        "in",
        "is",
        "lambda",
        "not",
        "or",
        "raise",
        "return",
        "while",
        "with",
        "yield",
    }
)

TagNode = Union[JSXElement, JSXFragment]


@dataclass
class OpeningTag:
    """A parsed opening tag: ``<name attr=...>`` or ``<name ... />``."""

    name: Optional[JSXNode]
    attributes: list = field(default_factory=list)
    self_closing: bool = False
    end: int = 0

    @property
    def tag_name(self) -> Optional[str]:
        return jsx_name(self.name) if self.name is not None else None


class _Placeholders(ast.NodeTransformer):
    def __init__(self, tags: dict[str, JSXNode]):
        self.tags = tags

    def visit_Name(self, node: ast.Name):
        return self.tags.get(node.id, node)


def relocate(node: ast.AST, line: int, column: int) -> None:
    """Shift positions parsed from a fragment to where the fragment sits.

    ``column`` applies to the fragment's first line only; later lines already
    start at column zero of a document line.
    """
    for child in ast.walk(node):
        if "lineno" not in child._attributes:
            continue
        if getattr(child, "lineno", None) is None:
            continue
        if child.lineno == 1:
            child.col_offset += column
        if child.end_lineno == 1:
            child.end_col_offset += column
        child.lineno += line - 1
        child.end_lineno += line - 1


def _is_blank(code: str) -> bool:
    for line in code.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            return False
    return True


def _placeholder(name: str, span: str) -> str:
    inner = span[1:-1]
    newlines = inner.count("\n")
    if not newlines:
        return f"({name}{' ' * max(len(inner) - len(name), 0)})"
    last = inner.rsplit("\n", 1)[1]
    return f"({name}" + "\n" * newlines + " " * len(last) + ")"


class Scanner:
    """Scan a piece of document text that may hold code and tag literals.

    Args:
        text: The text to scan.
        line: Document line of ``text[0]`` (1-based).
        column: Document column (UTF-8 bytes) of ``text[0]``.
    """

    def __init__(self, text: str, line: int = 1, column: int = 0):
        self.text = text
        self.line = line
        self.column = column
        self._line_starts = [0] + [m.end() for m in re.finditer("\n", text)]
        self._ids = itertools.count()

    # Positions

    def position(self, index: int) -> tuple[int, int]:
        row = bisect.bisect_right(self._line_starts, index) - 1
        start = self._line_starts[row]
        column = len(self.text[start:index].encode("utf-8"))
        if row == 0:
            column += self.column
        return self.line + row, column

    def error(self, message: str, index: int) -> ParseError:
        line, column = self.position(index)
        return ParseError(message, line=line, column=column + 1)

    def locate(self, node: ast.AST, start: int, end: int) -> ast.AST:
        node.lineno, node.col_offset = self.position(start)
        node.end_lineno, node.end_col_offset = self.position(end)
        return node

    def index(self, line: int, column: int) -> int:
        """Inverse of :meth:`position`."""
        row = line - self.line
        start = self._line_starts[row]
        if row == 0:
            column -= self.column
        end = self.text.find("\n", start)
        encoded = self.text[start : len(self.text) if end == -1 else end].encode("utf-8")
        return start + len(encoded[:column].decode("utf-8", "ignore"))

    def segment(self, node: ast.AST) -> str:
        """Source text spanned by a node located within this scanner."""
        start = self.index(node.lineno, node.col_offset)
        end = self.index(node.end_lineno, node.end_col_offset)
        return self.text[start:end]

    def is_tag_start(self, index: int) -> bool:
        return TAG_START.match(self.text, index) is not None

    def _skip_space(self, index: int) -> int:
        text = self.text
        while index < len(text) and text[index].isspace():
            index += 1
        return index

    # Code

    def code(
        self, start: int, stop: Optional[str] = None
    ) -> tuple[str, dict[str, JSXNode], int]:
        """Scan Python code until ``stop`` at bracket depth zero.

        Returns:
            The code with tag literals replaced by placeholders, the
            placeholder mapping and the index where scanning stopped.
        """
        text = self.text
        parts: list[str] = []
        tags: dict[str, JSXNode] = {}
        depth = 0
        operand = True
        index = chunk = start

        while index < len(text):
            char = text[index]
            if depth == 0 and char == stop:
                break
            if char == "#":
                newline = text.find("\n", index)
                index = len(text) if newline == -1 else newline
                continue
            match = STRING_START.match(text, index)
            if match:
                index = self._skip_string(index, match)
                operand = False
                continue
            match = WORD.match(text, index)
            if match:
                operand = match.group() in OPERAND_KEYWORDS
                index = match.end()
                continue
            if char.isdigit():
                index = NUMBER.match(text, index).end()
                operand = False
                continue
            if char == "<" and operand and self.is_tag_start(index):
                node, end = self.tag(index)
                name = f"__jsx{next(self._ids)}__"
                parts.append(text[chunk:index])
                parts.append(_placeholder(name, text[index:end]))
                tags[name] = node
                index = chunk = end
                operand = False
                continue

            if char in "([{":
                depth += 1
                operand = True
            elif char in ")]}":
                depth -= 1
                if depth < 0:
                    raise self.error(f"Unexpected {char!r}", index)
                operand = False
            elif not char.isspace():
                operand = True
            index += 1

        if stop is not None and index >= len(text):
            raise self.error(f"Could not find the closing {stop!r}", max(start - 1, 0))
        parts.append(text[chunk:index])
        return "".join(parts), tags, index

    def _skip_string(self, start: int, match: re.Match) -> int:
        text = self.text
        quote = match.group(2)
        index = match.end()
        while index < len(text):
            char = text[index]
            if char == "\\":
                index += 2
                continue
            if text.startswith(quote, index):
                return index + len(quote)
            if char == "\n" and len(quote) == 1:
                break
            index += 1
        raise self.error("Unterminated string literal", start)

    def expression(
        self, start: int, code: str, tags: dict[str, JSXNode]
    ) -> ast.expr:
        """Parse scanned ``code`` found at ``start`` as one expression."""
        try:
            tree = ast.parse(f"({code}\n)", mode="eval")
        except SyntaxError as exc:
            raise self._syntax_error(exc, start) from exc
        line, column = self.position(start)
        relocate(tree.body, line, column - 1)
        return _Placeholders(tags).visit(tree.body)

    def module(self, start: int = 0) -> ast.Module:
        """Parse the text from ``start`` to the end as a module body."""
        code, tags, _ = self.code(start)
        try:
            tree = ast.parse(code, mode="exec")
        except SyntaxError as exc:
            raise self._syntax_error(exc, start) from exc
        line, column = self.position(start)
        relocate(tree, line, column)
        return _Placeholders(tags).visit(tree)

    def _syntax_error(self, exc: SyntaxError, start: int) -> ParseError:
        line, _ = self.position(start)
        return ParseError(
            f"Invalid code: {exc.msg}", line=line + (exc.lineno or 1) - 1
        )

    def braced(self, start: int) -> tuple[Optional[ast.expr], int]:
        """Parse ``{ ... }`` at ``start``.

        Returns:
            The expression (None when the braces hold only whitespace or
            comments) and the index after the closing brace.
        """
        code, tags, end = self.code(start + 1, stop="}")
        if _is_blank(code):
            return None, end + 1
        return self.expression(start + 1, code, tags), end + 1

    # Tags

    def tag(self, start: int) -> tuple[TagNode, int]:
        """Parse a complete tag literal (element or fragment) at ``start``."""
        opening = self.opening_tag(start)
        if opening.name is None:
            children, end = self.children(opening.end, None)
            node = JSXFragment(children=children)
            return self.locate(node, start, end), end
        if opening.self_closing:
            node = JSXElement(
                name=opening.name,
                attributes=opening.attributes,
                children=[],
                self_closing=True,
            )
            return self.locate(node, start, opening.end), opening.end
        children, end = self.children(opening.end, opening.tag_name)
        node = JSXElement(
            name=opening.name,
            attributes=opening.attributes,
            children=children,
            self_closing=False,
        )
        return self.locate(node, start, end), end

    def opening_tag(self, start: int) -> OpeningTag:
        text = self.text
        if not self.is_tag_start(start):
            raise self.error("Expected a tag", start)
        index = self._skip_space(start + 1)
        if text.startswith(">", index):
            return OpeningTag(name=None, end=index + 1)

        name, index = self._element_name(index)
        attributes = []
        while True:
            index = self._skip_space(index)
            if text.startswith("/>", index):
                return OpeningTag(name, attributes, True, index + 2)
            if text.startswith(">", index):
                return OpeningTag(name, attributes, False, index + 1)
            if index >= len(text):
                raise self.error(f"Unclosed tag <{jsx_name(name)}>", start)
            attribute, index = self._attribute(index)
            attributes.append(attribute)

    def children(self, index: int, closing: Optional[str]) -> tuple[list, int]:
        """Parse tag children up to and including the closing tag."""
        text = self.text
        children: list = []
        while True:
            if index >= len(text):
                raise self.error(
                    f"Expected a closing tag for <{closing or ''}>", len(text)
                )
            if text.startswith("</", index):
                return children, self._closing_tag(index, closing)
            char = text[index]
            if char == "{":
                child, index = self._child_container(index)
            elif char == "<":
                if not self.is_tag_start(index):
                    raise self.error("Unexpected `<` in tag content", index)
                child, index = self.tag(index)
            else:
                stop = len(text)
                for delimiter in "<{":
                    found = text.find(delimiter, index)
                    if found != -1:
                        stop = min(stop, found)
                child = self.locate(JSXText(value=text[index:stop]), index, stop)
                index = stop
            children.append(child)

    def _closing_tag(self, index: int, expected: Optional[str]) -> int:
        text = self.text
        cursor = self._skip_space(index + 2)
        name = None
        if not text.startswith(">", cursor):
            node, cursor = self._element_name(cursor)
            name = jsx_name(node)
            cursor = self._skip_space(cursor)
        if not text.startswith(">", cursor):
            raise self.error("Expected `>` to end the closing tag", cursor)
        if name != expected:
            raise self.error(
                f"Expected closing tag </{expected or ''}>, found </{name or ''}>",
                index,
            )
        return cursor + 1

    def _identifier(self, index: int) -> tuple[JSXIdentifier, int]:
        match = TAG_IDENTIFIER.match(self.text, index)
        if match is None:
            raise self.error("Expected a name", index)
        node = JSXIdentifier(name=match.group())
        return self.locate(node, index, match.end()), match.end()

    def _element_name(self, index: int) -> tuple[JSXNode, int]:
        text = self.text
        node, end = self._identifier(index)
        if text.startswith(":", end):
            local, end = self._identifier(end + 1)
            node = JSXNamespacedName(namespace=node, name=local)
            return self.locate(node, index, end), end
        while text.startswith(".", end):
            prop, end = self._identifier(end + 1)
            node = self.locate(JSXMemberExpression(object=node, property=prop), index, end)
        return node, end

    def _attribute(self, index: int) -> tuple[JSXNode, int]:
        text = self.text
        if text.startswith("{", index):
            inner = self._skip_space(index + 1)
            if not text.startswith("**", inner):
                raise self.error("Expected `**` in a spread attribute", inner)
            argument, end = self._starred(inner + 2)
            return self.locate(JSXSpreadAttribute(argument=argument), index, end), end

        name, end = self._identifier(index)
        if text.startswith(":", end):
            local, end = self._identifier(end + 1)
            name = self.locate(JSXNamespacedName(namespace=name, name=local), index, end)
        after = self._skip_space(end)
        if not text.startswith("=", after):
            return self.locate(JSXAttribute(name=name, value=None), index, end), end
        value, end = self._attribute_value(self._skip_space(after + 1))
        return self.locate(JSXAttribute(name=name, value=value), index, end), end

    def _attribute_value(self, index: int) -> tuple[ast.AST, int]:
        text = self.text
        quote = text[index : index + 1]
        if quote in ("'", '"'):
            close = text.find(quote, index + 1)
            if close == -1:
                raise self.error("Unterminated attribute value", index)
            value = ast.Constant(value=text[index + 1 : close])
            return self.locate(value, index, close + 1), close + 1
        if quote == "{":
            return self._container(index)
        if self.is_tag_start(index):
            return self.tag(index)
        raise self.error("Expected an attribute value", index)

    def _container(self, index: int) -> tuple[JSXExpressionContainer, int]:
        code, tags, end = self.code(index + 1, stop="}")
        if _is_blank(code):
            expression = self.locate(JSXEmptyExpression(), index + 1, end)
        else:
            expression = self.expression(index + 1, code, tags)
        node = JSXExpressionContainer(expression=expression)
        return self.locate(node, index, end + 1), end + 1

    def _child_container(self, index: int) -> tuple[JSXNode, int]:
        text = self.text
        inner = self._skip_space(index + 1)
        if text.startswith("*", inner) and not text.startswith("**", inner):
            expression, end = self._starred(inner + 1)
            return self.locate(JSXSpreadChild(expression=expression), index, end), end
        return self._container(index)

    def _starred(self, start: int) -> tuple[ast.expr, int]:
        code, tags, end = self.code(start, stop="}")
        if _is_blank(code):
            raise self.error("Expected an expression after the spread", start)
        return self.expression(start, code, tags), end + 1

    # Document helpers

    def find_closing(
        self, start: int, name: Optional[str], limit: Optional[int] = None
    ) -> Optional[tuple[int, int]]:
        """Find the closing tag matching an opening tag that ended at ``start``.

        Same-name tags opened in between are balanced. Returns the start and
        end indices of the closing tag, or None.
        """
        text = self.text
        limit = len(text) if limit is None else limit
        depth = 0
        index = start
        while True:
            index = text.find("<", index, limit)
            if index == -1:
                return None
            closing = CLOSING_TAG.match(text, index, limit)
            if closing is not None:
                if closing.group(1) == name:
                    if depth == 0:
                        return index, closing.end()
                    depth -= 1
                index = closing.end()
                continue
            opening = OPENING_NAME.match(text, index)
            if self.is_tag_start(index) and opening.group(1) == name:
                try:
                    tag = self.opening_tag(index)
                except ParseError:
                    index += 1
                    continue
                if not tag.self_closing:
                    depth += 1
                index = tag.end
                continue
            index += 1


def parse_expression(source: str, line: int = 1, column: int = 0) -> ast.expr:
    """Parse a single expression that may contain tag literals.

    Args:
        source: Expression text.
        line: Document line where ``source`` starts.
        column: Document column where ``source`` starts.

    Returns:
        A Python expression node; tag literals appear as JSX nodes.
    """
    scanner = Scanner(source, line, column)
    code, tags, _ = scanner.code(0)
    if _is_blank(code):
        raise ParseError("Expected an expression", line=line)
    return scanner.expression(0, code, tags)


def parse_module(source: str, line: int = 1, column: int = 0) -> ast.Module:
    """Parse module code that may contain tag literals."""
    return Scanner(source, line, column).module()
