"""Bridge between tag literals and their plain-object form.

Forward: every ``JSXElement``/``JSXFragment`` in a Python AST becomes a dict
display that evaluates to the marker object::

    {'$$jsx': [name_or_None, {attributes}, [children]]}

Backward: :func:`from_jsx_value` unpacks such a value, once evaluated, into a
canonical element.
"""

from __future__ import annotations

import ast
import logging
import re
from typing import Any

from mdjast.ast.jsx import (
    JSXAttribute,
    JSXElement,
    JSXEmptyExpression,
    JSXExpressionContainer,
    JSXFragment,
    JSXIdentifier,
    JSXMemberExpression,
    JSXNamespacedName,
    JSXSpreadAttribute,
    JSXSpreadChild,
    JSXText,
    jsx_name,
)
from mdjast.compiler.spec import JastNode, create_jast_element
from mdjast.errors import UnsupportedSyntaxError

log = logging.getLogger(__name__)

JSX_MARKER = "$$jsx"
WHITESPACE = re.compile(r"\s+")


def _unsupported(node: ast.AST) -> UnsupportedSyntaxError:
    return UnsupportedSyntaxError(type(node).__name__, getattr(node, "lineno", None))


def _constant(value: Any) -> ast.Constant:
    return ast.Constant(value=value)


class JSXTransformer(ast.NodeTransformer):
    """Replace tag-literal nodes with marker dict displays."""

    def visit_JSXElement(self, node: JSXElement) -> ast.Dict:
        return self._marker(node, self.name(node.name), node.attributes, node.children)

    def visit_JSXFragment(self, node: JSXFragment) -> ast.Dict:
        return self._marker(node, _constant(None), [], node.children)

    def _marker(self, node, name, attributes, children) -> ast.Dict:
        payload = ast.List(
            elts=[name, self.attributes(attributes), self.children(children)],
            ctx=ast.Load(),
        )
        marker = ast.Dict(keys=[_constant(JSX_MARKER)], values=[payload])
        return ast.fix_missing_locations(ast.copy_location(marker, node))

    def name(self, node) -> ast.Constant:
        if isinstance(node, (JSXIdentifier, JSXNamespacedName, JSXMemberExpression)):
            return ast.copy_location(_constant(jsx_name(node)), node)
        raise _unsupported(node)

    def attributes(self, attributes) -> ast.Dict:
        keys: list = []
        values: list = []
        for attribute in attributes:
            if isinstance(attribute, JSXSpreadAttribute):
                keys.append(None)
                values.append(self.visit(attribute.argument))
            elif isinstance(attribute, JSXAttribute):
                keys.append(self.name(attribute.name))
                values.append(self.attribute_value(attribute))
            else:
                raise _unsupported(attribute)
        return ast.Dict(keys=keys, values=values)

    def attribute_value(self, attribute: JSXAttribute) -> ast.expr:
        value = attribute.value
        if value is None:
            return ast.copy_location(_constant(True), attribute)
        if isinstance(value, ast.Constant) and isinstance(value.value, str):
            return value
        if isinstance(value, JSXExpressionContainer):
            if isinstance(value.expression, JSXEmptyExpression):
                return ast.copy_location(_constant(None), value)
            return self.visit(value.expression)
        if isinstance(value, (JSXElement, JSXFragment)):
            return self.visit(value)
        raise _unsupported(value)

    def children(self, children) -> ast.List:
        elements: list = []
        for child in children:
            if isinstance(child, JSXText):
                text = WHITESPACE.sub(" ", child.value)
                elements.append(ast.copy_location(_constant(text), child))
            elif isinstance(child, JSXExpressionContainer):
                if isinstance(child.expression, JSXEmptyExpression):
                    continue
                elements.append(self.visit(child.expression))
            elif isinstance(child, JSXSpreadChild):
                starred = ast.Starred(value=self.visit(child.expression), ctx=ast.Load())
                elements.append(ast.copy_location(starred, child))
            elif isinstance(child, (JSXElement, JSXFragment)):
                elements.append(self.visit(child))
            else:
                raise _unsupported(child)
        return ast.List(elts=elements, ctx=ast.Load())


def transform_jsx(node: ast.AST) -> ast.AST:
    """Replace all tag literals in ``node`` (which may itself be one)."""
    return JSXTransformer().visit(node)


def is_jsx_value(value: Any) -> bool:
    """Whether ``value`` is an evaluated marker object."""
    if not isinstance(value, dict) or len(value) != 1 or JSX_MARKER not in value:
        return False
    payload = value[JSX_MARKER]
    return isinstance(payload, (list, tuple)) and len(payload) == 3


def _unpack_children(children, result: list) -> list:
    for child in children:
        if is_jsx_value(child):
            result.append(from_jsx_value(child))
        elif isinstance(child, (list, tuple)):
            _unpack_children(child, result)
        elif child is None or isinstance(child, (str, int, float, bool)):
            result.append(child)
        else:
            log.debug("Dropping child of type %s", type(child).__name__)
    return result


def from_jsx_value(value: dict) -> list:
    """Unpack an evaluated marker object into a canonical element.

    Nested markers are unpacked, nested sequences flattened and values with
    no canonical form dropped. A ``children`` property is removed since
    children are positional.
    """
    tag, props, children = value[JSX_MARKER]
    props = {key: item for key, item in dict(props or {}).items() if key != "children"}
    nodes: list[JastNode] = _unpack_children(children or (), [])
    return create_jast_element(tag, props, nodes)
