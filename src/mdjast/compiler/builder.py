"""TreeBuilder - intermediate tree to canonical tree.

Embedded code is bridged and evaluated as the tree is walked, in document
order, so module code runs before any expression that follows it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

from mdjast.ast.spec import (
    AttributeValueExpression,
    Element,
    JsxAttribute,
    JsxExpressionAttribute,
    Node,
    Root,
    SourceFile,
)
from mdjast.compiler.bridge import from_jsx_value, is_jsx_value, transform_jsx
from mdjast.compiler.evaluator import SandboxEvaluator
from mdjast.compiler.props import html_attribute_to_prop, style_to_dict
from mdjast.compiler.spec import Heading, JastElement, JastNode, create_jast_element

log = logging.getLogger(__name__)


@dataclass
class BuildSession:
    """Per-compile state shared by the handlers."""

    evaluator: SandboxEvaluator
    file: SourceFile
    headings: list[Heading] = field(default_factory=list)


def evaluated_item(value: Any) -> Optional[JastNode]:
    """Translate one evaluated value; None means it has no canonical form."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (str, int, float)):
        return value
    if is_jsx_value(value):
        return from_jsx_value(value)
    return None


def evaluated_value(value: Any) -> Optional[JastNode]:
    """Collapse an expression result into at most one canonical node.

    Sequences are translated item by item, dropping items without a canonical
    form; a single survivor is returned as-is, otherwise the survivors are
    wrapped in a grouping element.
    """
    if not isinstance(value, (list, tuple)):
        return evaluated_item(value)
    items = []
    for item in value:
        node = evaluated_item(item)
        if node is not None:
            items.append(node)
    if len(items) == 1:
        return items[0]
    return create_jast_element(None, {}, items)


class TreeBuilder:
    """Walks the intermediate tree with one handler per node kind."""

    def __init__(self, session: BuildSession):
        self.session = session
        self.handlers: dict[str, Callable[[Node], Optional[JastNode]]] = {
            "root": self.root,
            "element": self.element,
            "text": self.text,
            "comment": self.drop,
            "doctype": self.drop,
            "raw": self.drop,
            "module_code": self.module_code,
            "flow_expression": self.expression,
            "text_expression": self.expression,
            "jsx_flow_element": self.jsx_element,
            "jsx_text_element": self.jsx_element,
        }

    def build(self, tree: Root) -> JastElement:
        return self.root(tree)

    def one(self, node: Node) -> Optional[JastNode]:
        handler = self.handlers.get(node.kind)
        if handler is None:
            log.debug("No handler for node kind %r", node.kind)
            return None
        return handler(node)

    def all(self, nodes: list[Node]) -> list[JastNode]:
        result = []
        for node in nodes:
            value = self.one(node)
            if value is not None:
                result.append(value)
        return result

    def evaluate(self, estree: Any) -> Any:
        return self.session.evaluator.evaluate_expression(transform_jsx(estree))

    # Handlers

    def root(self, node: Root) -> JastElement:
        return create_jast_element(None, {}, self.all(node.children))

    def element(self, node: Element) -> JastElement:
        props = self.properties(node.properties)
        index = node.data.get("heading")
        if index is not None and index < len(self.session.headings):
            slug = self.session.headings[index].id
            if slug:
                props.setdefault("id", slug)
        return create_jast_element(node.tag_name, props, self.all(node.children))

    def text(self, node) -> str:
        return node.value

    def drop(self, node) -> None:
        log.debug("Dropping %s node", node.kind)
        return None

    def module_code(self, node) -> None:
        if node.estree is not None:
            self.session.evaluator.evaluate_program(transform_jsx(node.estree))
        return None

    def expression(self, node) -> Optional[JastNode]:
        if node.estree is None:
            return None
        return evaluated_value(self.evaluate(node.estree))

    def jsx_element(self, node) -> JastElement:
        return create_jast_element(
            node.name, self.attributes(node.attributes), self.all(node.children)
        )

    # Props

    def properties(self, properties: Mapping[str, Any]) -> dict:
        props = {}
        for name, value in properties.items():
            if name == "children":
                continue
            if name == "style" and isinstance(value, str):
                props["style"] = style_to_dict(value)
            else:
                props[html_attribute_to_prop(name)] = value
        return props

    def attributes(self, attributes: list) -> dict:
        props: dict = {}
        for attribute in attributes:
            if isinstance(attribute, JsxExpressionAttribute):
                value = self.evaluate(attribute.estree)
                if isinstance(value, Mapping):
                    props.update(value)
                else:
                    log.debug("Ignoring spread of %s", type(value).__name__)
            elif isinstance(attribute, JsxAttribute):
                value = attribute.value
                if value is None:
                    props[attribute.name] = True
                elif isinstance(value, AttributeValueExpression):
                    props[attribute.name] = (
                        None if value.estree is None else self.evaluate(value.estree)
                    )
                else:
                    props[attribute.name] = value
        props.pop("children", None)
        return props
