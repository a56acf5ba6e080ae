"""Document parser - Markdown with embedded code into the intermediate tree."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from mdjast.ast.mdx import mdx_plugin
from mdjast.ast.spec import (
    Element,
    FlowExpression,
    JsxFlowElement,
    JsxTextElement,
    ModuleCode,
    Node,
    Position,
    Raw,
    Root,
    SourceFile,
    Text,
    TextExpression,
)
from mdjast.config import ConvertOptions

log = logging.getLogger(__name__)

TreePlugin = Callable[[Root, SourceFile], Optional[Root]]

UNRAVEL = ("jsx_text_element", "text_expression")


def wrap(nodes: list[Node], loose: bool = False) -> list[Node]:
    """Join block siblings with newline text nodes."""
    result: list[Node] = []
    if loose:
        result.append(Text(value="\n"))
    for index, node in enumerate(nodes):
        if index:
            result.append(Text(value="\n"))
        result.append(node)
    if loose and nodes:
        result.append(Text(value="\n"))
    return result


class HastConverter:
    """Convert a markdown-it syntax tree into the intermediate tree.

    Handlers are looked up by syntax tree node type and called as
    ``handler(converter, node)``; each returns a list of intermediate nodes.
    """

    def __init__(self, file: SourceFile, handlers: Optional[Mapping[str, Callable]] = None):
        self.file = file
        self.line_offset = file.data.get("line_offset", 0)
        self.handlers: dict[str, Callable] = {
            "paragraph": HastConverter.paragraph,
            "heading": HastConverter.heading,
            "inline": HastConverter.inline,
            "text": HastConverter.text,
            "softbreak": HastConverter.softbreak,
            "hardbreak": HastConverter.hardbreak,
            "code_inline": HastConverter.code_inline,
            "fence": HastConverter.code_block,
            "code_block": HastConverter.code_block,
            "image": HastConverter.image,
            "link": HastConverter.link,
            "hr": HastConverter.void,
            "bullet_list": HastConverter.block_container,
            "ordered_list": HastConverter.ordered_list,
            "list_item": HastConverter.list_item,
            "blockquote": HastConverter.block_container,
            "table": HastConverter.block_container,
            "thead": HastConverter.block_container,
            "tbody": HastConverter.block_container,
            "tr": HastConverter.block_container,
            "th": HastConverter.element,
            "td": HastConverter.element,
            "em": HastConverter.element,
            "strong": HastConverter.element,
            "s": HastConverter.element,
            "html_block": HastConverter.raw,
            "html_inline": HastConverter.raw,
            "mdx_module": HastConverter.module,
            "mdx_flow_expression": HastConverter.flow_expression,
            "mdx_text_expression": HastConverter.text_expression,
            "mdx_jsx_flow": HastConverter.jsx_flow,
            "mdx_jsx_text": HastConverter.jsx_text,
        }
        self.handlers.update(handlers or {})

    def position(self, node: SyntaxTreeNode) -> Optional[Position]:
        if not node.map:
            return None
        start, end = node.map
        return Position(start_line=start + 1 + self.line_offset, end_line=end + self.line_offset)

    def root(self, node: SyntaxTreeNode) -> Root:
        return Root(children=wrap(self.all(node)))

    def all(self, node: SyntaxTreeNode) -> list[Node]:
        result: list[Node] = []
        for child in node.children:
            result.extend(self.one(child))
        return result

    def one(self, node: SyntaxTreeNode) -> list[Node]:
        handler = self.handlers.get(node.type)
        if handler is None:
            return self.unknown(node)
        return handler(self, node)

    def unknown(self, node: SyntaxTreeNode) -> list[Node]:
        position = self.position(node)
        self.file.message(
            f"Unknown markdown node `{node.type}`",
            line=position.start_line if position else None,
            source="mdjast:convert",
        )
        if node.children:
            return [Element(tag_name="div", children=self.all(node), position=position)]
        if node.content:
            return [Text(value=node.content, position=position)]
        return []

    # Markdown

    def element(self, node: SyntaxTreeNode) -> list[Node]:
        return [
            Element(
                tag_name=node.tag,
                properties=dict(node.attrs),
                children=self.all(node),
                position=self.position(node),
            )
        ]

    def block_container(self, node: SyntaxTreeNode) -> list[Node]:
        return [
            Element(
                tag_name=node.tag,
                properties=dict(node.attrs),
                children=wrap(self.all(node), loose=True),
                position=self.position(node),
            )
        ]

    def void(self, node: SyntaxTreeNode) -> list[Node]:
        return [Element(tag_name=node.tag, position=self.position(node))]

    def paragraph(self, node: SyntaxTreeNode) -> list[Node]:
        children = self.all(node)
        if node.hidden:
            return children
        significant = [
            child
            for child in children
            if not (isinstance(child, Text) and not child.value.strip())
        ]
        if significant and all(child.kind in UNRAVEL for child in significant):
            return significant
        return [Element(tag_name="p", children=children, position=self.position(node))]

    def heading(self, node: SyntaxTreeNode) -> list[Node]:
        return [
            Element(
                tag_name=node.tag,
                children=self.all(node),
                data={"heading": node.meta.get("heading")},
                position=self.position(node),
            )
        ]

    def inline(self, node: SyntaxTreeNode) -> list[Node]:
        return self.all(node)

    def text(self, node: SyntaxTreeNode) -> list[Node]:
        return [Text(value=node.content)] if node.content else []

    def softbreak(self, node: SyntaxTreeNode) -> list[Node]:
        return [Text(value="\n")]

    def hardbreak(self, node: SyntaxTreeNode) -> list[Node]:
        return [Element(tag_name="br"), Text(value="\n")]

    def code_inline(self, node: SyntaxTreeNode) -> list[Node]:
        return [Element(tag_name="code", children=[Text(value=node.content)])]

    def code_block(self, node: SyntaxTreeNode) -> list[Node]:
        properties = {}
        language = node.info.split()[0] if node.info and node.info.strip() else None
        if language:
            properties["class"] = [f"language-{language}"]
        code = Element(tag_name="code", properties=properties, children=[Text(value=node.content)])
        return [Element(tag_name="pre", children=[code], position=self.position(node))]

    def image(self, node: SyntaxTreeNode) -> list[Node]:
        alt = "".join(child.content for child in node.children if child.type == "text")
        properties = {"src": node.attrs.get("src", ""), "alt": alt or node.content}
        if node.attrs.get("title"):
            properties["title"] = node.attrs["title"]
        return [Element(tag_name="img", properties=properties)]

    def link(self, node: SyntaxTreeNode) -> list[Node]:
        return self.element(node)

    def ordered_list(self, node: SyntaxTreeNode) -> list[Node]:
        properties = {}
        start = node.attrs.get("start")
        if start is not None and int(start) != 1:
            properties["start"] = int(start)
        return [
            Element(
                tag_name="ol",
                properties=properties,
                children=wrap(self.all(node), loose=True),
                position=self.position(node),
            )
        ]

    def list_item(self, node: SyntaxTreeNode) -> list[Node]:
        tight = all(child.hidden for child in node.children if child.type == "paragraph")
        children = self.all(node)
        return [
            Element(
                tag_name="li",
                children=children if tight else wrap(children, loose=True),
                position=self.position(node),
            )
        ]

    def raw(self, node: SyntaxTreeNode) -> list[Node]:
        return [Raw(value=node.content, position=self.position(node))]

    # Embedded code

    def module(self, node: SyntaxTreeNode) -> list[Node]:
        return [
            ModuleCode(
                value=node.content,
                estree=node.meta.get("estree"),
                position=self.position(node),
            )
        ]

    def flow_expression(self, node: SyntaxTreeNode) -> list[Node]:
        return [
            FlowExpression(
                value=node.content,
                estree=node.meta.get("estree"),
                position=self.position(node),
            )
        ]

    def text_expression(self, node: SyntaxTreeNode) -> list[Node]:
        return [TextExpression(value=node.content, estree=node.meta.get("estree"))]

    def jsx_flow(self, node: SyntaxTreeNode) -> list[Node]:
        return [
            JsxFlowElement(
                name=node.meta.get("name"),
                attributes=node.meta.get("attributes", []),
                children=self.all(node),
                position=self.position(node),
            )
        ]

    def jsx_text(self, node: SyntaxTreeNode) -> list[Node]:
        return [
            JsxTextElement(
                name=node.meta.get("name"),
                attributes=node.meta.get("attributes", []),
                children=self.all(node),
            )
        ]


class DocumentParser:
    """Parse document bodies into the intermediate tree.

    Args:
        markdown_plugins: markdown-it plugins, each a callable or a
            ``(plugin, {options})`` pair, applied after the MDX plugin.
        tree_plugins: Callables ``(root, file)`` run on the intermediate tree;
            a non-None return value replaces the tree.
        options: Conversion options.
        markdown: Options passed to ``MarkdownIt``.
    """

    def __init__(
        self,
        markdown_plugins: Sequence[Any] = (),
        tree_plugins: Iterable[TreePlugin] = (),
        options: Optional[ConvertOptions] = None,
        markdown: Optional[Mapping[str, Any]] = None,
    ):
        self.options = options or ConvertOptions()
        self.tree_plugins = list(tree_plugins)
        self.md = MarkdownIt("commonmark", dict(markdown or {}))
        self.md.enable(["table", "strikethrough"])
        self.md.use(mdx_plugin)
        if self.options.html:
            self.md.enable(["html_block", "html_inline"])
        for plugin in markdown_plugins:
            if isinstance(plugin, (tuple, list)):
                plugin, params = plugin
                self.md.use(plugin, **params)
            else:
                self.md.use(plugin)

    def parse(self, file: SourceFile) -> Root:
        env = {"line_offset": file.data.get("line_offset", 0)}
        tokens = self.md.parse(file.value, env)
        file.data["headings"] = env.get("headings", [])

        converter = HastConverter(file, self.options.handlers)
        tree = converter.root(SyntaxTreeNode(tokens))
        for plugin in self.tree_plugins:
            result = plugin(tree, file)
            if result is not None:
                tree = result
        log.debug("Parsed %d top-level nodes", len(tree.children))
        return tree
