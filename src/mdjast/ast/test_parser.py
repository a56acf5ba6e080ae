"""Tests for the document parser."""

import ast

import pytest
from markdown_it.tree import SyntaxTreeNode

from mdjast.ast.parser import DocumentParser, HastConverter, wrap
from mdjast.ast.spec import (
    AttributeValueExpression,
    Element,
    FlowExpression,
    JsxAttribute,
    JsxExpressionAttribute,
    JsxFlowElement,
    JsxTextElement,
    ModuleCode,
    SourceFile,
    Text,
    TextExpression,
)
from mdjast.config import ConvertOptions
from mdjast.errors import ParseError


def parse(source: str, **kwargs):
    file = SourceFile(source)
    return DocumentParser(**kwargs).parse(file), file


def blocks(tree):
    """Root children without the newline separators."""
    return [node for node in tree.children if not (isinstance(node, Text) and node.value == "\n")]


def test_wrap_joins_with_newlines():
    """Siblings are joined with newline text nodes."""
    a, b = Text(value="a"), Text(value="b")
    assert [node.value for node in wrap([a, b])] == ["a", "\n", "b"]
    assert [node.value for node in wrap([a], loose=True)] == ["\n", "a", "\n"]
    assert wrap([]) == []


def test_heading_and_paragraph():
    """Headings and paragraphs become elements joined by a newline."""
    tree, file = parse("# Hello\n\nSome *text*.\n")

    assert [node.kind for node in tree.children] == ["element", "text", "element"]
    heading, paragraph = blocks(tree)
    assert heading.tag_name == "h1"
    assert heading.data == {"heading": 0}
    assert heading.position.start_line == 1
    assert paragraph.tag_name == "p"
    assert paragraph.children[1].tag_name == "em"
    assert file.data["headings"] == [{"depth": 1, "value": "Hello"}]


def test_heading_text_includes_inline_code():
    """Heading text is collected from text and inline code."""
    _, file = parse("## Use `pip` now\n")
    assert file.data["headings"] == [{"depth": 2, "value": "Use pip now"}]


def test_heading_text_includes_expression_source():
    """Expressions and tag text in headings contribute their source text."""
    _, file = parse("# {1 + 1}\n\n## Hello {'x'}\n\n### Press <Kbd>K</Kbd>\n")
    assert file.data["headings"] == [
        {"depth": 1, "value": "1 + 1"},
        {"depth": 2, "value": "Hello 'x'"},
        {"depth": 3, "value": "Press K"},
    ]


def test_flow_expression():
    """A braced expression alone on its line is a flow expression."""
    tree, _ = parse("{1 + 1}\n")

    (node,) = tree.children
    assert isinstance(node, FlowExpression)
    assert node.value == "1 + 1"
    assert isinstance(node.estree, ast.BinOp)
    assert node.estree.lineno == 1
    assert node.estree.col_offset == 1


def test_text_expression_in_paragraph():
    """A braced expression inside running text stays in the paragraph."""
    tree, _ = parse("Total: {1 + 2} items\n")

    (paragraph,) = tree.children
    assert paragraph.tag_name == "p"
    kinds = [child.kind for child in paragraph.children]
    assert kinds == ["text", "text_expression", "text"]
    assert paragraph.children[1].value == "1 + 2"


def test_paragraph_of_expressions_is_unravelled():
    """Paragraphs holding only expressions and tags are replaced by them."""
    tree, _ = parse("{1} {2}\n")

    kinds = [node.kind for node in tree.children]
    assert kinds == ["text_expression", "text", "text_expression"]
    assert tree.children[1].value == "\n"


def test_expression_positions_follow_frontmatter_offset():
    """Positions are shifted by the lines the frontmatter consumed."""
    file = SourceFile("\n{value}\n", data={"line_offset": 3})
    tree = DocumentParser().parse(file)

    (node,) = tree.children
    assert node.estree.lineno == 5
    assert node.position.start_line == 5


def test_self_closing_flow_tag():
    """A self-closing tag alone on its line is a flow element."""
    tree, _ = parse('<Chart data={[1, 2]} title="Sales" wide />\n')

    (node,) = tree.children
    assert isinstance(node, JsxFlowElement)
    assert node.name == "Chart"
    assert node.children == []
    data, title, wide = node.attributes
    assert isinstance(data.value, AttributeValueExpression)
    assert data.value.value == "[1, 2]"
    assert isinstance(data.value.estree, ast.List)
    assert title == JsxAttribute(name="title", value="Sales")
    assert wide == JsxAttribute(name="wide", value=None)


def test_spread_attribute():
    """Spread attributes become expression attributes over their argument."""
    tree, _ = parse("<Box {**options} />\n")

    (node,) = tree.children
    (attribute,) = node.attributes
    assert isinstance(attribute, JsxExpressionAttribute)
    assert attribute.value == "options"
    assert isinstance(attribute.estree, ast.Name)
    assert attribute.estree.id == "options"


def test_flow_tag_with_block_children():
    """Children on their own lines are parsed as block Markdown."""
    source = '<Note type="tip">\n\n# Inside\n\nText **bold**.\n\n</Note>\n'
    tree, file = parse(source)

    (node,) = tree.children
    assert isinstance(node, JsxFlowElement)
    assert node.name == "Note"
    assert [child.tag_name for child in node.children] == ["h1", "p"]
    assert file.data["headings"] == [{"depth": 1, "value": "Inside"}]


def test_flow_tag_with_inline_children():
    """Children on the tag's own line are parsed as inline Markdown."""
    tree, _ = parse("<Callout>Read *this*</Callout>\n")

    (node,) = tree.children
    assert isinstance(node, JsxFlowElement)
    assert node.children[0].value == "Read "
    assert node.children[1].tag_name == "em"


def test_text_tag_in_paragraph():
    """A tag inside running text is a text element."""
    tree, _ = parse("Press <Kbd>Ctrl</Kbd> now.\n")

    (paragraph,) = tree.children
    text, tag, rest = paragraph.children
    assert text.value == "Press "
    assert isinstance(tag, JsxTextElement)
    assert tag.name == "Kbd"
    assert tag.children[0].value == "Ctrl"
    assert rest.value == " now."


def test_fragment_tag():
    """Fragments have no name."""
    tree, _ = parse("<>hi</>\n")
    (node,) = tree.children
    assert node.name is None


def test_unclosed_tag_raises():
    """A flow tag without its closing tag is a parse error."""
    with pytest.raises(ParseError) as exc_info:
        parse("<Note>\n\ntext\n")
    assert exc_info.value.line == 1


def test_module_code():
    """Top-level import and export blocks are module code."""
    source = "export def greet(name):\n    return name\n\n# Title\n"
    tree, _ = parse(source)

    module, heading = blocks(tree)
    assert isinstance(module, ModuleCode)
    assert isinstance(module.estree, ast.Module)
    function = module.estree.body[0]
    assert isinstance(function, ast.FunctionDef)
    assert function.lineno == 1
    assert function.col_offset == 7
    assert heading.tag_name == "h1"


def test_module_code_keeps_indented_blank_lines():
    """Blank lines followed by indented code stay in the module block."""
    source = "export def f():\n    a = 1\n\n    return a\n\ntext\n"
    tree, _ = parse(source)

    module, paragraph = blocks(tree)
    assert isinstance(module, ModuleCode)
    assert "return a" in module.value
    assert paragraph.tag_name == "p"


def test_fenced_code_language_class():
    """Fenced code becomes pre > code with a language class."""
    tree, _ = parse("```py\nx = 1\n```\n")

    (pre,) = tree.children
    assert pre.tag_name == "pre"
    (code,) = pre.children
    assert code.properties == {"class": ["language-py"]}
    assert code.children[0].value == "x = 1\n"


def test_indented_code_is_disabled():
    """Indented lines are paragraphs, not code blocks."""
    tree, _ = parse("    not code\n")
    assert tree.children[0].tag_name == "p"


def test_tight_list_items_hold_inline_content():
    """Tight list items do not wrap their text in paragraphs."""
    tree, _ = parse("- a\n- b\n")

    (ul,) = tree.children
    assert ul.tag_name == "ul"
    items = [child for child in ul.children if isinstance(child, Element)]
    assert [item.children[0].value for item in items] == ["a", "b"]
    assert [child.value for child in ul.children if isinstance(child, Text)] == ["\n"] * 3


def test_ordered_list_start():
    tree, _ = parse("3. three\n4. four\n")
    assert tree.children[0].properties == {"start": 3}


def test_table_alignment_style():
    """Table cells keep markdown-it's alignment style."""
    tree, _ = parse("| a | b |\n|---|--:|\n| 1 | 2 |\n")

    (table,) = tree.children
    thead = next(child for child in table.children if isinstance(child, Element))
    row = next(child for child in thead.children if isinstance(child, Element))
    cells = [child for child in row.children if isinstance(child, Element)]
    assert cells[1].properties == {"style": "text-align:right"}


def test_escaped_brace_is_text():
    """A backslash-escaped brace does not start an expression."""
    tree, _ = parse("a \\{b}\n")

    (paragraph,) = tree.children
    assert all(isinstance(child, Text) for child in paragraph.children)
    assert "".join(child.value for child in paragraph.children) == "a {b}"


def test_unknown_token_type_adds_message():
    """Unknown node types fall back to a div and leave a diagnostic."""
    file = SourceFile("> quote\n")
    converter = HastConverter(file)
    del converter.handlers["blockquote"]
    tree = converter.root(SyntaxTreeNode(DocumentParser().md.parse(file.value, {})))

    assert tree.children[0].tag_name == "div"
    assert len(file.messages) == 1
    assert "blockquote" in file.messages[0].reason


def test_custom_handler():
    """Handlers can be overridden per token type."""

    def hr(converter, node):
        return [Element(tag_name="div", properties={"class": ["rule"]})]

    tree, _ = parse("---\n", options=ConvertOptions(handlers={"hr": hr}))
    assert tree.children[0].properties == {"class": ["rule"]}


def test_tree_plugins_replace_tree():
    """A tree plugin returning a tree replaces the parsed one."""
    seen = []

    def record(tree, file):
        seen.append(len(tree.children))

    def replace(tree, file):
        tree.children = [Text(value="replaced")]
        return tree

    tree, _ = parse("a\n\nb\n", tree_plugins=[record, replace])

    assert seen == [3]
    assert [child.value for child in tree.children] == ["replaced"]


def test_text_expression_estree():
    tree, _ = parse("x {name} y\n")
    expression = tree.children[0].children[1]
    assert isinstance(expression, TextExpression)
    assert isinstance(expression.estree, ast.Name)
    assert expression.estree.id == "name"
