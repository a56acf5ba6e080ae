"""Tests for the canonical tree builder."""

import ast

from mdjast.ast.spec import (
    AttributeValueExpression,
    Comment,
    Element,
    FlowExpression,
    JsxAttribute,
    JsxExpressionAttribute,
    JsxFlowElement,
    ModuleCode,
    Root,
    SourceFile,
    Text,
)
from mdjast.compiler.builder import BuildSession, TreeBuilder, evaluated_item, evaluated_value
from mdjast.compiler.bridge import JSX_MARKER
from mdjast.compiler.evaluator import SandboxEvaluator
from mdjast.compiler.spec import Heading


def expression(code: str) -> ast.expr:
    return ast.parse(code, mode="eval").body


def builder(headings=None) -> TreeBuilder:
    session = BuildSession(
        evaluator=SandboxEvaluator(), file=SourceFile(""), headings=headings or []
    )
    return TreeBuilder(session)


def test_evaluated_item_primitives():
    """Strings and numbers pass through; booleans and None do not."""
    assert evaluated_item("a") == "a"
    assert evaluated_item(2) == 2
    assert evaluated_item(1.5) == 1.5
    assert evaluated_item(True) is None
    assert evaluated_item(False) is None
    assert evaluated_item(None) is None
    assert evaluated_item(object()) is None
    assert evaluated_item({"a": 1}) is None


def test_evaluated_item_element():
    """Element values are converted to canonical elements."""
    value = {JSX_MARKER: ["b", {"children": "y"}, ["x"]]}
    assert evaluated_item(value) == ["b", {}, ["x"]]


def test_evaluated_value_sequences():
    """Sequences collapse to one node, a group, or nothing."""
    assert evaluated_value([None, "only"]) == "only"
    assert evaluated_value(["a", 2, True]) == [None, {}, ["a", 2]]
    assert evaluated_value(("a", "b")) == [None, {}, ["a", "b"]]
    assert evaluated_value([]) == [None, {}]
    assert evaluated_value([None, False]) == [None, {}]


def test_root_and_element():
    """Root becomes a grouping element; empty children are omitted."""
    tree = Root(
        children=[
            Element(tag_name="p", children=[Text(value="hi")]),
            Text(value="\n"),
            Element(tag_name="hr"),
        ]
    )
    assert builder().build(tree) == [None, {}, [["p", {}, ["hi"]], "\n", ["hr", {}]]]


def test_empty_root():
    assert builder().build(Root()) == [None, {}]


def test_element_props_are_mapped():
    """HTML attribute names and style strings become framework props."""
    node = Element(
        tag_name="td",
        properties={
            "class": ["a", "b"],
            "style": "text-align:right; background-color: red",
            "colspan": 2,
            "children": ["dropped"],
        },
    )
    assert builder().one(node) == [
        "td",
        {
            "className": ["a", "b"],
            "style": {"textAlign": "right", "backgroundColor": "red"},
            "colSpan": 2,
        },
    ]


def test_heading_receives_slug_id():
    """Headings take the id of their collected heading."""
    node = Element(tag_name="h2", children=[Text(value="Intro")], data={"heading": 1})
    headings = [Heading(1, "Top", "top"), Heading(2, "Intro", "intro")]
    assert builder(headings).one(node) == ["h2", {"id": "intro"}, ["Intro"]]


def test_heading_keeps_explicit_id():
    node = Element(tag_name="h1", properties={"id": "mine"}, data={"heading": 0})
    assert builder([Heading(1, "Top", "top")]).one(node) == ["h1", {"id": "mine"}]


def test_heading_with_empty_slug_has_no_id():
    node = Element(tag_name="h1", children=[Text(value="!")], data={"heading": 0})
    assert builder([Heading(1, "!", "")]).one(node) == ["h1", {}, ["!"]]


def test_comments_are_dropped():
    assert builder().one(Comment(value="note")) is None


def test_flow_expression_is_evaluated():
    node = FlowExpression(value="1 + 1", estree=expression("1 + 1"))
    assert builder().one(node) == 2


def test_empty_expression_is_dropped():
    assert builder().one(FlowExpression(value=" ")) is None


def test_jsx_element_attributes():
    """Literal, boolean, expression and spread attributes become props."""
    node = JsxFlowElement(
        name="Chart",
        attributes=[
            JsxAttribute(name="title", value="Sales"),
            JsxAttribute(name="wide", value=None),
            JsxAttribute(
                name="data",
                value=AttributeValueExpression(value="[1, 2]", estree=expression("[1, 2]")),
            ),
            JsxExpressionAttribute(
                value="{'color': 'red'}", estree=expression("{'color': 'red'}")
            ),
            JsxAttribute(name="children", value="ignored"),
        ],
        children=[Text(value="x")],
    )
    assert builder().one(node) == [
        "Chart",
        {"title": "Sales", "wide": True, "data": [1, 2], "color": "red"},
        ["x"],
    ]


def test_spread_of_non_mapping_is_ignored():
    """Spread values that are not mappings add no props."""
    node = JsxFlowElement(
        name="A",
        attributes=[
            JsxExpressionAttribute(value="[('a', 1)]", estree=expression("[('a', 1)]")),
            JsxExpressionAttribute(value="None", estree=expression("None")),
            JsxAttribute(name="b", value="2"),
        ],
    )
    assert builder().one(node) == ["A", {"b": "2"}]


def test_jsx_attribute_values_are_not_converted():
    """Attribute values keep their evaluated form."""
    node = JsxFlowElement(
        name="Card",
        attributes=[
            JsxAttribute(
                name="icon",
                value=AttributeValueExpression(
                    value="<i />", estree=expression("{'$$jsx': ['i', {}, []]}")
                ),
            )
        ],
    )
    assert builder().one(node) == ["Card", {"icon": {JSX_MARKER: ["i", {}, []]}}]


def test_module_code_runs_before_later_expressions():
    """Module code is executed in order and drops out of the tree."""
    tree = Root(
        children=[
            ModuleCode(value="x = 40", estree=ast.parse("x = 40")),
            FlowExpression(value="x + 2", estree=expression("x + 2")),
        ]
    )
    assert builder().build(tree) == [None, {}, [42]]
