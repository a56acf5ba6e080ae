"""markdown-it plugin for embedded code and tag literals.

Adds the MDX constructs to a CommonMark parser:

- module code: top-level blocks starting with ``import``, ``from x import``
  or ``export`` (the ``export`` keyword is stripped);
- flow expressions: ``{...}`` standing alone on its lines;
- flow tag literals: ``<Tag ... />`` or ``<Tag>...</Tag>`` standing alone,
  with children parsed as block Markdown (multi-line) or inline Markdown;
- text expressions and text tag literals inside running text.

Indented code, raw HTML and autolinks are disabled, as ``<`` now starts a tag
literal. A core rule also records headings (depth and plain text) into
``env["headings"]`` in document order.
"""

from __future__ import annotations

import ast
import re
from typing import Optional

from markdown_it import MarkdownIt
from markdown_it.rules_block import StateBlock
from markdown_it.rules_core import StateCore
from markdown_it.rules_inline import StateInline

from mdjast.ast.expression import OpeningTag, Scanner, parse_module
from mdjast.ast.jsx import (
    JSXElement,
    JSXEmptyExpression,
    JSXExpressionContainer,
    JSXFragment,
    JSXSpreadAttribute,
    jsx_name,
)
from mdjast.ast.spec import AttributeValueExpression, JsxAttribute, JsxExpressionAttribute

MODULE_START = re.compile(r"(?:import|export)[ \t]|from[ \t]+[\w.]+[ \t]+import[ \t]")
EXPORT = re.compile(r"export[ \t]+")
EXPORT_LINE = re.compile(r"^export[ \t]+", re.M)


def _line_offset(env: dict) -> int:
    return env.get("line_offset", 0)


def _block_scanner(state: StateBlock) -> Scanner:
    scanner = state.env.get("mdx_block_scanner")
    if scanner is None or scanner.text is not state.src:
        scanner = Scanner(state.src, line=_line_offset(state.env) + 1)
        state.env["mdx_block_scanner"] = scanner
    return scanner


def _inline_scanner(state: StateInline) -> Scanner:
    line = _line_offset(state.env) + state.env.get("mdx_line", 0) + 1
    scanner = state.env.get("mdx_inline_scanner")
    if scanner is None or scanner.text is not state.src or scanner.line != line:
        scanner = Scanner(state.src, line=line)
        state.env["mdx_inline_scanner"] = scanner
    return scanner


def _line_of(state: StateBlock, index: int, start: int, end: int) -> Optional[int]:
    line = start
    while line < end:
        if index <= state.eMarks[line]:
            return line
        line += 1
    return None


def _attributes(scanner: Scanner, opening: OpeningTag) -> list:
    result: list = []
    for attribute in opening.attributes:
        if isinstance(attribute, JSXSpreadAttribute):
            result.append(
                JsxExpressionAttribute(
                    value=scanner.segment(attribute.argument), estree=attribute.argument
                )
            )
            continue

        name = jsx_name(attribute.name)
        value = attribute.value
        if value is None:
            result.append(JsxAttribute(name=name, value=None))
        elif isinstance(value, ast.Constant):
            result.append(JsxAttribute(name=name, value=value.value))
        elif isinstance(value, JSXExpressionContainer):
            if isinstance(value.expression, JSXEmptyExpression):
                expression = AttributeValueExpression(value="")
            else:
                expression = AttributeValueExpression(
                    value=scanner.segment(value.expression), estree=value.expression
                )
            result.append(JsxAttribute(name=name, value=expression))
        elif isinstance(value, (JSXElement, JSXFragment)):
            expression = AttributeValueExpression(value=scanner.segment(value), estree=value)
            result.append(JsxAttribute(name=name, value=expression))
    return result


def _meta(scanner: Scanner, opening: OpeningTag) -> dict:
    return {"name": opening.tag_name, "attributes": _attributes(scanner, opening)}


def mdx_module(state: StateBlock, startLine: int, endLine: int, silent: bool) -> bool:
    if state.parentType != "root" or state.blkIndent or state.sCount[startLine]:
        return False
    start = state.bMarks[startLine]
    if not MODULE_START.match(state.src, start):
        return False
    if silent:
        return True

    line = startLine + 1
    while line < endLine:
        if state.isEmpty(line):
            ahead = line
            while ahead < endLine and state.isEmpty(ahead):
                ahead += 1
            # Blank lines inside indented bodies belong to the block
            if ahead >= endLine or state.sCount[ahead] == 0:
                break
            line = ahead
        line += 1

    text = state.src[start : state.eMarks[line - 1]]
    export = EXPORT.match(text)
    module = parse_module(
        EXPORT_LINE.sub("", text),
        line=_line_offset(state.env) + startLine + 1,
        column=export.end() if export else 0,
    )

    token = state.push("mdx_module", "", 0)
    token.content = text
    token.meta = {"estree": module}
    token.map = [startLine, line]
    state.line = line
    return True


def mdx_flow_expression(
    state: StateBlock, startLine: int, endLine: int, silent: bool
) -> bool:
    if state.sCount[startLine] - state.blkIndent >= 4:
        return False
    start = state.bMarks[startLine] + state.tShift[startLine]
    if state.src[start : start + 1] != "{":
        return False

    scanner = _block_scanner(state)
    expression, end = scanner.braced(start)
    last = _line_of(state, end - 1, startLine, endLine)
    if last is None or state.src[end : state.eMarks[last]].strip():
        return False
    if silent:
        return True

    token = state.push("mdx_flow_expression", "", 0)
    token.content = state.src[start + 1 : end - 1]
    token.meta = {"estree": expression}
    token.map = [startLine, last + 1]
    state.line = last + 1
    return True


def _tokenize_children(state: StateBlock, start: int, end: int, indent: int) -> None:
    parent, line_max, blk_indent = state.parentType, state.lineMax, state.blkIndent
    state.parentType = "mdx_jsx"
    state.lineMax = end
    state.blkIndent = indent
    try:
        state.md.block.tokenize(state, start, end)
    finally:
        state.parentType, state.lineMax, state.blkIndent = parent, line_max, blk_indent


def mdx_jsx_flow(state: StateBlock, startLine: int, endLine: int, silent: bool) -> bool:
    if state.sCount[startLine] - state.blkIndent >= 4:
        return False
    start = state.bMarks[startLine] + state.tShift[startLine]
    scanner = _block_scanner(state)
    if not scanner.is_tag_start(start):
        return False

    opening = scanner.opening_tag(start)
    last = _line_of(state, opening.end - 1, startLine, endLine)
    if last is None:
        return False
    rest = state.src[opening.end : state.eMarks[last]]

    if opening.self_closing:
        if rest.strip():
            return False
        if silent:
            return True
        token = state.push("mdx_jsx_flow_open", "", 1)
        token.meta = _meta(scanner, opening)
        token.map = [startLine, last + 1]
        state.push("mdx_jsx_flow_close", "", -1)
        state.line = last + 1
        return True

    found = scanner.find_closing(opening.end, opening.tag_name, state.eMarks[endLine - 1])
    if found is None:
        raise scanner.error(
            f"Expected a closing tag for <{opening.tag_name or ''}>", start
        )
    close_start, close_end = found
    close_line = _line_of(state, close_end - 1, startLine, endLine)
    if state.src[close_end : state.eMarks[close_line]].strip():
        return False
    if silent:
        return True

    token = state.push("mdx_jsx_flow_open", "", 1)
    token.meta = _meta(scanner, opening)
    token.map = [startLine, close_line + 1]
    line_start = state.bMarks[close_line] + state.tShift[close_line]
    if rest.strip() or close_line == last or state.src[line_start:close_start].strip():
        inline = state.push("inline", "", 0)
        inline.content = state.src[opening.end : close_start].strip()
        inline.map = [startLine, close_line + 1]
        inline.children = []
    else:
        _tokenize_children(state, last + 1, close_line, state.sCount[startLine])
    state.push("mdx_jsx_flow_close", "", -1)
    state.line = close_line + 1
    return True


def mdx_text_expression(state: StateInline, silent: bool) -> bool:
    if state.src[state.pos] != "{":
        return False
    scanner = _inline_scanner(state)
    expression, end = scanner.braced(state.pos)
    if end > state.posMax:
        return False
    if not silent:
        token = state.push("mdx_text_expression", "", 0)
        token.content = state.src[state.pos + 1 : end - 1]
        token.meta = {"estree": expression}
    state.pos = end
    return True


def mdx_jsx_text(state: StateInline, silent: bool) -> bool:
    start = state.pos
    scanner = _inline_scanner(state)
    if not scanner.is_tag_start(start):
        return False
    opening = scanner.opening_tag(start)
    if opening.end > state.posMax:
        return False

    if opening.self_closing:
        if not silent:
            token = state.push("mdx_jsx_text_open", "", 1)
            token.meta = _meta(scanner, opening)
            state.push("mdx_jsx_text_close", "", -1)
        state.pos = opening.end
        return True

    found = scanner.find_closing(opening.end, opening.tag_name, state.posMax)
    if found is None:
        raise scanner.error(
            f"Expected a closing tag for <{opening.tag_name or ''}>", start
        )
    close_start, close_end = found
    if not silent:
        token = state.push("mdx_jsx_text_open", "", 1)
        token.meta = _meta(scanner, opening)
        pos_max = state.posMax
        state.pos = opening.end
        state.posMax = close_start
        state.md.inline.tokenize(state)
        state.posMax = pos_max
        state.push("mdx_jsx_text_close", "", -1)
    state.pos = close_end
    return True


def inline_with_lines(state: StateCore) -> None:
    """Parse inline tokens, exposing each token's start line to inline rules."""
    for token in state.tokens:
        if token.type == "inline":
            if token.children is None:
                token.children = []
            state.env["mdx_line"] = token.map[0] if token.map else 0
            state.md.inline.parse(token.content, state.md, state.env, token.children)


def collect_headings(state: StateCore) -> None:
    headings = state.env.setdefault("headings", [])
    tokens = state.tokens
    for index, token in enumerate(tokens):
        if token.type != "heading_open":
            continue
        inline = tokens[index + 1]
        value = "".join(
            child.content
            for child in inline.children or ()
            if child.type in ("text", "code_inline", "mdx_text_expression")
        )
        token.meta["heading"] = len(headings)
        headings.append({"depth": int(token.tag[1:]), "value": value})


def mdx_plugin(md: MarkdownIt) -> None:
    md.disable(["code", "html_block", "html_inline", "autolink"], ignoreInvalid=True)
    md.block.ruler.before("table", "mdx_module", mdx_module)
    md.block.ruler.before("table", "mdx_jsx_flow", mdx_jsx_flow)
    md.block.ruler.before("table", "mdx_flow_expression", mdx_flow_expression)
    md.inline.ruler.before("backticks", "mdx_text_expression", mdx_text_expression)
    md.inline.ruler.before("backticks", "mdx_jsx_text", mdx_jsx_text)
    md.core.ruler.at("inline", inline_with_lines)
    md.core.ruler.after("inline", "mdx_headings", collect_headings)
