"""Program synthesis - builds single-statement modules as ASTs.

Three statement shapes are ever needed to drive the evaluator:

    from <module> import default as <D>, <a>, <b>
    <identifier> = <expression>
    <identifier>['<member>'] = <expression>

They are built directly as ``ast`` nodes rather than as text, because module
names such as ``__mdx:define:mdx__`` and already-parsed expressions have no
valid text form. ``compile()`` rejects nodes with inconsistent positions, so
every node gets the offsets ``ast.parse`` would have produced for the
equivalent source, computed arithmetically. Columns are UTF-8 byte offsets.
"""

from __future__ import annotations

import ast
from typing import Callable, Optional, Sequence, Union

from mdjast.errors import InputValidationError

ExpressionSource = Union[ast.expr, Callable[[int], ast.expr]]

FROM = "from "
IMPORT = " import "
DEFAULT = "default"
AS = " as "
SEPARATOR = ", "
ASSIGN = " = "


def width(text: str) -> int:
    """Column width of ``text`` as counted by the Python parser."""
    return len(text.encode("utf-8"))


def _check_identifier(name: str, role: str) -> None:
    if not isinstance(name, str) or not name.isidentifier():
        raise InputValidationError(f"Invalid {role}: {name!r}")


def _at(node: ast.AST, start: int, end: int, end_lineno: int = 1) -> ast.AST:
    node.lineno = 1
    node.col_offset = start
    node.end_lineno = end_lineno
    node.end_col_offset = end
    return node


def import_layout(
    module: str, default_import: Optional[str], named_imports: Sequence[str]
) -> tuple[list[tuple[int, int]], int]:
    """Compute specifier spans and total width of an import statement.

    Returns:
        One ``(start, end)`` span per specifier (default first) and the end
        column of the whole statement.
    """
    cursor = width(FROM) + width(module) + width(IMPORT)
    spans = []
    specifiers = []
    if default_import is not None:
        specifiers.append(width(DEFAULT) + width(AS) + width(default_import))
    specifiers.extend(width(name) for name in named_imports)

    for index, size in enumerate(specifiers):
        if index:
            cursor += width(SEPARATOR)
        spans.append((cursor, cursor + size))
        cursor += size
    return spans, cursor


def export_prefix_width(identifier: str) -> int:
    """Start column of the value in ``<identifier> = <value>``."""
    return width(identifier) + width(ASSIGN)


def member_target_width(identifier: str, member: str) -> int:
    """End column of the target ``<identifier>['<member>']``."""
    return width(identifier) + 1 + width(repr(member)) + 1


def member_prefix_width(identifier: str, member: str) -> int:
    """Start column of the value in ``<identifier>['<member>'] = <value>``."""
    return member_target_width(identifier, member) + width(ASSIGN)


def _value_end(expression: ast.expr, start: int) -> tuple[int, int]:
    """End line and column of ``expression`` placed at ``start`` on line 1."""
    lineno = getattr(expression, "lineno", None)
    end_lineno = getattr(expression, "end_lineno", None)
    if lineno is None or end_lineno is None:
        return 1, start
    if end_lineno == lineno:
        return 1, start + expression.end_col_offset - expression.col_offset
    return 1 + end_lineno - lineno, expression.end_col_offset


def _resolve(expression: ExpressionSource, start: int) -> ast.expr:
    if callable(expression):
        return expression(start)
    return expression


def create_import_program(
    module: str,
    default_import: Optional[str] = None,
    named_imports: Sequence[str] = (),
) -> ast.Module:
    """Build ``from <module> import default as <D>, <names...>``.

    Args:
        module: Module name; need not be valid as source text.
        default_import: Local name bound to the module's ``default`` export.
        named_imports: Names imported as-is.

    Returns:
        A module holding one positioned ImportFrom statement.
    """
    named_imports = list(named_imports)
    if default_import is None and not named_imports:
        raise InputValidationError(
            "An import needs a default import or at least one named import"
        )
    if default_import is not None:
        _check_identifier(default_import, "default import")
    for name in named_imports:
        _check_identifier(name, "named import")

    spans, end = import_layout(module, default_import, named_imports)
    names = []
    if default_import is not None:
        names.append(ast.alias(name=DEFAULT, asname=default_import))
    names.extend(ast.alias(name=name, asname=None) for name in named_imports)
    for alias, (start, stop) in zip(names, spans):
        _at(alias, start, stop)

    statement = _at(ast.ImportFrom(module=module, names=names, level=0), 0, end)
    return ast.Module(body=[statement], type_ignores=[])


def create_export_program(identifier: str, expression: ExpressionSource) -> ast.Module:
    """Build ``<identifier> = <expression>`` as a module-level binding.

    ``expression`` may be a factory; it receives the start column of the value
    so that it can anchor its own offsets there.
    """
    _check_identifier(identifier, "identifier")
    start = export_prefix_width(identifier)
    value = _resolve(expression, start)
    end_lineno, end = _value_end(value, start)

    target = _at(ast.Name(id=identifier, ctx=ast.Store()), 0, width(identifier))
    statement = _at(
        ast.Assign(targets=[target], value=value, type_comment=None),
        0,
        end,
        end_lineno,
    )
    return ast.Module(body=[statement], type_ignores=[])


def create_member_assignment_program(
    identifier: str, member: str, expression: ExpressionSource
) -> ast.Module:
    """Build ``<identifier>['<member>'] = <expression>``."""
    _check_identifier(identifier, "identifier")
    if not isinstance(member, str) or not member:
        raise InputValidationError(f"Invalid member: {member!r}")

    start = member_prefix_width(identifier, member)
    value = _resolve(expression, start)
    end_lineno, end = _value_end(value, start)

    name_end = width(identifier)
    target_end = member_target_width(identifier, member)
    target = _at(
        ast.Subscript(
            value=_at(ast.Name(id=identifier, ctx=ast.Load()), 0, name_end),
            slice=_at(ast.Constant(value=member), name_end + 1, target_end - 1),
            ctx=ast.Store(),
        ),
        0,
        target_end,
    )
    statement = _at(
        ast.Assign(targets=[target], value=value, type_comment=None),
        0,
        end,
        end_lineno,
    )
    return ast.Module(body=[statement], type_ignores=[])
