"""Tag-literal node kinds.

Tag literals are not part of the Python grammar, so they get node classes of
their own. They subclass ``ast.AST`` so that the standard ``ast`` walkers and
``ast.NodeTransformer`` dispatch (``visit_JSXElement`` etc.) work over trees
that mix them with ordinary Python nodes. None of them may reach ``compile()``;
the bridge replaces every element and fragment with plain dict displays first.
"""

from __future__ import annotations

import ast


class JSXNode(ast.AST):
    _fields: tuple[str, ...] = ()
    _attributes = ("lineno", "col_offset", "end_lineno", "end_col_offset")


class JSXIdentifier(JSXNode):
    _fields = ("name",)


class JSXNamespacedName(JSXNode):
    _fields = ("namespace", "name")


class JSXMemberExpression(JSXNode):
    _fields = ("object", "property")


class JSXEmptyExpression(JSXNode):
    _fields = ()


class JSXExpressionContainer(JSXNode):
    _fields = ("expression",)


class JSXSpreadChild(JSXNode):
    _fields = ("expression",)


class JSXText(JSXNode):
    _fields = ("value",)


class JSXAttribute(JSXNode):
    _fields = ("name", "value")


class JSXSpreadAttribute(JSXNode):
    _fields = ("argument",)


class JSXElement(JSXNode):
    _fields = ("name", "attributes", "children", "self_closing")


class JSXFragment(JSXNode):
    _fields = ("children",)


def jsx_name(node: JSXNode) -> str:
    """Return the string form of a tag or attribute name node.

    ``Card`` -> ``"Card"``, ``svg:rect`` -> ``"svg:rect"``,
    ``ui.Card.Title`` -> ``"ui.Card.Title"``.
    """
    if isinstance(node, JSXIdentifier):
        return node.name
    if isinstance(node, JSXNamespacedName):
        return f"{node.namespace.name}:{node.name.name}"
    if isinstance(node, JSXMemberExpression):
        return f"{jsx_name(node.object)}.{node.property.name}"
    raise TypeError(f"Not a tag name node: {type(node).__name__}")
