"""Renderer - canonical tree to framework elements.

Rendering is a pure walk over the tree: strings and numbers pass through,
``None`` and booleans render as nothing, and each element becomes
``runtime.jsx(type, props)`` (or ``runtime.jsxs`` for several children) where
``type`` is the runtime fragment for grouping elements, the mapped component,
or the tag name itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Protocol


class FragmentType:
    """Marker type for transparent grouping elements."""

    def __repr__(self) -> str:
        return "Fragment"


Fragment = FragmentType()


@dataclass(frozen=True)
class VElement:
    """A rendered element: a type (tag, component or Fragment) and props."""

    type: Any
    props: Mapping[str, Any] = field(default_factory=dict)

    @property
    def children(self) -> list:
        children = self.props.get("children")
        if children is None:
            return []
        if isinstance(children, list):
            return children
        return [children]


class Runtime(Protocol):
    Fragment: Any

    def jsx(self, type: Any, props: dict) -> Any: ...

    def jsxs(self, type: Any, props: dict) -> Any: ...


class ElementRuntime:
    """Default runtime producing VElement values."""

    Fragment = Fragment

    def jsx(self, type: Any, props: dict) -> VElement:
        return VElement(type, props)

    def jsxs(self, type: Any, props: dict) -> VElement:
        return VElement(type, props)


class Renderer:
    """Renders canonical trees with a component mapping.

    Args:
        components: Tag name to component; unmapped tags render as themselves.
        runtime: Element factory; defaults to ElementRuntime.
    """

    def __init__(
        self,
        components: Optional[Mapping[str, Callable[..., Any]]] = None,
        runtime: Optional[Runtime] = None,
    ):
        self.components = dict(components or {})
        self.runtime = runtime or ElementRuntime()

    def render(self, node: Any) -> Any:
        """Render a canonical node.

        Args:
            node: A canonical element or primitive.

        Returns:
            A runtime element, a primitive, or None.
        """
        if node is None or isinstance(node, bool):
            return None
        if not isinstance(node, list):
            return node

        tag, props = node[0], node[1]
        children = node[2] if len(node) > 2 else None
        if tag is None:
            type_ = self.runtime.Fragment
        else:
            type_ = self.components.get(tag, tag)

        if children is not None:
            rendered = [self.render(child) for child in children]
        elif isinstance(props.get("children"), list):
            rendered = props["children"]
        else:
            rendered = []

        props = dict(props)
        if len(rendered) > 1:
            props["children"] = rendered
            return self.runtime.jsxs(type_, props)
        if rendered:
            props["children"] = rendered[0]
        return self.runtime.jsx(type_, props)
