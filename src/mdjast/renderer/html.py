"""HTML output for rendered element trees."""

from __future__ import annotations

import re
from typing import Any, Iterable, Optional

from jinja2 import Environment
from markupsafe import Markup, escape

from mdjast.renderer.renderer import FragmentType, VElement

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)

PROP_ATTRIBUTES = {"className": "class", "htmlFor": "for", "httpEquiv": "http-equiv"}
SKIPPED_PROPS = frozenset({"children", "key", "ref"})
UPPER = re.compile(r"[A-Z]")

PAGE_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
</head>
<body>
{% if headings %}
<nav>
<ul>
{% for heading in headings %}
<li class="toc-{{ heading.depth }}"><a href="#{{ heading.id }}">{{ heading.value }}</a></li>
{% endfor %}
</ul>
</nav>
{% endif %}
<main>
{{ body }}
</main>
</body>
</html>
"""

_environment = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)


def css_property(name: str) -> str:
    if name.startswith("--"):
        return name
    kebab = UPPER.sub(lambda match: "-" + match.group(0).lower(), name)
    if name.startswith("ms"):
        kebab = "-" + kebab
    return kebab


def style_to_css(style: Any) -> str:
    if not isinstance(style, dict):
        return str(style)
    return ";".join(f"{css_property(name)}:{value}" for name, value in style.items())


def render_attributes(props: dict) -> str:
    parts = []
    for name, value in props.items():
        if name in SKIPPED_PROPS or value is None or value is False or callable(value):
            continue
        attribute = PROP_ATTRIBUTES.get(name, name)
        if value is True:
            parts.append(f" {attribute}")
            continue
        if name == "style":
            value = style_to_css(value)
        elif isinstance(value, (list, tuple)):
            value = " ".join(str(item) for item in value)
        parts.append(f' {attribute}="{escape(value)}"')
    return "".join(parts)


def _children(children: Iterable[Any]) -> Markup:
    return Markup("").join(render_to_html(child) for child in children)


def render_to_html(node: Any) -> Markup:
    """Serialize a rendered node to HTML.

    Component types are called with the element's props and their result is
    rendered in turn. Strings are escaped unless they are already Markup.
    """
    if node is None or isinstance(node, bool):
        return Markup("")
    if isinstance(node, (list, tuple)):
        return _children(node)
    if not isinstance(node, VElement):
        return escape(node)

    if isinstance(node.type, FragmentType):
        return _children(node.children)
    if callable(node.type):
        return render_to_html(node.type(**node.props))

    tag = node.type
    attributes = render_attributes(dict(node.props))
    if tag in VOID_ELEMENTS:
        return Markup(f"<{tag}{attributes}>")
    return Markup(f"<{tag}{attributes}>") + _children(node.children) + Markup(f"</{tag}>")


def render_page(body: Markup, title: Optional[str] = None, headings: Iterable[Any] = ()) -> str:
    """Wrap rendered HTML in a standalone page with a heading index."""
    template = _environment.from_string(PAGE_TEMPLATE)
    return template.render(title=title or "", headings=list(headings), body=Markup(body))
