"""Property naming for the render target.

Hypertext attribute names (``class``, ``for``, ``tabindex``) are renamed to
the element-model convention (``className``, ``htmlFor``, ``tabIndex``) and
inline ``style`` strings are parsed into style dicts with camel-cased keys.
"""

from __future__ import annotations

import re

ATTRIBUTE_NAMES = {
    "class": "className",
    "for": "htmlFor",
    "accept-charset": "acceptCharset",
    "accesskey": "accessKey",
    "allowfullscreen": "allowFullScreen",
    "autocomplete": "autoComplete",
    "autofocus": "autoFocus",
    "autoplay": "autoPlay",
    "cellpadding": "cellPadding",
    "cellspacing": "cellSpacing",
    "charset": "charSet",
    "colspan": "colSpan",
    "contenteditable": "contentEditable",
    "crossorigin": "crossOrigin",
    "datetime": "dateTime",
    "enctype": "encType",
    "formaction": "formAction",
    "frameborder": "frameBorder",
    "hreflang": "hrefLang",
    "http-equiv": "httpEquiv",
    "inputmode": "inputMode",
    "itemprop": "itemProp",
    "maxlength": "maxLength",
    "minlength": "minLength",
    "novalidate": "noValidate",
    "playsinline": "playsInline",
    "readonly": "readOnly",
    "referrerpolicy": "referrerPolicy",
    "rowspan": "rowSpan",
    "spellcheck": "spellCheck",
    "srcdoc": "srcDoc",
    "srclang": "srcLang",
    "srcset": "srcSet",
    "tabindex": "tabIndex",
    "usemap": "useMap",
    "xlink:href": "xlinkHref",
    "xml:lang": "xmlLang",
}

DASHED = re.compile(r"-([a-z])")
COMMENT = re.compile(r"/\*.*?\*/", re.S)


def html_attribute_to_prop(name: str) -> str:
    """Map a hypertext attribute name to its element-model prop name."""
    if name in ATTRIBUTE_NAMES:
        return ATTRIBUTE_NAMES[name]
    if name.startswith(("data-", "aria-")):
        return name
    if "-" in name:
        return DASHED.sub(lambda match: match.group(1).upper(), name)
    return name


def style_property(name: str) -> str:
    """Camel-case a CSS property name.

    Custom properties (``--x``) are kept, ``-ms-`` becomes ``ms``, other
    vendor prefixes are capitalised (``-webkit-x`` -> ``WebkitX``).
    """
    name = name.strip()
    if name.startswith("--"):
        return name
    name = name.lower()
    if name.startswith("-ms-"):
        name = name[1:]
    elif name.startswith("-"):
        name = name[1:2].upper() + name[2:]
    return DASHED.sub(lambda match: match.group(1).upper(), name)


def _declarations(style: str):
    depth = 0
    quote = None
    start = 0
    for index, char in enumerate(style):
        if quote:
            if char == quote:
                quote = None
        elif char in "'\"":
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth = max(depth - 1, 0)
        elif char == ";" and depth == 0:
            yield style[start:index]
            start = index + 1
    yield style[start:]


def style_to_dict(style: str) -> dict:
    """Parse an inline style string into a dict of camel-cased properties.

    Declarations without a colon or without a value are skipped.
    """
    result = {}
    for declaration in _declarations(COMMENT.sub("", style)):
        name, colon, value = declaration.partition(":")
        value = value.strip()
        if not colon or not name.strip() or not value:
            continue
        result[style_property(name)] = value
    return result
