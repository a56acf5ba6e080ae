"""mdjast renderer - canonical trees to elements and HTML."""

from mdjast.renderer.html import render_page, render_to_html
from mdjast.renderer.renderer import ElementRuntime, Fragment, Renderer, VElement

__all__ = [
    "ElementRuntime",
    "Fragment",
    "Renderer",
    "VElement",
    "render_page",
    "render_to_html",
]
