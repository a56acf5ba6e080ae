"""mdjast - compile MDX-style documents into compact element trees.

Documents mix Markdown, tag literals and ``{expression}`` fragments of Python.
Embedded code runs at compile time in an isolated namespace per document and
the result is a serializable tree of ``[tag, props, children]`` lists.
"""

from mdjast.compiler import (
    Compiler,
    CompileResult,
    Heading,
    compile_document,
    create_jast_element,
    create_parser,
    dumps_jast,
)
from mdjast.config import CompileOptions, ConvertOptions
from mdjast.errors import (
    EvaluationError,
    InputValidationError,
    MdjastError,
    ParseError,
    UnsupportedSyntaxError,
)
from mdjast.renderer import Renderer, render_to_html

__version__ = "0.1.0"

__all__ = [
    "Compiler",
    "CompileOptions",
    "CompileResult",
    "ConvertOptions",
    "EvaluationError",
    "Heading",
    "InputValidationError",
    "MdjastError",
    "ParseError",
    "Renderer",
    "UnsupportedSyntaxError",
    "compile_document",
    "create_jast_element",
    "create_parser",
    "dumps_jast",
    "render_to_html",
]
