"""mdjast compiler - documents to canonical trees."""

from mdjast.compiler.compiler import Compiler, compile_document, create_parser
from mdjast.compiler.spec import CompileResult, Heading, create_jast_element, dumps_jast

__all__ = [
    "Compiler",
    "CompileResult",
    "Heading",
    "compile_document",
    "create_jast_element",
    "create_parser",
    "dumps_jast",
]
