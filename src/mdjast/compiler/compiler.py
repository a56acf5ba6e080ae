"""Compiler - raw document text to canonical tree."""

from __future__ import annotations

import logging
from typing import Any, Optional

from mdjast.ast.matter import extract_frontmatter
from mdjast.ast.parser import DocumentParser
from mdjast.ast.spec import SourceFile
from mdjast.compiler.builder import BuildSession, TreeBuilder
from mdjast.compiler.evaluator import SandboxEvaluator, attribute_view
from mdjast.compiler.slugger import Slugger
from mdjast.compiler.spec import CompileResult, Heading
from mdjast.compiler.synthesizer import create_import_program
from mdjast.config import CompileOptions

log = logging.getLogger(__name__)

FRONTMATTER_MODULE = "__mdx:define:mdx__"
FRONTMATTER_BINDING = "frontmatter"


class Compiler:
    """Compiles documents into canonical trees.

    The Markdown grammar is built once per Compiler and shared by all
    compiles; everything that holds document state (evaluator, slugger,
    source file) is created per call.

    Args:
        options: Compile options; keyword arguments are accepted as a
            shorthand for the same fields.
    """

    def __init__(self, options: Optional[CompileOptions] = None, **kwargs: Any):
        if options is None:
            options = CompileOptions(**kwargs)
        elif kwargs:
            options = options.model_copy(update=kwargs)
        self.options = options
        self.parser = DocumentParser(
            markdown_plugins=options.markdown_plugins,
            tree_plugins=options.tree_plugins,
            options=options.conversion,
            markdown=options.markdown,
        )

    def compile(self, source: str, path: Optional[str] = None) -> CompileResult:
        """Compile one document.

        Args:
            source: Raw document text, frontmatter included.
            path: Name used in diagnostics and tracebacks.

        Returns:
            The canonical tree with frontmatter and headings.

        Raises:
            MdjastError: If the document cannot be parsed, or embedded code
                fails. No partial tree is returned.
        """
        matter = extract_frontmatter(source)
        file = SourceFile(
            matter.content,
            path=path,
            data={"frontmatter": matter.data, "line_offset": matter.line_offset},
        )

        modules = dict(self.options.modules)
        modules[FRONTMATTER_MODULE] = {FRONTMATTER_BINDING: attribute_view(matter.data)}
        evaluator = SandboxEvaluator(modules, filename=path or self.options.filename)
        evaluator.evaluate_program(
            create_import_program(FRONTMATTER_MODULE, named_imports=[FRONTMATTER_BINDING])
        )

        tree = self.parser.parse(file)
        headings = self._headings(file.data.get("headings", []))
        file.data["headings"] = headings

        builder = TreeBuilder(BuildSession(evaluator=evaluator, file=file, headings=headings))
        jast = builder.build(tree)
        log.info("Compiled %s (%d headings)", path or "<input>", len(headings))
        return CompileResult(file=file, tree=jast, frontmatter=matter.data, headings=headings)

    @staticmethod
    def _headings(collected: list[dict]) -> list[Heading]:
        slugger = Slugger()
        return [
            Heading(depth=item["depth"], value=item["value"], id=slugger.slug(item["value"]))
            for item in collected
        ]


def create_parser(options: Optional[CompileOptions] = None, **kwargs: Any):
    """Return a ``parse(source, path=None)`` function bound to one Compiler."""
    return Compiler(options, **kwargs).compile


def compile_document(source: str, **kwargs: Any) -> CompileResult:
    """Compile ``source`` with a one-off Compiler."""
    return Compiler(**kwargs).compile(source)
