"""mdjast CLI

Usage:
    mdjast compile doc.mdx            # print tree, frontmatter and headings as JSON
    mdjast compile doc.mdx --pretty   # indented JSON
    mdjast render doc.mdx             # print HTML
    mdjast render doc.mdx --page      # standalone HTML page with a heading index
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import msgspec
import typer

from mdjast.compiler import Compiler, CompileResult
from mdjast.config import CompileOptions, find_config, load_config
from mdjast.errors import MdjastError
from mdjast.log import setup_logging
from mdjast.renderer import Renderer, render_page, render_to_html

app = typer.Typer(help="Compile MDX-style documents into canonical element trees.")


def _options(config: Optional[Path]) -> CompileOptions:
    path = config or find_config()
    if path is None:
        return CompileOptions()
    return load_config(path).to_options()


def _compile(path: Path, config: Optional[Path], verbose: bool) -> CompileResult:
    setup_logging(verbose)
    if not path.exists():
        typer.secho(f"Error: File not found: {path}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)
    try:
        compiler = Compiler(_options(config))
        return compiler.compile(path.read_text(encoding="utf-8"), path=str(path))
    except MdjastError as exc:
        typer.secho(f"Error: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)


@app.command("compile")
def compile_command(
    path: Path = typer.Argument(..., help="Document to compile."),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Path to mdjast.yaml."),
    pretty: bool = typer.Option(False, "--pretty", help="Indent the JSON output."),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show progress."),
) -> None:
    """Compile a document and print its tree as JSON."""
    result = _compile(path, config, verbose)
    payload = {
        "tree": result.tree,
        "frontmatter": result.frontmatter,
        "headings": result.headings,
    }
    data = msgspec.json.encode(payload, enc_hook=str)
    if pretty:
        data = msgspec.json.format(data, indent=2)
    typer.echo(data.decode("utf-8"))


@app.command("render")
def render_command(
    path: Path = typer.Argument(..., help="Document to render."),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Path to mdjast.yaml."),
    page: bool = typer.Option(False, "--page", help="Wrap the output in an HTML page."),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show progress."),
) -> None:
    """Compile a document and print it as HTML."""
    result = _compile(path, config, verbose)
    body = render_to_html(Renderer().render(result.tree))
    if page:
        title = None
        if isinstance(result.frontmatter, dict):
            title = result.frontmatter.get("title")
        typer.echo(render_page(body, title=title, headings=result.headings))
    else:
        typer.echo(str(body))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
