"""Tests for the mdjast CLI."""

import json

from typer.testing import CliRunner

from mdjast.cli import app

runner = CliRunner()


def write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_compile_prints_json(tmp_path):
    doc = write(tmp_path, "doc.mdx", "---\ntitle: Hi\n---\n# {frontmatter.title}\n\nBody\n")
    config = write(tmp_path, "mdjast.yaml", "{}\n")

    result = runner.invoke(app, ["compile", str(doc), "--config", str(config)])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["frontmatter"] == {"title": "Hi"}
    assert payload["tree"][2][-1] == ["p", {}, ["Body"]]
    assert payload["headings"][0]["depth"] == 1


def test_compile_with_project_modules(tmp_path):
    """Modules declared in mdjast.yaml are importable from documents."""
    config = write(tmp_path, "mdjast.yaml", "modules:\n  site:\n    name: Docs\n")
    doc = write(tmp_path, "doc.mdx", "from site import name\n\n{name}\n")

    result = runner.invoke(app, ["compile", str(doc), "-c", str(config)])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["tree"] == [None, {}, ["\n", "Docs"]]


def test_render_html(tmp_path):
    doc = write(tmp_path, "doc.mdx", "# Hi\n\nA <b>bold</b> move.\n")
    config = write(tmp_path, "mdjast.yaml", "{}\n")

    result = runner.invoke(app, ["render", str(doc), "-c", str(config)])

    assert result.exit_code == 0, result.output
    assert '<h1 id="hi">Hi</h1>' in result.stdout
    assert "<p>A <b>bold</b> move.</p>" in result.stdout


def test_render_page_uses_title(tmp_path):
    doc = write(tmp_path, "doc.mdx", "---\ntitle: Guide\n---\n# Start\n")
    config = write(tmp_path, "mdjast.yaml", "{}\n")

    result = runner.invoke(app, ["render", str(doc), "-c", str(config), "--page"])

    assert result.exit_code == 0, result.output
    assert "<title>Guide</title>" in result.stdout
    assert '<a href="#start">Start</a>' in result.stdout


def test_missing_file(tmp_path):
    result = runner.invoke(app, ["compile", str(tmp_path / "nope.mdx")])

    assert result.exit_code == 1
    assert "File not found" in result.output


def test_evaluation_error_exits(tmp_path):
    doc = write(tmp_path, "doc.mdx", "{missing}\n")
    config = write(tmp_path, "mdjast.yaml", "{}\n")

    result = runner.invoke(app, ["compile", str(doc), "-c", str(config)])

    assert result.exit_code == 1
    assert "NameError" in result.output


def test_invalid_config(tmp_path):
    doc = write(tmp_path, "doc.mdx", "text\n")
    config = write(tmp_path, "mdjast.yaml", "tree_plugins: [nowhere]\n")

    result = runner.invoke(app, ["compile", str(doc), "-c", str(config)])

    assert result.exit_code == 1
    assert "module:attribute" in result.output
