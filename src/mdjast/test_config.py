"""Tests for configuration loading."""

import pytest

from mdjast.config import (
    CONFIG_FILENAME,
    CompileOptions,
    ConfigError,
    find_config,
    import_object,
    load_config,
)


def test_defaults():
    options = CompileOptions()
    assert options.modules == {}
    assert options.conversion.html is False
    assert options.filename == "<mdx>"


def test_import_object():
    assert import_object("mdjast.config:load_config") is load_config


@pytest.mark.parametrize("path", ["nocolon", ":attr", "mdjast.missing_module:x", "mdjast.config:nope"])
def test_import_object_errors(path):
    with pytest.raises(ConfigError):
        import_object(path)


def test_load_config(tmp_path):
    """Project files resolve plugins and carry modules into the options."""
    path = tmp_path / CONFIG_FILENAME
    path.write_text(
        "html: true\n"
        "markdown:\n  typographer: true\n"
        "tree_plugins:\n  - mdjast.ast.parser:wrap\n"
        "modules:\n  site:\n    name: Docs\n",
        encoding="utf-8",
    )

    options = load_config(path).to_options()

    assert options.conversion.html is True
    assert options.markdown == {"typographer": True}
    assert options.tree_plugins[0].__name__ == "wrap"
    assert options.modules == {"site": {"name": "Docs"}}


def test_load_empty_config(tmp_path):
    path = tmp_path / CONFIG_FILENAME
    path.write_text("", encoding="utf-8")
    assert load_config(path).to_options().modules == {}


def test_invalid_yaml(tmp_path):
    path = tmp_path / CONFIG_FILENAME
    path.write_text("modules: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_config(path)


def test_find_config_searches_parents(tmp_path):
    (tmp_path / CONFIG_FILENAME).write_text("{}\n", encoding="utf-8")
    nested = tmp_path / "docs" / "guide"
    nested.mkdir(parents=True)

    assert find_config(nested) == (tmp_path / CONFIG_FILENAME).resolve()
