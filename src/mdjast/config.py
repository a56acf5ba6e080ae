"""Configuration models.

Options are plain pydantic models so they can be built in code or loaded from
an ``mdjast.yaml`` project file::

    markdown:
      typographer: true
    markdown_plugins:
      - mdit_py_plugins.footnote:footnote_plugin
    tree_plugins:
      - my_docs.plugins:add_anchors
    modules:
      site:
        name: Docs
"""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from mdjast.errors import MdjastError

CONFIG_FILENAME = "mdjast.yaml"


class ConfigError(MdjastError):
    """Raised when a project configuration cannot be loaded."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConvertOptions(BaseModel):
    """Options for converting parser tokens into the intermediate tree."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    # token type -> callable(converter, node) returning a list of nodes
    handlers: Dict[str, Callable[..., Any]] = Field(default_factory=dict)
    # keep raw HTML as `raw` nodes instead of disabling it in the grammar
    html: bool = False


class CompileOptions(BaseModel):
    """Options for one compiler instance."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    markdown: Dict[str, Any] = Field(default_factory=dict)
    markdown_plugins: List[Any] = Field(default_factory=list)
    tree_plugins: List[Callable[..., Any]] = Field(default_factory=list)
    conversion: ConvertOptions = Field(default_factory=ConvertOptions)
    modules: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    filename: str = "<mdx>"


class ProjectConfig(BaseModel):
    """The ``mdjast.yaml`` file, with plugins given as import strings."""

    markdown: Dict[str, Any] = Field(default_factory=dict)
    markdown_plugins: List[str] = Field(default_factory=list)
    tree_plugins: List[str] = Field(default_factory=list)
    html: bool = False
    modules: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    def to_options(self) -> CompileOptions:
        return CompileOptions(
            markdown=self.markdown,
            markdown_plugins=[import_object(path) for path in self.markdown_plugins],
            tree_plugins=[import_object(path) for path in self.tree_plugins],
            conversion=ConvertOptions(html=self.html),
            modules=self.modules,
        )


def import_object(path: str) -> Any:
    """Import ``"package.module:attribute"``."""
    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        raise ConfigError(f"Expected 'module:attribute', got {path!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigError(f"Cannot import {module_name!r}: {exc}") from exc
    try:
        return getattr(module, attribute)
    except AttributeError as exc:
        raise ConfigError(f"{module_name!r} has no attribute {attribute!r}") from exc


def load_config(path: Path) -> ProjectConfig:
    """Load a project configuration file."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    return ProjectConfig.model_validate(data or {})


def find_config(start: Optional[Path] = None) -> Optional[Path]:
    """Find mdjast.yaml in ``start`` (default: cwd) or its parents."""
    cwd = (start or Path.cwd()).resolve()
    for parent in [cwd] + list(cwd.parents):
        candidate = parent / CONFIG_FILENAME
        if candidate.exists():
            return candidate
    return None
