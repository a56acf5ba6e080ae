"""Sandboxed evaluation of embedded code.

Each compile gets one SandboxEvaluator: a fresh module namespace with a
curated builtins table, where ``import`` resolves only against pseudo-modules
registered up front. Programs run in that namespace one after another, so
module code executed earlier is visible to later expressions, and nothing
leaks between compiles.

Single expressions are evaluated through a side channel: the session exports
an accumulator dict ``__evaluated__``, each expression is assigned to a fresh
slot (``__evaluated__['$0'] = <expr>``) and the value is read back from the
exported bindings.
"""

from __future__ import annotations

import ast
import builtins
import itertools
import logging
import traceback
import types
from typing import Any, Iterable, Mapping, Optional

from mdjast.compiler.synthesizer import (
    create_export_program,
    create_member_assignment_program,
)
from mdjast.errors import EvaluationError

log = logging.getLogger(__name__)

EVALUATED = "__evaluated__"
SESSION_MODULE = "__mdx__"

DEFAULT_BUILTINS = frozenset(
    {
        # Types and constructors
        "bool",
        "bytes",
        "complex",
        "dict",
        "float",
        "frozenset",
        "int",
        "list",
        "object",
        "range",
        "set",
        "slice",
        "str",
        "tuple",
        "type",
        # Functions
        "abs",
        "all",
        "any",
        "ascii",
        "bin",
        "callable",
        "chr",
        "divmod",
        "enumerate",
        "filter",
        "format",
        "getattr",
        "hasattr",
        "hash",
        "hex",
        "isinstance",
        "issubclass",
        "iter",
        "len",
        "map",
        "max",
        "min",
        "next",
        "oct",
        "ord",
        "pow",
        "repr",
        "reversed",
        "round",
        "sorted",
        "sum",
        "zip",
        # Class statements and decorators
        "__build_class__",
        "classmethod",
        "property",
        "staticmethod",
        "super",
        # Exceptions
        "ArithmeticError",
        "AttributeError",
        "Exception",
        "IndexError",
        "KeyError",
        "LookupError",
        "NameError",
        "RuntimeError",
        "StopIteration",
        "TypeError",
        "ValueError",
        "ZeroDivisionError",
    }
)


class AttributeDict(dict):
    """A dict whose keys can also be read as attributes (``data.title``).

    Keys win over dict methods, so ``data.items`` is the ``items`` entry when
    there is one. Dunder names always resolve normally.
    """

    def __getattribute__(self, name: str) -> Any:
        if not name.startswith("__") and dict.__contains__(self, name):
            return dict.__getitem__(self, name)
        return super().__getattribute__(name)

    def __getattr__(self, name: str) -> Any:
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None


def attribute_view(value: Any) -> Any:
    """Copy nested YAML-style data so that mappings allow attribute access."""
    if isinstance(value, dict):
        return AttributeDict({key: attribute_view(item) for key, item in value.items()})
    if isinstance(value, list):
        return [attribute_view(item) for item in value]
    return value


def _empty_dict(start: int) -> ast.Dict:
    return ast.Dict(
        keys=[],
        values=[],
        lineno=1,
        col_offset=start,
        end_lineno=1,
        end_col_offset=start + 2,
    )


class SandboxEvaluator:
    """Isolated execution context for one compile.

    Args:
        modules: Pseudo-modules importable from embedded code, as a mapping
            of module name to its bindings.
        filename: Name reported in tracebacks for embedded code.
        allowed_builtins: Names exposed from ``builtins``; defaults to
            ``DEFAULT_BUILTINS``.
    """

    def __init__(
        self,
        modules: Optional[Mapping[str, Mapping[str, Any]]] = None,
        filename: str = "<mdx>",
        allowed_builtins: Optional[Iterable[str]] = None,
    ):
        self.filename = filename
        self._modules = {name: dict(bindings) for name, bindings in (modules or {}).items()}
        self._ids = itertools.count()

        names = DEFAULT_BUILTINS if allowed_builtins is None else frozenset(allowed_builtins)
        table = {name: getattr(builtins, name) for name in names if hasattr(builtins, name)}
        table["__import__"] = self._import
        self._namespace: dict[str, Any] = {
            "__builtins__": table,
            "__name__": SESSION_MODULE,
        }

        self.evaluate_program(create_export_program(EVALUATED, _empty_dict))

    @property
    def exports(self) -> dict[str, Any]:
        """Snapshot of the namespace's top-level bindings."""
        return {
            name: value
            for name, value in self._namespace.items()
            if name not in ("__builtins__", "__name__")
        }

    def _import(self, name, globals=None, locals=None, fromlist=(), level=0):
        if level != 0 or name not in self._modules:
            raise ImportError(f"No module named {name!r} in this document")
        module = types.ModuleType(name)
        module.__dict__.update(self._modules[name])
        return module

    def evaluate_program(self, program: ast.Module) -> None:
        """Compile and run ``program`` in the session namespace.

        Raises:
            EvaluationError: If the program fails to compile or raises.
        """
        try:
            code = compile(program, self.filename, "exec")
            exec(code, self._namespace)
        except Exception as exc:
            raise EvaluationError(
                f"{type(exc).__name__}: {exc}", line=self._error_line(exc)
            ) from exc

    def evaluate_expression(self, expression: ast.expr) -> Any:
        """Evaluate one expression and return its value."""
        member = f"${next(self._ids)}"
        log.debug("Evaluating expression into %s[%r]", EVALUATED, member)
        self.evaluate_program(
            create_member_assignment_program(EVALUATED, member, expression)
        )
        return self.exports[EVALUATED][member]

    def _error_line(self, exc: BaseException) -> Optional[int]:
        if isinstance(exc, SyntaxError):
            return exc.lineno
        line = None
        for frame in traceback.extract_tb(exc.__traceback__):
            if frame.filename == self.filename:
                line = frame.lineno
        return line
