"""mdjast Exceptions

Every failure of a compile is raised as one of these; a compile either
returns a complete tree or raises.
"""

from __future__ import annotations

from typing import Optional


class MdjastError(Exception):
    """Base exception for all mdjast errors."""

    pass


class InputValidationError(MdjastError, ValueError):
    """Raised when a program fragment is requested with invalid inputs."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UnsupportedSyntaxError(MdjastError):
    """Raised when a tag literal contains a shape that cannot be bridged."""

    def __init__(self, kind: str, line: Optional[int] = None):
        self.kind = kind
        self.line = line
        where = f" (line {line})" if line is not None else ""
        super().__init__(f"Cannot handle tag literal node: {kind}{where}")


class EvaluationError(MdjastError):
    """Raised when embedded code fails to compile or run."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.message = message
        self.line = line
        where = f"line {line}: " if line is not None else ""
        super().__init__(f"{where}{message}")


class ParseError(MdjastError):
    """Raised when the document, its frontmatter or embedded code is malformed."""

    def __init__(
        self, message: str, line: Optional[int] = None, column: Optional[int] = None
    ):
        self.message = message
        self.line = line
        self.column = column
        if line is not None and column is not None:
            where = f"{line}:{column}: "
        elif line is not None:
            where = f"line {line}: "
        else:
            where = ""
        super().__init__(f"{where}{message}")
