"""GitHub-style heading slugs.

Slugs are lowercased, stripped of punctuation, and have spaces replaced by
dashes. A stateful Slugger makes repeated slugs unique by appending ``-1``,
``-2``... in the order they were requested.
"""

from __future__ import annotations

import re

STRIP = re.compile(r"[^\w\- ]")


def slug(value: str, maintain_case: bool = False) -> str:
    """Slug ``value`` without tracking earlier slugs."""
    if not isinstance(value, str):
        return ""
    if not maintain_case:
        value = value.lower()
    return STRIP.sub("", value).replace(" ", "-")


class Slugger:
    """Generates unique slugs; create one per compile."""

    def __init__(self) -> None:
        self.occurrences: dict[str, int] = {}

    def slug(self, value: str, maintain_case: bool = False) -> str:
        result = slug(value, maintain_case)
        original = result
        while result in self.occurrences:
            self.occurrences[original] += 1
            result = f"{original}-{self.occurrences[original]}"
        self.occurrences[result] = 0
        return result

    def reset(self) -> None:
        self.occurrences.clear()
