"""Regular expressions that report capture groups with code-point positions."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field


@dataclass(frozen=True)
class RegexSubmatch:
    """One captured group: its text and its offset in code points (-1 if unknown)."""

    value: str = ""
    position: int = -1


@dataclass
class RegexMatch:
    """Outcome of a search: whether it matched and the captured groups."""

    matched: bool
    submatches: list[RegexSubmatch] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.matched


class Regex:
    """A compiled pattern that remembers its source text."""

    def __init__(self, pattern: str) -> None:
        self._pattern = pattern
        self._compiled = re.compile(pattern)

    def __str__(self) -> str:
        return self._pattern

    def __repr__(self) -> str:
        return f"Regex({self._pattern!r})"

    def find(self, expression: str) -> RegexMatch:
        """Search anywhere in ``expression``; groups carry their positions."""
        found = self._compiled.search(expression)
        if found is None:
            return RegexMatch(False)
        submatches = [
            RegexSubmatch()
            if found.start(group) == -1
            else RegexSubmatch(found.group(group), found.start(group))
            for group in range(1, self._compiled.groups + 1)
        ]
        return RegexMatch(True, submatches)

    def find_all(self, expression: str) -> RegexMatch:
        """Collect group 1 of back-to-back matches starting at the beginning."""
        submatches = [RegexSubmatch(value) for value in self._continuous_values(expression)]
        return RegexMatch(bool(submatches), submatches)

    def _continuous_values(self, expression: str) -> Iterator[str]:
        position = 0
        while position <= len(expression):
            found = self._compiled.match(expression, position)
            if found is None:
                return
            if self._compiled.groups >= 1 and found.group(1) is not None:
                yield found.group(1)
            else:
                yield ""
            position = found.end() if found.end() > position else position + 1