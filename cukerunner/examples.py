"""Small domain objects exercised by the example step definitions."""

from __future__ import annotations

import math
import re
from collections.abc import Callable


def _ieee_divide(dividend: float, divisor: float) -> float:
    if divisor != 0:
        return dividend / divisor
    if dividend == 0 or math.isnan(dividend):
        return math.nan
    sign = math.copysign(1.0, dividend) * math.copysign(1.0, divisor)
    return math.copysign(math.inf, sign)


class Calculator:
    """Accumulates numbers and adds or divides them."""

    def __init__(self) -> None:
        self._values: list[float] = []

    def push(self, value: float) -> None:
        self._values.append(value)

    def add(self) -> float:
        return sum(self._values, 0.0)

    def divide(self) -> float:
        """Divide the first value by each following one; NaN when empty."""
        if not self._values:
            return math.nan
        first, *rest = self._values
        result = first
        for value in rest:
            result = _ieee_divide(result, value)
        return result


_NUMBER = re.compile(r"\d+")


def evaluate(expression: str) -> str:
    """Evaluate additions and subtractions of whole numbers, left to right."""
    result = 0
    operation = "+"
    for found in _NUMBER.finditer(expression):
        value = int(found.group())
        if operation == "+":
            result += value
        elif operation == "-":
            result -= value
        if found.end() < len(expression):
            operation = expression[found.end()]
    return str(result)


class DisplayCalculator:
    """Builds an expression from key presses and reports the display text."""

    def __init__(self, on_display: Callable[[str], None] | None = None) -> None:
        self.expression = ""
        self._on_display = on_display

    def _update(self, expression: str) -> None:
        self.expression = expression
        if self._on_display is not None:
            self._on_display(expression)

    def number(self, digit: int) -> None:
        self._update(self.expression + str(int(digit)))

    def add(self) -> None:
        self._update(self.expression + "+")

    def subtract(self) -> None:
        self._update(self.expression + "-")

    def calculate(self) -> None:
        self._update(evaluate(self.expression))

    def clear(self) -> None:
        self._update("")


class ActiveActors:
    """Actors still working, with their birth years."""

    def __init__(self) -> None:
        self._actors: dict[str, int] = {}

    def add_actor(self, name: str, year: int) -> None:
        self._actors[name] = year

    def retire_actor(self, name: str) -> int:
        """Remove an active actor and return their birth year."""
        if name not in self._actors:
            raise KeyError(name)
        return self._actors.pop(name)

    def oldest_actor(self) -> str:
        """Scan actors in name order against the first actor's year."""
        if not self._actors:
            raise ValueError("No active actors")
        first, *others = sorted(self._actors)
        year = self._actors[first]
        oldest = first
        for name in others:
            if year > self._actors[name]:
                oldest = name
        return oldest