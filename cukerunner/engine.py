"""Engine interface used by the wire protocol, and its default implementation."""

from __future__ import annotations

import abc
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Optional

from cukerunner.commands import CukeCommands
from cukerunner.steps import InvokeArgs, InvokeResultType


class InvokeException(Exception):
    """A step could not be invoked."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvokeFailureException(InvokeException):
    """A step ran and failed."""

    def __init__(self, message: str, exception_type: str = "") -> None:
        super().__init__(message)
        self.exception_type = exception_type


class PendingStepException(InvokeException):
    """A step ran and reported itself pending."""


@dataclass
class StepMatchArg:
    value: str
    position: int


@dataclass
class StepMatch:
    id: str
    source: str = ""
    regexp: str = ""
    args: list[StepMatchArg] = field(default_factory=list)


class CukeEngine(abc.ABC):
    """Operations a remote runner performs on step definitions."""

    @abc.abstractmethod
    def step_matches(self, name: str) -> list[StepMatch]:
        """Step definitions matching a step name."""

    @abc.abstractmethod
    def begin_scenario(self, tags: Iterable[str]) -> None:
        """Start a scenario with the given tags."""

    @abc.abstractmethod
    def invoke_step(
        self, step_id: str, args: Sequence[str], table_arg: Sequence[Sequence[str]]
    ) -> None:
        """Run a step; raise an InvokeException unless it succeeds."""

    @abc.abstractmethod
    def end_scenario(self, tags: Iterable[str]) -> None:
        """Finish the current scenario."""

    @abc.abstractmethod
    def snippet_text(self, keyword: str, name: str, multiline_arg_class: str) -> str:
        """Suggested definition for an undefined step."""


_STEP_ID = re.compile(r"\s*\+?(\d+)")


def _parse_step_id(text: str) -> int:
    found = _STEP_ID.match(text)
    return int(found.group(1)) if found else 0


class CukeEngineImpl(CukeEngine):
    """Engine backed by a :class:`CukeCommands` instance."""

    def __init__(self, commands: Optional[CukeCommands] = None) -> None:
        self.commands = CukeCommands() if commands is None else commands

    def step_matches(self, name: str) -> list[StepMatch]:
        return [
            StepMatch(
                id=str(match.step_info.id),
                source=match.step_info.source,
                regexp=str(match.step_info.regex),
                args=[StepMatchArg(sub.value, sub.position) for sub in match.submatches],
            )
            for match in self.commands.step_matches(name)
            if match.step_info is not None
        ]

    def begin_scenario(self, tags: Iterable[str] = ()) -> None:
        self.commands.begin_scenario(tags)

    def invoke_step(
        self, step_id: str, args: Sequence[str] = (), table_arg: Sequence[Sequence[str]] = ()
    ) -> None:
        try:
            invoke_args = self._build_args(args, table_arg)
        except Exception as exc:
            raise InvokeException("Unable to decode arguments") from exc

        try:
            result = self.commands.invoke(_parse_step_id(step_id), invoke_args)
        except Exception as exc:
            raise InvokeException("Uncatched exception") from exc

        if result.result_type is InvokeResultType.FAILURE:
            raise InvokeFailureException(result.description, "")
        if result.result_type is InvokeResultType.PENDING:
            raise PendingStepException(result.description)

    @staticmethod
    def _build_args(args: Sequence[str], table_arg: Sequence[Sequence[str]]) -> InvokeArgs:
        invoke_args = InvokeArgs()
        for arg in args:
            invoke_args.add_arg(str(arg))
        if table_arg and table_arg[0]:
            header, *rows = table_arg
            for column in header:
                invoke_args.table.add_column(str(column))
            for row in rows:
                invoke_args.table.add_row([str(cell) for cell in row])
        return invoke_args

    def end_scenario(self, tags: Iterable[str] = ()) -> None:
        self.commands.end_scenario()

    def snippet_text(self, keyword: str, name: str, multiline_arg_class: str = "") -> str:
        return self.commands.snippet_text(keyword, name)