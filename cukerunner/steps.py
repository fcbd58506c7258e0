"""Step definitions, their registry and argument conversion."""

from __future__ import annotations

import abc
import enum
import functools
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

from cukerunner.regex import Regex, RegexSubmatch
from cukerunner.table import Table


class InvokeResultType(enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    PENDING = "pending"


@dataclass(frozen=True)
class InvokeResult:
    """Outcome of running a step."""

    result_type: InvokeResultType
    description: str = ""

    @classmethod
    def success(cls) -> InvokeResult:
        return cls(InvokeResultType.SUCCESS)

    @classmethod
    def failure(cls, description: Any) -> InvokeResult:
        return cls(InvokeResultType.FAILURE, "" if description is None else str(description))

    @classmethod
    def pending(cls, description: str | None = None) -> InvokeResult:
        return cls(InvokeResultType.PENDING, description or "")

    def is_success(self) -> bool:
        return self.result_type is InvokeResultType.SUCCESS

    def is_pending(self) -> bool:
        return self.result_type is InvokeResultType.PENDING


_INTEGER = re.compile(r"\s*([+-]?\d+)")
_REAL = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def from_string(text: str, kind: Any = str) -> Any:
    """Convert a step argument, reading a leading value like a stream would."""
    if kind is str:
        return text
    if kind in (bool, int, float):
        found = (_REAL if kind is float else _INTEGER).match(text)
        if found is not None:
            value = kind(found.group(1)) if kind is not bool else int(found.group(1))
            if kind is not bool:
                return value
            if value in (0, 1):
                return bool(value)
        raise ValueError("Cannot convert parameter")
    try:
        return kind(text)
    except (TypeError, ValueError) as exc:
        raise ValueError("Cannot convert parameter") from exc


def to_source_string(file_path: str, line: int) -> str:
    """Format a definition location as ``<file name>:<line>``."""
    name = re.split(r"[/\\]", file_path)[-1]
    return f"{name}:{line}"


@dataclass
class InvokeArgs:
    """Positional text arguments and an optional table for one invocation."""

    args: list[str] = field(default_factory=list)
    table: Table = field(default_factory=Table)

    def add_arg(self, arg: str) -> None:
        self.args.append(arg)

    def get_invoke_arg(self, index: int, kind: Any = str) -> Any:
        if not 0 <= index < len(self.args):
            raise ValueError("Parameter not found")
        return from_string(self.args[index], kind)


class PendingStep(Exception):
    """Raised from a step body to mark the step as pending."""

    def __init__(self, description: str | None = None) -> None:
        super().__init__(description or "")
        self.description = description or ""


class BasicStep(abc.ABC):
    """Base for step bodies; a fresh instance runs each invocation."""

    _args: InvokeArgs
    _arg_index: int

    def invoke(self, args: InvokeArgs | None) -> InvokeResult:
        self._args = args if args is not None else InvokeArgs()
        self._arg_index = 0
        try:
            self.body()
        except PendingStep as pending:
            return InvokeResult.pending(pending.description)
        except Exception as exc:  # any failure in user code fails the step
            return InvokeResult.failure(str(exc) or type(exc).__name__)
        return InvokeResult.success()

    @abc.abstractmethod
    def body(self) -> None:
        """The step's own code."""

    def pending(self, description: str | None = None) -> None:
        raise PendingStep(description)

    def get_invoke_arg(self, kind: Any = str) -> Any:
        value = self._args.get_invoke_arg(self._arg_index, kind)
        self._arg_index += 1
        return value

    @property
    def table(self) -> Table:
        return self._args.table


_KNOWN_KINDS: dict[str, Any] = {
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "complex": complex,
    "bytes": bytes,
    "bytearray": bytearray,
    "list": list,
    "tuple": tuple,
    "set": set,
    "frozenset": frozenset,
    "dict": dict,
    "Table": Table,
}


def _resolve_kind(annotation: Any) -> Any:
    if isinstance(annotation, str):
        return _KNOWN_KINDS.get(annotation.strip(), str)
    return annotation


def _parameters(func: Callable[..., Any]) -> list[tuple[str, Any]]:
    """Positional parameter names of ``func`` with their declared kinds."""
    target = getattr(func, "__func__", func)
    code = getattr(target, "__code__", None)
    if code is None:
        return []
    names = list(code.co_varnames[: code.co_argcount])
    if target is not func:
        names = names[1:]
    annotations = getattr(target, "__annotations__", {}) or {}
    return [(name, _resolve_kind(annotations.get(name, str))) for name in names]


class _FunctionStep(BasicStep):
    """Runs a plain function, converting arguments by its annotations."""

    def __init__(self, func: Callable[..., Any]) -> None:
        self._func = func

    def body(self) -> None:
        values = [
            self.table if kind is Table else self.get_invoke_arg(kind)
            for _, kind in _parameters(self._func)
        ]
        self._func(*values)


@dataclass
class SingleStepMatch:
    """A step definition that matched, with its captured arguments."""

    step_info: StepInfo | None = None
    submatches: list[RegexSubmatch] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.step_info is not None


@dataclass
class MatchResult:
    """All step definitions matching one step description."""

    result_set: list[SingleStepMatch] = field(default_factory=list)

    def add_match(self, match: SingleStepMatch) -> None:
        self.result_set.append(match)

    def __bool__(self) -> bool:
        return bool(self.result_set)

    def __iter__(self) -> Iterator[SingleStepMatch]:
        return iter(self.result_set)

    def __len__(self) -> int:
        return len(self.result_set)


class StepInfo:
    """A registered step definition: pattern, location and body factory."""

    def __init__(
        self, matcher: str, source: str, step_factory: Callable[[], BasicStep]
    ) -> None:
        self.id: int | None = None
        self.regex = Regex(matcher)
        self.source = source
        self.step_factory = step_factory

    def matches(self, description: str) -> SingleStepMatch:
        found = self.regex.find(description)
        if not found:
            return SingleStepMatch()
        return SingleStepMatch(self, found.submatches)

    def invoke_step(self, args: InvokeArgs | None) -> InvokeResult:
        return self.step_factory().invoke(args)


class StepManager:
    """Registry of step definitions keyed by id."""

    def __init__(self) -> None:
        self._steps: dict[int, StepInfo] = {}
        self._next_id = 1

    def add_step(self, step_info: StepInfo) -> int:
        if step_info.id is None:
            while self._next_id in self._steps:
                self._next_id += 1
            step_info.id = self._next_id
            self._next_id += 1
        self._steps[step_info.id] = step_info
        return step_info.id

    def step_matches(self, description: str) -> MatchResult:
        result = MatchResult()
        for _, info in sorted(self._steps.items()):
            match = info.matches(description)
            if match:
                result.add_match(match)
        return result

    def get_step(self, step_id: int) -> StepInfo | None:
        return self._steps.get(step_id)

    def clear(self) -> None:
        self._steps.clear()

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[StepInfo]:
        return iter(self._steps.values())


default_step_manager = StepManager()


def _source_of(target: Any) -> str:
    if isinstance(target, type):
        target = getattr(target, "body", None)
    target = getattr(target, "__func__", target)
    code = getattr(target, "__code__", None)
    if code is None or not code.co_filename:
        return ""
    return to_source_string(code.co_filename, code.co_firstlineno)


def step(pattern: str, manager: StepManager | None = None) -> Callable[[Any], Any]:
    """Decorator registering a function or a BasicStep subclass for ``pattern``."""
    registry = default_step_manager if manager is None else manager

    def register(target: Any) -> Any:
        if isinstance(target, type) and issubclass(target, BasicStep):
            factory: Callable[[], BasicStep] = target
        elif callable(target):
            factory = functools.partial(_FunctionStep, target)
        else:
            raise TypeError("A step must be a function or a BasicStep subclass")
        target.step_id = registry.add_step(StepInfo(pattern, _source_of(target), factory))
        return target

    return register


def given(pattern: str, manager: StepManager | None = None) -> Callable[[Any], Any]:
    return step(pattern, manager)


def when(pattern: str, manager: StepManager | None = None) -> Callable[[Any], Any]:
    return step(pattern, manager)


def then(pattern: str, manager: StepManager | None = None) -> Callable[[Any], Any]:
    return step(pattern, manager)