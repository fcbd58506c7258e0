"""Scenario and step hooks, and the chain that wraps a step in around hooks."""

from __future__ import annotations

import abc
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Optional

from cukerunner.steps import InvokeArgs, InvokeResult, InvokeResultType, StepInfo

TagFilter = Callable[[Sequence[str]], bool]


@dataclass(frozen=True)
class Scenario:
    """The running scenario and its tags."""

    tags: tuple[str, ...] = ()


class CallableStep(abc.ABC):
    """Something an around-step hook can call to run the wrapped step."""

    @abc.abstractmethod
    def call(self) -> None:
        """Run the wrapped step."""


class Hook:
    """A hook body that runs only when its tag filter accepts the scenario.

    ``tag_filter`` receives the scenario's tags and returns whether the hook
    applies; ``None`` accepts every scenario.
    """

    def __init__(self, body: Callable[[], None], tag_filter: Optional[TagFilter] = None) -> None:
        self.body = body
        self.tag_filter = tag_filter

    def invoke_hook(self, scenario: Optional[Scenario], step: Optional[CallableStep] = None) -> None:
        if self.tags_match(scenario):
            self._run_body()
        else:
            self.skip_hook()

    def _run_body(self) -> None:
        self.body()

    def tags_match(self, scenario: Optional[Scenario]) -> bool:
        """A missing scenario matches every hook."""
        if scenario is None or self.tag_filter is None:
            return True
        return bool(self.tag_filter(scenario.tags))

    def skip_hook(self) -> None:
        """Called instead of the body when the tags do not match."""


class AroundStepHook(Hook):
    """A hook whose body receives the step and decides when to call it."""

    def __init__(
        self, body: Callable[[CallableStep], None], tag_filter: Optional[TagFilter] = None
    ) -> None:
        super().__init__(body, tag_filter)  # type: ignore[arg-type]
        self.step: Optional[CallableStep] = None

    def invoke_hook(self, scenario: Optional[Scenario], step: Optional[CallableStep] = None) -> None:
        self.step = step
        super().invoke_hook(scenario, None)

    def _run_body(self) -> None:
        self.body(self.step)  # type: ignore[call-arg]

    def skip_hook(self) -> None:
        """A skipped around hook still lets the step run."""
        if self.step is not None:
            self.step.call()


class UnconditionalHook(Hook):
    """A hook that always runs, whatever the scenario's tags."""

    def invoke_hook(self, scenario: Optional[Scenario], step: Optional[CallableStep] = None) -> None:
        self.body()


class HookRegistrar:
    """Holds every kind of hook in the order it is executed."""

    def __init__(self) -> None:
        self.before_hooks: list[Hook] = []
        self.around_step_hooks: list[AroundStepHook] = []
        self.after_step_hooks: list[Hook] = []
        self.after_hooks: list[Hook] = []
        self.before_all_hooks: list[Hook] = []
        self.after_all_hooks: list[Hook] = []

    def add_before_hook(self, hook: Hook) -> None:
        self.before_hooks.append(hook)

    def exec_before_hooks(self, scenario: Optional[Scenario]) -> None:
        self._exec_hooks(self.before_hooks, scenario)

    def add_around_step_hook(self, hook: AroundStepHook) -> None:
        self.around_step_hooks.insert(0, hook)

    def exec_step_chain(
        self,
        scenario: Optional[Scenario],
        step_info: Optional[StepInfo],
        args: Optional[InvokeArgs],
    ) -> InvokeResult:
        return StepCallChain(scenario, step_info, args, self.around_step_hooks).exec()

    def add_after_step_hook(self, hook: Hook) -> None:
        self.after_step_hooks.insert(0, hook)

    def exec_after_step_hooks(self, scenario: Optional[Scenario]) -> None:
        self._exec_hooks(self.after_step_hooks, scenario)

    def add_after_hook(self, hook: Hook) -> None:
        self.after_hooks.insert(0, hook)

    def exec_after_hooks(self, scenario: Optional[Scenario]) -> None:
        self._exec_hooks(self.after_hooks, scenario)

    def add_before_all_hook(self, hook: Hook) -> None:
        self.before_all_hooks.append(hook)

    def exec_before_all_hooks(self) -> None:
        self._exec_hooks(self.before_all_hooks, None)

    def add_after_all_hook(self, hook: Hook) -> None:
        self.after_all_hooks.append(hook)

    def exec_after_all_hooks(self) -> None:
        self._exec_hooks(self.after_all_hooks, None)

    @staticmethod
    def _exec_hooks(hooks: Iterable[Hook], scenario: Optional[Scenario]) -> None:
        for hook in list(hooks):
            hook.invoke_hook(scenario, None)


default_hook_registrar = HookRegistrar()


class StepCallChain:
    """Runs the around hooks in turn, each wrapping the rest, then the step."""

    def __init__(
        self,
        scenario: Optional[Scenario],
        step_info: Optional[StepInfo],
        args: Optional[InvokeArgs],
        around_hooks: Iterable[AroundStepHook],
    ) -> None:
        self.scenario = scenario
        self.step_info = step_info
        self.args = args
        self._hooks = iter(list(around_hooks))
        self.result = InvokeResult(InvokeResultType.FAILURE)

    def exec(self) -> InvokeResult:
        self.exec_next()
        return self.result

    def exec_next(self) -> None:
        hook = next(self._hooks, None)
        if hook is None:
            self._exec_step()
        else:
            hook.invoke_hook(self.scenario, CallableStepChain(self))

    def _exec_step(self) -> None:
        if self.step_info is not None:
            self.result = self.step_info.invoke_step(self.args)


class CallableStepChain(CallableStep):
    """Continues a step call chain when called."""

    def __init__(self, chain: StepCallChain) -> None:
        self.chain = chain

    def call(self) -> None:
        self.chain.exec_next()