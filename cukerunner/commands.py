"""Scenario lifecycle, step lookup, invocation and snippet generation."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any, Optional

from cukerunner.context import ContextManager, default_context_manager
from cukerunner.hooks import HookRegistrar, Scenario, default_hook_registrar
from cukerunner.steps import InvokeArgs, InvokeResult, MatchResult, StepManager, default_step_manager

_REGEX_SPECIAL = re.compile(r"[|()\[\]{}^$*+?.\\]")
_C_STRING_SPECIAL = re.compile(r'["\\]')


def _escape(pattern: re.Pattern[str], text: str) -> str:
    return pattern.sub(lambda found: "\\" + found.group(), text)


class CukeCommands:
    """Runs scenarios against registered steps, hooks and contexts.

    Before-all hooks run with the first scenario; after-all hooks run on
    :meth:`close` if any scenario was started.
    """

    def __init__(
        self,
        steps: Optional[StepManager] = None,
        hooks: Optional[HookRegistrar] = None,
        contexts: Optional[ContextManager] = None,
    ) -> None:
        self.steps = default_step_manager if steps is None else steps
        self.hooks = default_hook_registrar if hooks is None else hooks
        self.contexts = default_context_manager if contexts is None else contexts
        self.current_scenario: Optional[Scenario] = None
        self._has_started = False

    def begin_scenario(self, tags: Iterable[str] = ()) -> None:
        if not self._has_started:
            self._has_started = True
            self.hooks.exec_before_all_hooks()
        self.current_scenario = Scenario(tuple(tags))
        self.hooks.exec_before_hooks(self.current_scenario)

    def end_scenario(self) -> None:
        self.hooks.exec_after_hooks(self.current_scenario)
        self.contexts.purge_contexts()
        self.current_scenario = None

    def close(self) -> None:
        """Run the after-all hooks once, if a scenario ever began."""
        if self._has_started:
            self._has_started = False
            self.hooks.exec_after_all_hooks()

    def __enter__(self) -> CukeCommands:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def snippet_text(self, keyword: str, name: str) -> str:
        pattern = self.escape_c_string("^" + self.escape_regex(name) + "$")
        return f'{keyword.upper()}("{pattern}") {{\n    pending();\n}}\n'

    def escape_regex(self, text: str) -> str:
        return _escape(_REGEX_SPECIAL, text)

    def escape_c_string(self, text: str) -> str:
        return _escape(_C_STRING_SPECIAL, text)

    def step_matches(self, description: str) -> MatchResult:
        return self.steps.step_matches(description)

    def invoke(self, step_id: int, args: Optional[InvokeArgs] = None) -> InvokeResult:
        step_info = self.steps.get_step(step_id)
        result = self.hooks.exec_step_chain(self.current_scenario, step_info, args)
        self.hooks.exec_after_step_hooks(self.current_scenario)
        return result