from __future__ import annotations

from collections import defaultdict
from types import SimpleNamespace

import pytest

from cukerunner.commands import CukeCommands
from cukerunner.context import ContextManager, ScenarioScope
from cukerunner.hooks import AroundStepHook, Hook, HookRegistrar, UnconditionalHook
from cukerunner.steps import InvokeArgs, StepManager, then

NO_INVOKE_ARGS = InvokeArgs()


def _sorted(text: str) -> str:
    return "".join(sorted(text))


class _Holder:
    def __init__(self) -> None:
        self.value = ""


@pytest.fixture
def world():
    steps = StepManager()
    hooks = HookRegistrar()
    contexts = ContextManager()
    marks: defaultdict[str, str] = defaultdict(str)

    def mark(*keys_and_value):
        *keys, value = keys_and_value

        def body():
            for key in keys:
                marks[key] += value

        return body

    for value in "ABC":
        hooks.add_before_all_hook(UnconditionalHook(mark("before_all", value)))
    for value in "DEF":
        hooks.add_before_hook(Hook(mark("before", value)))

    def around(before, after):
        def body(step):
            marks["before_around"] += before
            marks["global"] += before
            step.call()
            marks["global"] += after
            marks["after_around"] += after

        return body

    for before, after in (("G", "i"), ("H", "h"), ("I", "g")):
        hooks.add_around_step_hook(AroundStepHook(around(before, after)))
    for value in "JKL":
        hooks.add_after_step_hook(Hook(mark("after_step", "global", value)))
    for value in "MNO":
        hooks.add_after_hook(Hook(mark("after", value)))
    for value in "PQR":
        hooks.add_after_all_hook(UnconditionalHook(mark("after_all", value)))

    def set_context():
        ScenarioScope(_Holder, contexts).value = "X"

    def read_context():
        marks["context"] = ScenarioScope(_Holder, contexts).value

    hooks.add_before_hook(Hook(set_context))
    hooks.add_after_hook(Hook(read_context))

    @then("MATCHER", steps)
    def empty():
        pass

    commands = CukeCommands(steps, hooks, contexts)
    return SimpleNamespace(
        commands=commands, marks=marks, step_id=empty.step_id,
        steps=steps, hooks=hooks, contexts=contexts,
    )


def _invoke(world):
    return world.commands.invoke(world.step_id, NO_INVOKE_ARGS)


def test_before_hooks_are_invoked(world):
    assert world.marks["before"] == ""
    world.commands.begin_scenario()
    assert _sorted(world.marks["before"]) == "DEF"
    _invoke(world)
    world.commands.end_scenario()
    assert _sorted(world.marks["before"]) == "DEF"


def test_around_step_hooks_are_invoked_nested(world):
    world.commands.begin_scenario()
    assert world.marks["before_around"] == ""
    _invoke(world)
    assert _sorted(world.marks["before_around"]) == "GHI"
    assert _sorted(world.marks["after_around"]) == "ghi"
    world.commands.end_scenario()
    assert _sorted(world.marks["before_around"]) == "GHI"
    assert _sorted(world.marks["after_around"]) == "ghi"


def test_after_step_hooks_are_invoked(world):
    world.commands.begin_scenario()
    assert world.marks["after_step"] == ""
    _invoke(world)
    assert _sorted(world.marks["after_step"]) == "JKL"
    world.commands.end_scenario()
    assert _sorted(world.marks["after_step"]) == "JKL"


def test_after_hooks_are_invoked_at_scenario_end(world):
    world.commands.begin_scenario()
    _invoke(world)
    _invoke(world)
    assert world.marks["after"] == ""
    world.commands.end_scenario()
    assert _sorted(world.marks["after"]) == "MNO"


def test_context_is_accessible_in_after_hooks(world):
    world.commands.begin_scenario()
    world.commands.end_scenario()
    assert world.marks["context"] == "X"
    assert len(world.contexts) == 0


def test_after_step_hooks_run_after_around_step_hooks(world):
    world.commands.begin_scenario()
    assert world.marks["global"] == ""
    _invoke(world)
    marks = world.marks
    assert marks["global"] == marks["before_around"] + marks["after_around"] + marks["after_step"]
    world.commands.end_scenario()


def test_before_all_hooks_run_during_first_scenario_only(world):
    assert world.marks["after_all"] == ""
    world.commands.begin_scenario()
    assert _sorted(world.marks["before_all"]) == "ABC"
    world.marks.clear()
    _invoke(world)
    world.commands.end_scenario()
    assert world.marks["before_all"] == ""
    world.commands.begin_scenario()
    _invoke(world)
    world.commands.end_scenario()
    assert world.marks["before_all"] == ""


def test_all_hooks_not_invoked_if_no_scenarios_run(world):
    commands = CukeCommands(world.steps, world.hooks, world.contexts)
    assert world.marks["after_all"] == ""
    commands.close()
    assert world.marks["before_all"] == ""
    assert world.marks["after_all"] == ""


def test_after_all_hooks_invoked_once_on_close(world):
    commands = CukeCommands(world.steps, world.hooks, world.contexts)
    commands.begin_scenario()
    commands.end_scenario()
    assert world.marks["after_all"] == ""
    commands.begin_scenario()
    commands.end_scenario()
    assert world.marks["after_all"] == ""
    commands.close()
    assert _sorted(world.marks["after_all"]) == "PQR"
    commands.close()
    assert _sorted(world.marks["after_all"]) == "PQR"


def test_context_manager_protocol_runs_after_all(world):
    with CukeCommands(world.steps, world.hooks, world.contexts) as commands:
        commands.begin_scenario()
        commands.end_scenario()
        assert world.marks["after_all"] == ""
    assert _sorted(world.marks["after_all"]) == "PQR"


SUCCEED_MATCHER = "Succeeding step"
FAIL_MATCHER = "Failing step"
PENDING_MATCHER_1 = "Pending step without description"
PENDING_MATCHER_2 = "Pending step with description"
PENDING_DESCRIPTION = "Describe me!"


@pytest.fixture
def driver():
    steps = StepManager()
    contexts = ContextManager()
    created: list[int] = []

    class SomeContext:
        def __init__(self) -> None:
            created.append(1)

    @then(SUCCEED_MATCHER, steps)
    def succeed():
        ScenarioScope(SomeContext, contexts)

    @then(FAIL_MATCHER, steps)
    def fail():
        ScenarioScope(SomeContext, contexts)
        raise RuntimeError("Failure description")

    @then(PENDING_MATCHER_1, steps)
    def pending_plain():
        from cukerunner.steps import PendingStep

        raise PendingStep()

    @then(PENDING_MATCHER_2, steps)
    def pending_described():
        from cukerunner.steps import PendingStep

        raise PendingStep(PENDING_DESCRIPTION)

    ids = {str(info.regex): info.id for info in steps}
    commands = CukeCommands(steps, HookRegistrar(), contexts)
    return SimpleNamespace(commands=commands, ids=ids, created=created, contexts=contexts)


def test_driver_invocation_results(driver):
    commands = driver.commands
    commands.begin_scenario()

    result = commands.invoke(driver.ids[SUCCEED_MATCHER], NO_INVOKE_ARGS)
    assert result.is_success()

    result = commands.invoke(driver.ids[FAIL_MATCHER], NO_INVOKE_ARGS)
    assert not (result.is_success() or result.is_pending())
    assert result.description != ""
    assert result.description == "Failure description"

    result = commands.invoke(driver.ids[PENDING_MATCHER_1], NO_INVOKE_ARGS)
    assert result.is_pending()
    assert result.description == ""

    result = commands.invoke(driver.ids[PENDING_MATCHER_2], NO_INVOKE_ARGS)
    assert result.is_pending()
    assert result.description == PENDING_DESCRIPTION

    result = commands.invoke(42, NO_INVOKE_ARGS)
    assert not result.is_success()

    commands.end_scenario()


@pytest.mark.parametrize("matcher", [SUCCEED_MATCHER, FAIL_MATCHER])
def test_driver_contexts_created_and_purged(driver, matcher):
    commands = driver.commands
    commands.begin_scenario()
    commands.invoke(driver.ids[matcher], NO_INVOKE_ARGS)
    assert len(driver.created) == 1
    assert len(driver.contexts) == 1
    commands.end_scenario()
    assert len(driver.created) == 1
    assert len(driver.contexts) == 0


def test_driver_failure_description_is_reset_each_run(driver):
    commands = driver.commands
    commands.begin_scenario()
    first = commands.invoke(driver.ids[FAIL_MATCHER], NO_INVOKE_ARGS).description
    assert first != ""
    second = commands.invoke(driver.ids[FAIL_MATCHER], NO_INVOKE_ARGS).description
    assert second == first


def test_snippet_text_escapes_regex_and_quotes():
    commands = CukeCommands(StepManager(), HookRegistrar(), ContextManager())
    assert commands.snippet_text("Given", "a step (x)") == (
        'GIVEN("^a step \\\\(x\\\\)$") {\n    pending();\n}\n'
    )


def test_escape_c_string_escapes_quotes_and_backslashes():
    commands = CukeCommands(StepManager(), HookRegistrar(), ContextManager())
    assert commands.escape_c_string('say "hi" \\') == 'say \\"hi\\" \\\\'


@pytest.mark.parametrize("char", list("|()[]{}^$*+?.\\"))
def test_escape_regex_escapes_special_characters(char):
    commands = CukeCommands(StepManager(), HookRegistrar(), ContextManager())
    assert commands.escape_regex(char) == "\\" + char


def test_step_matches_uses_step_manager():
    steps = StepManager()

    @then(r"^I have (\d+) cukes$", steps)
    def have(count: int):
        pass

    commands = CukeCommands(steps, HookRegistrar(), ContextManager())
    result = commands.step_matches("I have 3 cukes")
    assert [m.step_info.id for m in result] == [have.step_id]
    assert not commands.step_matches("nothing here")