# cukerunner

`cukerunner` runs Cucumber features against step definitions written in
Python. Cucumber talks to it over the *wire protocol*: one JSON array per
line on a TCP or Unix socket. The package matches step text against
registered patterns, runs the matching step with its captured arguments and
data table, calls scenario hooks, and reports success, failure or pending.

It has no dependencies outside the standard library.

## Modules

- `cukerunner.regex` – `Regex` with `find` (search anywhere; each
  `RegexSubmatch` carries its value and code-point position, an unmatched
  group is an empty submatch with position -1) and `find_all` (group 1 of
  back-to-back matches from the start of the text). Both return a
  `RegexMatch`, which is truthy when something matched.
- `cukerunner.table` – `Table`: `add_column`, `add_row`, `hashes()` (a list
  of dicts, one per row). Adding a column after a row raises `RuntimeError`;
  a row with no columns defined raises `RuntimeError`; a row of the wrong
  length raises `ValueError`.
- `cukerunner.steps` – `StepManager` (registry keyed by integer id),
  `StepInfo`, `BasicStep`, `InvokeArgs`, `InvokeResult` /
  `InvokeResultType`, `PendingStep`, `from_string`, `to_source_string`,
  and the decorators `step`, `given`, `when`, `then`.
- `cukerunner.context` – `ContextManager` keeps one instance per context
  type until `purge_contexts()`; `ScenarioScope(kind, manager)` is a proxy
  to that instance.
- `cukerunner.hooks` – `Scenario`, `Hook`, `AroundStepHook`,
  `UnconditionalHook`, `HookRegistrar`, `StepCallChain`.
- `cukerunner.commands` – `CukeCommands`: scenario lifecycle, step lookup
  and invocation, snippet text.
- `cukerunner.engine` – `CukeEngine` (abstract) and `CukeEngineImpl`, with
  the exceptions `InvokeException`, `InvokeFailureException` and
  `PendingStepException`.
- `cukerunner.wire` – wire commands and responses, `WireMessageCodec`,
  `ProtocolHandler` and `WireProtocolHandler`.
- `cukerunner.server` – `TCPSocketServer` and `UnixSocketServer`.
- `cukerunner.examples` – small subjects for example steps: `Calculator`,
  `DisplayCalculator` with `evaluate`, and `ActiveActors`.

## Defining steps

A decorated function receives one argument per positional parameter. Each
argument is the next regex capture converted by the parameter's annotation
(unannotated means `str`); a parameter annotated `Table` receives the step's
data table instead.

```python
from cukerunner.context import ContextManager, ScenarioScope
from cukerunner.examples import Calculator
from cukerunner.steps import PendingStep, StepManager, given, then, when

steps = StepManager()
contexts = ContextManager()


@given(r"^I have entered (\d+) into the calculator$", steps)
def entered(n: float):
    ScenarioScope(Calculator, contexts).push(n)


@when(r"^I press add", steps)
def press_add():
    calc = ScenarioScope(Calculator, contexts)
    calc.result = calc.add()


@then(r"^the result should be (.*) on the screen$", steps)
def result_is(expected: float):
    assert ScenarioScope(Calculator, contexts).result == expected


@when(r"^I press multiply", steps)
def press_multiply():
    raise PendingStep("not written yet")
```

A `BasicStep` subclass can be decorated instead; its `body()` reads
arguments with `self.get_invoke_arg(kind)`, the table with `self.table`, and
marks itself pending with `self.pending(description)`. A fresh instance runs
for every invocation.

The decorator stores the new id on the target as `step_id`. Without a
`manager` argument the decorators register in a shared default registry.

Argument conversion (`from_string`): `int` and `float` read a leading
number (`"42 cukes"` gives `42`), `bool` accepts `0` or `1`, any other kind
is called with the text. Missing or unconvertible arguments raise
`ValueError`.

Step outcome: returning normally is success; `PendingStep` is pending; any
other exception is a failure whose description is the exception's message,
or its type name if the message is empty. Invoking an unknown id gives a
failure with an empty description.

## Hooks and scenarios

```python
from cukerunner.commands import CukeCommands
from cukerunner.hooks import AroundStepHook, Hook, HookRegistrar

hooks = HookRegistrar()
hooks.add_before_hook(Hook(lambda: print("before"), lambda tags: "@db" in tags))


def timed(step):
    print("start")
    step.call()
    print("end")


hooks.add_around_step_hook(AroundStepHook(timed))

with CukeCommands(steps, hooks, contexts) as commands:
    commands.begin_scenario(["@db"])
    for match in commands.step_matches("I have entered 3 into the calculator"):
        print(commands.invoke(match.step_info.id))
    commands.end_scenario()
```

A tag filter is a callable given the scenario's tags; `None` accepts every
scenario. An around-step hook that is filtered out still lets the step run.
Before and before-all hooks run in the order added; around-step, after-step
and after hooks run most recently added first. Before-all hooks run with the
first scenario; after-all hooks run on `close()` (or leaving the `with`
block), and only if a scenario was started. `end_scenario()` runs the after
hooks and then purges the contexts.

`snippet_text("Given", "I have 3 cukes")` returns
`'GIVEN("^I have 3 cukes$") {\n    pending();\n}\n'`; regex special
characters in the name are backslash-escaped, then quotes and backslashes.

## Serving Cucumber

```python
from cukerunner.engine import CukeEngineImpl
from cukerunner.server import TCPSocketServer
from cukerunner.wire import WireMessageCodec, WireProtocolHandler

with CukeCommands(steps, hooks, contexts) as commands:
    handler = WireProtocolHandler(WireMessageCodec(), CukeEngineImpl(commands))
    with TCPSocketServer(handler) as server:
        server.listen(3902, "127.0.0.1")
        server.accept_once()
```

`listen(port=0, host="0.0.0.0")` binds; port 0 picks a free port, which
`listen_endpoint()` reports. `accept_once()` serves one connection, answering
each line with one line, and returns when the client disconnects.
`UnixSocketServer.listen(path)` does the same on a local socket and removes
the socket file on `close()`.

The codec understands `begin_scenario`, `end_scenario`, `step_matches`,
`invoke` and `snippet_text`. Any other command name is answered with
`["fail"]`; a malformed message makes `decode` raise
`WireMessageCodecException`, which `WireProtocolHandler.handle` also turns
into `["fail"]`. Replies are `["success"]`, `["success", [...matches]]`
(each with `id`, `args` of `val`/`pos`, and `source` and `regexp` when
known), `["success", "<snippet>"]`, `["pending", "<message>"]` and
`["fail", {"message": ..., "exception": ...}]`.

## What it does not do

- There is no command-line program; you start a server from your own code,
  as above.
- Tags are filtered by the callables you pass to hooks; there is no
  tag-expression syntax to parse.
- A server handles a single connection per `accept_once()` call, one at a
  time.