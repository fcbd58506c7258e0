"""Wire protocol: JSON messages decoded into commands run on an engine."""

from __future__ import annotations

import abc
import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from cukerunner.engine import (
    CukeEngine,
    InvokeException,
    InvokeFailureException,
    PendingStepException,
    StepMatch,
)


class WireResponse:
    """Base of every response sent back over the wire."""


@dataclass(frozen=True)
class SuccessResponse(WireResponse):
    pass


@dataclass(frozen=True)
class FailureResponse(WireResponse):
    message: str = ""
    exception_type: str = ""


@dataclass(frozen=True)
class PendingResponse(WireResponse):
    message: str = ""


@dataclass(frozen=True)
class StepMatchesResponse(WireResponse):
    matching_steps: tuple[StepMatch, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SnippetTextResponse(WireResponse):
    step_snippet: str


class WireCommand(abc.ABC):
    """A decoded request that can be run on an engine."""

    @abc.abstractmethod
    def run(self, engine: CukeEngine) -> WireResponse:
        """Run the command and return the response to send."""


@dataclass(frozen=True)
class BeginScenarioCommand(WireCommand):
    tags: tuple[str, ...] = ()

    def run(self, engine: CukeEngine) -> WireResponse:
        engine.begin_scenario(self.tags)
        return SuccessResponse()


@dataclass(frozen=True)
class EndScenarioCommand(WireCommand):
    tags: tuple[str, ...] = ()

    def run(self, engine: CukeEngine) -> WireResponse:
        engine.end_scenario(self.tags)
        return SuccessResponse()


@dataclass(frozen=True)
class StepMatchesCommand(WireCommand):
    step_name: str

    def run(self, engine: CukeEngine) -> WireResponse:
        return StepMatchesResponse(tuple(engine.step_matches(self.step_name)))


@dataclass(frozen=True)
class InvokeCommand(WireCommand):
    step_id: str
    args: tuple[str, ...] = ()
    table_arg: tuple[tuple[str, ...], ...] = ()

    def run(self, engine: CukeEngine) -> WireResponse:
        try:
            engine.invoke_step(
                self.step_id, list(self.args), [list(row) for row in self.table_arg]
            )
        except InvokeFailureException as failure:
            return FailureResponse(failure.message, failure.exception_type)
        except PendingStepException as pending:
            return PendingResponse(pending.message)
        except InvokeException as error:
            return FailureResponse(error.message)
        return SuccessResponse()


@dataclass(frozen=True)
class SnippetTextCommand(WireCommand):
    keyword: str
    name: str
    multiline_arg_class: str = ""

    def run(self, engine: CukeEngine) -> WireResponse:
        return SnippetTextResponse(
            engine.snippet_text(self.keyword, self.name, self.multiline_arg_class)
        )


@dataclass(frozen=True)
class FailingCommand(WireCommand):
    """Stands for a request the engine does not understand."""

    def run(self, engine: CukeEngine) -> WireResponse:
        return FailureResponse()


class WireMessageCodecException(Exception):
    """A wire message could not be decoded."""


def _string(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise WireMessageCodecException(f"Expected a string for {what}")
    return value


def _strings(value: Any, what: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise WireMessageCodecException(f"Expected a list for {what}")
    return tuple(_string(item, what) for item in value)


def _invoke_command(payload: dict[str, Any]) -> InvokeCommand:
    if "id" not in payload:
        raise WireMessageCodecException("Missing step id")
    raw_id = payload["id"]
    if isinstance(raw_id, bool) or not isinstance(raw_id, (str, int)):
        raise WireMessageCodecException("Invalid step id")
    raw_args = payload.get("args", [])
    if not isinstance(raw_args, list):
        raise WireMessageCodecException("Expected a list of arguments")
    args: list[str] = []
    table: tuple[tuple[str, ...], ...] | None = None
    for arg in raw_args:
        if isinstance(arg, str):
            args.append(arg)
        elif isinstance(arg, list):
            if table is not None:
                raise WireMessageCodecException("More than one table argument")
            table = tuple(_strings(row, "table row") for row in arg)
        else:
            raise WireMessageCodecException("Unsupported argument type")
    return InvokeCommand(str(raw_id), tuple(args), table or ())


class WireMessageCodec:
    """Translates JSON wire messages into commands and responses into JSON."""

    def decode(self, request: str) -> WireCommand:
        """Decode one request line; raise WireMessageCodecException if malformed."""
        try:
            message = json.loads(request)
        except ValueError as exc:
            raise WireMessageCodecException("Invalid JSON") from exc
        if not isinstance(message, list) or not message:
            raise WireMessageCodecException("Expected a non-empty JSON array")
        command = _string(message[0], "command name")
        payload = message[1] if len(message) > 1 else {}
        if not isinstance(payload, dict):
            raise WireMessageCodecException("Expected an object of arguments")

        if command == "begin_scenario":
            return BeginScenarioCommand(_strings(payload.get("tags", []), "tags"))
        if command == "end_scenario":
            return EndScenarioCommand(_strings(payload.get("tags", []), "tags"))
        if command == "step_matches":
            return StepMatchesCommand(_string(payload.get("name_to_match"), "name_to_match"))
        if command == "invoke":
            return _invoke_command(payload)
        if command == "snippet_text":
            return SnippetTextCommand(
                _string(payload.get("step_keyword"), "step_keyword"),
                _string(payload.get("step_name"), "step_name"),
                _string(payload.get("multiline_arg_class", ""), "multiline_arg_class"),
            )
        return FailingCommand()

    def encode(self, response: WireResponse) -> str:
        """Encode a response as one compact JSON array."""
        return json.dumps(self._to_message(response), separators=(",", ":"), ensure_ascii=False)

    @staticmethod
    def _to_message(response: WireResponse) -> list[Any]:
        match response:
            case SuccessResponse():
                return ["success"]
            case FailureResponse(message=message, exception_type=exception_type):
                details: dict[str, str] = {}
                if message:
                    details["message"] = message
                if exception_type:
                    details["exception"] = exception_type
                return ["fail", details] if details else ["fail"]
            case PendingResponse(message=message):
                return ["pending", message] if message else ["pending"]
            case StepMatchesResponse(matching_steps=steps):
                return ["success", [_encode_step_match(match) for match in steps]]
            case SnippetTextResponse(step_snippet=snippet):
                return ["success", snippet]
        raise TypeError(f"Cannot encode {type(response).__name__}")


def _encode_step_match(match: StepMatch) -> dict[str, Any]:
    encoded: dict[str, Any] = {
        "id": match.id,
        "args": [{"val": arg.value, "pos": arg.position} for arg in match.args],
    }
    if match.source:
        encoded["source"] = match.source
    if match.regexp:
        encoded["regexp"] = match.regexp
    return encoded


class ProtocolHandler(abc.ABC):
    """Turns one request line into one response line."""

    @abc.abstractmethod
    def handle(self, request: str) -> str:
        """Answer a single request."""


class WireProtocolHandler(ProtocolHandler):
    """Decodes requests with a codec and runs them on an engine."""

    def __init__(self, codec: WireMessageCodec, engine: CukeEngine) -> None:
        self.codec = codec
        self.engine = engine

    def handle(self, request: str) -> str:
        try:
            response = self.codec.decode(request).run(self.engine)
        except Exception:
            response = FailureResponse()
        return self.codec.encode(response)


def _as_rows(table: Sequence[Sequence[str]]) -> tuple[tuple[str, ...], ...]:
    return tuple(tuple(row) for row in table)