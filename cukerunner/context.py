"""Per-scenario shared contexts, one instance per context type."""

from __future__ import annotations

from typing import Any


class ContextManager:
    """Holds one lazily created instance per context type until purged."""

    def __init__(self) -> None:
        self._contexts: dict[type, Any] = {}

    def get(self, kind: type) -> Any:
        """Return the instance of ``kind``, creating it on first use."""
        if kind not in self._contexts:
            self._contexts[kind] = kind()
        return self._contexts[kind]

    def purge_contexts(self) -> None:
        self._contexts.clear()

    def __len__(self) -> int:
        return len(self._contexts)


default_context_manager = ContextManager()


class ScenarioScope:
    """Proxy to the scenario's shared instance of a context type."""

    __slots__ = ("_context",)

    def __init__(self, kind: type, manager: ContextManager | None = None) -> None:
        registry = default_context_manager if manager is None else manager
        object.__setattr__(self, "_context", registry.get(kind))

    def __getattr__(self, name: str) -> Any:
        return getattr(self._context, name)

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(self._context, name, value)