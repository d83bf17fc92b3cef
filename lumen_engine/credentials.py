"""Elevated-credential store and the gate in front of paid tiers."""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Union

from .config import api_key_from_env
from .errors import CredentialError
from .runs.events import EventWriter

CredentialSelector = Callable[[], Union[str, None, Awaitable[Union[str, None]]]]


class CredentialStore:
    """Process-wide holder of the selected API key.

    The key is looked up in the environment on first use; after that it only
    changes through ``request_selection`` or ``clear``.
    """

    def __init__(self, selector: CredentialSelector | None = None, *, use_env: bool = True) -> None:
        self.selector = selector
        self._use_env = use_env
        self._loaded = False
        self._key: str | None = None

    def has_credential(self) -> bool:
        return self.current() is not None

    def current(self) -> str | None:
        if not self._loaded:
            self._loaded = True
            if self._use_env and self._key is None:
                self._key = api_key_from_env()
        return self._key

    def set(self, key: str) -> None:
        self._loaded = True
        self._key = key

    def clear(self) -> None:
        self._loaded = True
        self._key = None

    async def request_selection(self) -> None:
        if self.selector is None:
            raise CredentialError("No API key selected and no way to ask for one. Set GEMINI_API_KEY.")
        result: Any = self.selector()
        if inspect.isawaitable(result):
            result = await result
        key = str(result or "").strip()
        if not key:
            raise CredentialError("API key selection was cancelled.")
        self.set(key)


_DEFAULT_STORE: CredentialStore | None = None


def default_credential_store() -> CredentialStore:
    global _DEFAULT_STORE
    if _DEFAULT_STORE is None:
        _DEFAULT_STORE = CredentialStore()
    return _DEFAULT_STORE


class CredentialGate:
    def __init__(self, store: CredentialStore, events: EventWriter | None = None) -> None:
        self.store = store
        self.events = events

    async def ensure(self) -> str:
        key = self.store.current()
        if key:
            return key
        self._emit("credential_requested", reason="missing")
        await self.store.request_selection()
        key = self.store.current()
        if not key:
            raise CredentialError("No usable API key after selection.")
        return key

    async def reselect(self) -> None:
        self.store.clear()
        self._emit("credential_requested", reason="rejected")
        await self.store.request_selection()

    def _emit(self, event_type: str, **payload: Any) -> None:
        if self.events is not None:
            self.events.emit(event_type, **payload)
