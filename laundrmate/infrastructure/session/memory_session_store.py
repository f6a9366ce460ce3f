from __future__ import annotations

import logging
from typing import Callable

from laundrmate.application.ports.session_store import SessionListener, SessionStorePort
from laundrmate.domain.entities.session import Session


class MemorySessionStore(SessionStorePort):
    """Holds the signed-in identity for the lifetime of the process."""

    def __init__(self, session: Session | None = None) -> None:
        self._session = session
        self._listeners: list[SessionListener] = []
        self._logger = logging.getLogger(__name__)

    def get(self) -> Session | None:
        return self._session

    def set(self, session: Session) -> None:
        self._session = session
        self._notify()

    def clear(self) -> None:
        if self._session is None:
            return
        self._session = None
        self._notify()

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._session)
