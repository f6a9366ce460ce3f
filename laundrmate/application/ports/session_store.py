from abc import ABC, abstractmethod
from typing import Callable

from laundrmate.application.exceptions import AuthError
from laundrmate.domain.entities.session import Session

SessionListener = Callable[[Session | None], None]


class SessionStorePort(ABC):
    @abstractmethod
    def get(self) -> Session | None:
        raise NotImplementedError

    @abstractmethod
    def set(self, session: Session) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """
        Register a callback fired with the new session (or None) on every change.
        Returns a callable that removes the listener.
        """
        raise NotImplementedError

    def require(self) -> Session:
        session = self.get()
        if session is None or not session.token:
            raise AuthError("Not signed in")
        return session
