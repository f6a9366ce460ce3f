from abc import ABC, abstractmethod

from laundrmate.domain.entities.session import Role


class AuthGatewayPort(ABC):
    @abstractmethod
    async def login(self, email: str, password: str) -> str:
        """Exchange credentials for a token."""
        raise NotImplementedError

    @abstractmethod
    async def register(self, email: str, password: str, role: Role) -> None:
        raise NotImplementedError
