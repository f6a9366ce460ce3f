from __future__ import annotations

import logging

from laundrmate.application.ports.auth_gateway import AuthGatewayPort
from laundrmate.application.ports.session_store import SessionStorePort
from laundrmate.application.utils.token_claims import session_from_token
from laundrmate.domain.entities.session import Role, Session


class AuthenticateUseCase:
    def __init__(self, gateway: AuthGatewayPort, session_store: SessionStorePort) -> None:
        self._gateway = gateway
        self._session_store = session_store
        self._logger = logging.getLogger(__name__)

    async def login(self, email: str, password: str, fallback_role: Role | None = None) -> Session:
        token = await self._gateway.login(email.strip(), password)
        session = session_from_token(token, fallback_role=fallback_role)
        self._session_store.set(session)
        self._logger.info("Signed in", extra={"status": session.role.value})
        return session

    async def register(self, email: str, password: str, role: Role = Role.user) -> Session:
        """Create the account, then sign straight in with it."""
        await self._gateway.register(email.strip(), password, role)
        return await self.login(email, password, fallback_role=role)

    def logout(self) -> None:
        self._session_store.clear()
        self._logger.info("Signed out")
