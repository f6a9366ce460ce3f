from __future__ import annotations

import logging

from laundrmate.application.exceptions import AuthError
from laundrmate.application.ports.auth_gateway import AuthGatewayPort
from laundrmate.domain.entities.session import Role
from laundrmate.infrastructure.api.base_client import ApiClient


class HttpAuthGateway(AuthGatewayPort):
    def __init__(self, api: ApiClient) -> None:
        self._api = api
        self._logger = logging.getLogger(__name__)

    async def login(self, email: str, password: str) -> str:
        data = await self._api.request(
            "POST",
            "/api/auth/login",
            json={"email": email, "password": password},
            auth=False,
            status_errors={400: AuthError},
        )
        token = data.get("token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            raise AuthError("Login response did not include a token")
        return token

    async def register(self, email: str, password: str, role: Role) -> None:
        await self._api.request(
            "POST",
            "/api/auth/register",
            json={"email": email, "password": password, "role": Role(role).value},
            auth=False,
        )
        self._logger.info("Account registered", extra={"status": Role(role).value})
