from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from laundrmate.application.exceptions import (
    AuthError,
    BookingClientError,
    NetworkError,
    NotFoundError,
    ValidationError,
)
from laundrmate.application.ports.session_store import SessionStorePort
from laundrmate.core.config import settings
from laundrmate.domain.entities.session import Session

ErrorOverrides = Mapping[int, type[BookingClientError]]

_DEFAULT_STATUS_ERRORS: dict[int, type[BookingClientError]] = {
    400: ValidationError,
    401: AuthError,
    403: AuthError,
    404: NotFoundError,
    422: ValidationError,
}


class ApiClient:
    """
    Thin async wrapper over httpx shared by every gateway.

    Owns the credential header and the translation of transport failures and
    HTTP error statuses into the client error taxonomy. It never retries.
    """

    def __init__(
        self,
        session_store: SessionStorePort,
        base_url: str | None = None,
        auth_scheme: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._session_store = session_store
        self._base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self._auth_scheme = settings.AUTH_SCHEME if auth_scheme is None else auth_scheme
        self._client = client or httpx.AsyncClient(timeout=timeout or settings.HTTP_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

    def require_session(self) -> Session:
        return self._session_store.require()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        auth: bool = True,
        status_errors: ErrorOverrides | None = None,
    ) -> Any:
        headers: dict[str, str] = {}
        if auth:
            # No session: fail before anything goes on the wire.
            headers["Authorization"] = self._authorization(self.require_session())

        url = f"{self._base_url}{path}"
        target = f"{method} {path}"
        try:
            resp = await self._client.request(method, url, json=json, headers=headers)
        except httpx.TimeoutException as e:
            self._logger.warning("API request timed out", extra={"target": target, "error": str(e)})
            raise NetworkError(f"Request timed out: {target}") from e
        except httpx.HTTPError as e:
            self._logger.warning("API request failed", extra={"target": target, "error": str(e)})
            raise NetworkError(f"Network error: {target}") from e

        if resp.status_code >= 400:
            error = _error_for(resp, status_errors)
            self._logger.error(
                "API error response",
                extra={"target": target, "status": resp.status_code, "error": str(error)},
            )
            raise error

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise NetworkError(f"Invalid JSON in response: {target}", status_code=resp.status_code) from e

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _authorization(self, session: Session) -> str:
        if not self._auth_scheme:
            return session.token
        return f"{self._auth_scheme} {session.token}"


def _error_for(resp: httpx.Response, overrides: ErrorOverrides | None) -> BookingClientError:
    mapping = dict(_DEFAULT_STATUS_ERRORS)
    if overrides:
        mapping.update(overrides)
    error_cls = mapping.get(resp.status_code, NetworkError)
    return error_cls(_error_message(resp), status_code=resp.status_code)


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "detail", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    text = resp.text.strip()
    return text or f"HTTP {resp.status_code}"
