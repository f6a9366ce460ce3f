from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError as SchemaError

from laundrmate.application.dto.laundry_payload import LaundryDTO, LaundryPayload
from laundrmate.application.exceptions import AuthError, NetworkError
from laundrmate.application.ports.laundry_gateway import LaundryGatewayPort
from laundrmate.domain.entities.booking import LaundryId
from laundrmate.domain.entities.laundry import Laundry
from laundrmate.infrastructure.api.base_client import ApiClient


class HttpLaundryGateway(LaundryGatewayPort):
    def __init__(self, api: ApiClient) -> None:
        self._api = api
        self._logger = logging.getLogger(__name__)

    async def list_public(self) -> list[Laundry]:
        data = await self._api.request("GET", "/api/laundries", auth=False)
        return self._parse_list(data)

    async def list_mine(self) -> list[Laundry]:
        self._require_owner()
        data = await self._api.request("GET", "/api/laundries/owner/mine")
        return self._parse_list(data)

    async def create(self, payload: LaundryPayload) -> Laundry | None:
        self._require_owner()
        data = await self._api.request("POST", "/api/laundries", json=payload.to_wire())
        self._logger.info("Laundry created")
        return _parse_optional(data)

    async def update(self, laundry_id: LaundryId, payload: LaundryPayload) -> Laundry | None:
        self._require_owner()
        data = await self._api.request("PUT", f"/api/laundries/{laundry_id}", json=payload.to_wire())
        return _parse_optional(data)

    async def delete(self, laundry_id: LaundryId) -> None:
        self._require_owner()
        await self._api.request("DELETE", f"/api/laundries/{laundry_id}")
        self._logger.info("Laundry deleted", extra={"laundry_id": laundry_id})

    def _require_owner(self) -> None:
        if not self._api.require_session().is_owner:
            raise AuthError("Only owners can manage laundries")

    def _parse_list(self, data: Any) -> list[Laundry]:
        if not isinstance(data, list):
            self._logger.error("Expected a list of laundries")
            raise NetworkError("Expected a list of laundries")
        try:
            return [LaundryDTO.model_validate(item).to_entity() for item in data]
        except SchemaError as e:
            raise NetworkError("Malformed laundry in response") from e


def _parse_optional(data: Any) -> Laundry | None:
    # Some backends answer writes with an empty body or a bare message.
    if not isinstance(data, dict) or ("id" not in data and "_id" not in data):
        return None
    try:
        return LaundryDTO.model_validate(data).to_entity()
    except SchemaError as e:
        raise NetworkError("Malformed laundry in response") from e
