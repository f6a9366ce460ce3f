from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError as SchemaError

from laundrmate.application.dto.booking_payload import BookingCreate, BookingDTO, BookingUpdate
from laundrmate.application.exceptions import (
    AuthError,
    InvalidTransitionError,
    NetworkError,
    ValidationError,
)
from laundrmate.application.ports.booking_gateway import BookingGatewayPort
from laundrmate.domain.entities.booking import Booking, BookingId, BookingStatus
from laundrmate.infrastructure.api.base_client import ApiClient

_STATUS_ERRORS = {400: InvalidTransitionError, 409: InvalidTransitionError, 422: InvalidTransitionError}


class HttpBookingGateway(BookingGatewayPort):
    def __init__(self, api: ApiClient) -> None:
        self._api = api
        self._logger = logging.getLogger(__name__)

    async def create(self, payload: BookingCreate) -> Booking:
        if payload.laundry_id is None:
            raise ValidationError("Laundry is required")
        data = await self._api.request("POST", "/api/bookings", json=payload.to_wire())
        booking = _parse_booking(data)
        self._logger.info("Booking created", extra={"booking_id": booking.id, "laundry_id": booking.laundry_id})
        return booking

    async def list_mine(self) -> list[Booking]:
        data = await self._api.request("GET", "/api/bookings/me")
        return self._parse_list(data, "/api/bookings/me")

    async def list_owned(self) -> list[Booking]:
        if not self._api.require_session().is_owner:
            raise AuthError("Only owners can list bookings for their laundries")
        data = await self._api.request("GET", "/api/bookings/owner")
        return self._parse_list(data, "/api/bookings/owner")

    async def get_by_id(self, booking_id: BookingId) -> Booking:
        data = await self._api.request("GET", f"/api/bookings/{booking_id}")
        return _parse_booking(data)

    async def update(self, booking_id: BookingId, payload: BookingUpdate) -> Booking:
        if "status" in payload.model_fields_set and not self._api.require_session().is_owner:
            raise AuthError("Only owners can change booking status")
        data = await self._api.request("PUT", f"/api/bookings/{booking_id}", json=payload.to_wire())
        return _parse_booking(data)

    async def patch_status(self, booking_id: BookingId, status: BookingStatus) -> Booking:
        data = await self._api.request(
            "PATCH",
            f"/api/bookings/{booking_id}/status",
            json={"status": BookingStatus(status).value},
            status_errors=_STATUS_ERRORS,
        )
        return _parse_booking(data)

    async def delete(self, booking_id: BookingId) -> None:
        await self._api.request("DELETE", f"/api/bookings/{booking_id}")
        self._logger.info("Booking deleted", extra={"booking_id": booking_id})

    def _parse_list(self, data: Any, path: str) -> list[Booking]:
        if not isinstance(data, list):
            self._logger.error("Expected a list of bookings", extra={"target": path})
            raise NetworkError(f"Expected a list of bookings: GET {path}")
        return [_parse_booking(item) for item in data]


def _parse_booking(data: Any) -> Booking:
    try:
        return BookingDTO.model_validate(data).to_entity()
    except SchemaError as e:
        raise NetworkError(f"Malformed booking in response: {e.error_count()} error(s)") from e
