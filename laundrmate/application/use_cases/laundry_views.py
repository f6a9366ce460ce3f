from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

from pydantic import ValidationError as SchemaError

from laundrmate.application.dto.laundry_payload import LaundryPayload
from laundrmate.application.exceptions import BookingClientError, ValidationError
from laundrmate.application.ports.booking_gateway import BookingGatewayPort
from laundrmate.application.ports.laundry_gateway import LaundryGatewayPort
from laundrmate.application.ports.session_store import SessionStorePort
from laundrmate.application.utils.search import count_by_laundry, filter_laundries
from laundrmate.application.utils.sequencing import RequestSequencer
from laundrmate.domain.entities.booking import LaundryId
from laundrmate.domain.entities.laundry import Laundry
from laundrmate.domain.entities.session import Session


class OwnerDashboard:
    """Owner's laundries with a booking count per laundry."""

    def __init__(
        self,
        laundry_gateway: LaundryGatewayPort,
        booking_gateway: BookingGatewayPort,
        session_store: SessionStorePort,
    ) -> None:
        self._laundries = laundry_gateway
        self._bookings = booking_gateway
        self._sequencer = RequestSequencer()
        self._unsubscribe = session_store.subscribe(self._on_session_change)
        self._logger = logging.getLogger(__name__)

        self.laundries: list[Laundry] = []
        self.booking_counts: dict[LaundryId, int] = {}
        self.search = ""

    @property
    def total_bookings(self) -> int:
        return sum(self.booking_counts.values())

    def count_for(self, laundry_id: LaundryId) -> int:
        return self.booking_counts.get(laundry_id, 0)

    def visible(self) -> list[Laundry]:
        return filter_laundries(self.laundries, self.search)

    async def load(self) -> bool:
        token = self._sequencer.issue()
        try:
            laundries, bookings = await asyncio.gather(self._laundries.list_mine(), self._bookings.list_owned())
        except BookingClientError as e:
            if not self._sequencer.is_current(token):
                return False
            self._logger.error("Owner dashboard load failed", extra={"view": "owner-dashboard", "error": str(e)})
            raise
        if not self._sequencer.is_current(token):
            return False
        self.laundries = laundries
        self.booking_counts = count_by_laundry(bookings)
        return True

    async def save_laundry(self, values: Mapping[str, Any], laundry_id: LaundryId | None = None) -> Laundry | None:
        name = str(values.get("name") or "").strip()
        if not name:
            raise ValidationError("Name is required")
        try:
            payload = LaundryPayload.model_validate({**values, "name": name})
        except SchemaError as e:
            raise ValidationError(f"Invalid laundry: {e.errors()[0].get('msg')}") from e

        if laundry_id is None:
            saved = await self._laundries.create(payload)
        else:
            saved = await self._laundries.update(laundry_id, payload)
        await self.load()
        return saved

    async def delete_laundry(self, laundry_id: LaundryId) -> None:
        await self._laundries.delete(laundry_id)
        await self.load()

    def close(self) -> None:
        self._sequencer.close()
        self._unsubscribe()

    def _on_session_change(self, session: Session | None) -> None:
        self._sequencer.invalidate()
        self.laundries = []
        self.booking_counts = {}


class LaundryBrowser:
    """Public laundry list shown to users, with text search."""

    def __init__(self, laundry_gateway: LaundryGatewayPort) -> None:
        self._laundries = laundry_gateway
        self._sequencer = RequestSequencer()
        self.laundries: list[Laundry] = []
        self.search = ""

    async def load(self) -> bool:
        token = self._sequencer.issue()
        try:
            laundries = await self._laundries.list_public()
        except BookingClientError:
            if not self._sequencer.is_current(token):
                return False
            raise
        if not self._sequencer.is_current(token):
            return False
        self.laundries = laundries
        return True

    def visible(self) -> list[Laundry]:
        return filter_laundries(self.laundries, self.search)

    def close(self) -> None:
        self._sequencer.close()
