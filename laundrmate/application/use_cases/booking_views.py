from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping

from pydantic import ValidationError as SchemaError

from laundrmate.application.dto.booking_payload import BookingCreate, BookingUpdate
from laundrmate.application.exceptions import BookingClientError, NotFoundError, ValidationError
from laundrmate.application.ports.booking_gateway import BookingGatewayPort
from laundrmate.application.ports.booking_store import BookingStorePort
from laundrmate.application.ports.session_store import SessionStorePort
from laundrmate.application.use_cases.booking_lifecycle import BookingLifecycleUseCase, MutationResult
from laundrmate.application.utils.search import ALL_STATUSES, filter_bookings
from laundrmate.application.utils.sequencing import RequestSequencer
from laundrmate.domain.entities.booking import Booking, BookingId, BookingStatus, LaundryId
from laundrmate.domain.entities.session import Session


class BookingSource(str, Enum):
    mine = "mine"
    owned = "owned"


class _BookingView:
    """
    Shared plumbing for a screen that keeps its own booking store.

    Fetch results are applied only if they belong to the latest request and
    the view is still open. A session change empties the store.
    """

    def __init__(
        self,
        name: str,
        gateway: BookingGatewayPort,
        session_store: SessionStorePort,
        store: BookingStorePort,
        allow_reopen: bool = True,
        inflight_guard: bool = True,
    ) -> None:
        self.name = name
        self._gateway = gateway
        self._session_store = session_store
        self.store = store
        self.lifecycle = BookingLifecycleUseCase(
            gateway=gateway,
            session_store=session_store,
            store=self.store,
            allow_reopen=allow_reopen,
            inflight_guard=inflight_guard,
        )
        self._sequencer = RequestSequencer()
        self._unsubscribe = session_store.subscribe(self._on_session_change)
        self._logger = logging.getLogger(__name__)

    @property
    def closed(self) -> bool:
        return self._sequencer.closed

    def close(self) -> None:
        """Stop observing: pending fetches resolve into nothing."""
        self._sequencer.close()
        self._unsubscribe()

    async def transition(self, booking_id: BookingId, target: BookingStatus | str) -> MutationResult:
        return await self.lifecycle.transition(booking_id, target)

    async def delete(self, booking_id: BookingId) -> MutationResult:
        return await self.lifecycle.delete(booking_id)

    def _on_session_change(self, session: Session | None) -> None:
        self._sequencer.invalidate()
        self.store.replace_all([])
        self._logger.info("Session changed, view cleared", extra={"view": self.name})

    def _discard(self, token: int) -> bool:
        if self._sequencer.is_current(token):
            return False
        self._logger.debug("Discarding stale response", extra={"view": self.name, "request_token": token})
        return True


class BookingListView(_BookingView):
    """Owner bookings list, owner dashboard counts, or a user's own bookings."""

    def __init__(
        self,
        source: BookingSource,
        gateway: BookingGatewayPort,
        session_store: SessionStorePort,
        store: BookingStorePort,
        **kwargs: Any,
    ) -> None:
        self.source = BookingSource(source)
        super().__init__(f"bookings:{self.source.value}", gateway, session_store, store, **kwargs)
        self.search = ""
        self.status_filter = ALL_STATUSES
        self.laundry_filter: LaundryId | None = None

    async def refresh(self) -> bool:
        """
        Replace the store with a fresh list. Returns False when the response
        was dropped because a newer refresh started or the view closed.
        """
        token = self._sequencer.issue()
        try:
            if self.source is BookingSource.owned:
                bookings = await self._gateway.list_owned()
            else:
                bookings = await self._gateway.list_mine()
        except BookingClientError:
            if self._discard(token):
                return False
            raise
        if self._discard(token):
            return False
        self.store.replace_all(bookings)
        self._logger.info("Bookings loaded", extra={"view": self.name, "request_token": token})
        return True

    def visible(self) -> list[Booking]:
        return filter_bookings(self.store.snapshot(), self.search, self.status_filter, self.laundry_filter)

    @property
    def shown_of_total(self) -> tuple[int, int]:
        return len(self.visible()), len(self.store.snapshot())

    async def create(self, payload: BookingCreate) -> Booking:
        return await self.lifecycle.create(payload)

    async def edit(self, booking_id: BookingId, payload: BookingUpdate) -> Booking:
        return await self.lifecycle.edit(booking_id, payload)


class BookingDetailView(_BookingView):
    def __init__(
        self,
        booking_id: BookingId,
        gateway: BookingGatewayPort,
        session_store: SessionStorePort,
        store: BookingStorePort,
        **kwargs: Any,
    ) -> None:
        super().__init__(f"booking:{booking_id}", gateway, session_store, store, **kwargs)
        self.booking_id = booking_id

    @property
    def booking(self) -> Booking | None:
        return self.store.get(self.booking_id)

    async def load(self) -> Booking | None:
        token = self._sequencer.issue()
        try:
            booking = await self._gateway.get_by_id(self.booking_id)
        except NotFoundError:
            if not self._discard(token):
                self.store.replace_all([])
            return None
        except BookingClientError:
            if self._discard(token):
                return None
            raise
        if self._discard(token):
            return None
        # Later lookups use the server id; the requested one may differ in type.
        self.booking_id = booking.id
        self.store.replace_all([booking])
        return booking

    async def transition(self, target: BookingStatus | str) -> MutationResult:  # type: ignore[override]
        return await self.lifecycle.transition(self.booking_id, target)

    async def delete(self) -> MutationResult:  # type: ignore[override]
        return await self.lifecycle.delete(self.booking_id)


_FORM_FIELDS = ("laundry_id", "scheduled_at", "service_type", "notes", "price")


class BookingForm:
    """
    Create/edit form backed by a lifecycle controller, usually the one of the
    "my bookings" view so a new booking shows up there.

    Form values are strings as typed; blank means "not set".
    """

    def __init__(
        self,
        lifecycle: BookingLifecycleUseCase,
        gateway: BookingGatewayPort,
        session_store: SessionStorePort,
        booking_id: BookingId | None = None,
        preset_laundry_id: LaundryId | None = None,
    ) -> None:
        self._lifecycle = lifecycle
        self._gateway = gateway
        self._session_store = session_store
        self.booking_id = booking_id
        self.preset_laundry_id = preset_laundry_id

    @property
    def is_edit(self) -> bool:
        return self.booking_id is not None

    async def load(self) -> dict[str, str]:
        if not self.is_edit:
            return {
                "laundry_id": "" if self.preset_laundry_id is None else str(self.preset_laundry_id),
                "scheduled_at": "",
                "service_type": "",
                "notes": "",
                "price": "",
                "status": BookingStatus.pending.value,
            }
        booking = await self._gateway.get_by_id(self.booking_id)
        self.booking_id = booking.id
        return {
            "laundry_id": str(booking.laundry_id),
            "scheduled_at": booking.scheduled_at.strftime("%Y-%m-%dT%H:%M") if booking.scheduled_at else "",
            "service_type": booking.service_type or "",
            "notes": booking.notes or "",
            "price": "" if booking.price is None else str(booking.price),
            "status": booking.status.value,
        }

    async def submit(self, values: Mapping[str, Any]) -> Booking:
        fields = {name: values[name] for name in _FORM_FIELDS if name in values}
        if not self.is_edit:
            typed = str(fields.get("laundry_id") or "").strip()
            if self.preset_laundry_id is not None and typed in ("", str(self.preset_laundry_id)):
                fields["laundry_id"] = self.preset_laundry_id
            if not fields.get("laundry_id"):
                raise ValidationError("Laundry is required")
            return await self._lifecycle.create(_build(BookingCreate, fields))

        fields.pop("laundry_id", None)
        # Every editable field is sent so a blank input clears the stored value.
        for name in ("scheduled_at", "service_type", "notes", "price"):
            fields.setdefault(name, None)
        booking = await self._lifecycle.edit(self.booking_id, _build(BookingUpdate, fields))

        wanted = str(values.get("status") or "").strip().lower()
        if wanted and wanted != booking.status.value and self._session_store.require().is_owner:
            result = await self._lifecycle.transition(self.booking_id, wanted)
            if not result.ok and result.error is not None:
                raise result.error
            if result.booking is not None:
                booking = result.booking
        return booking


def _build(model: type[BookingCreate] | type[BookingUpdate], fields: dict[str, Any]) -> Any:
    fields = {key: value.strip() if isinstance(value, str) else value for key, value in fields.items()}
    try:
        return model.model_validate(fields)
    except SchemaError as e:
        first = e.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ()))
        raise ValidationError(f"{where}: {first.get('msg')}") from e

