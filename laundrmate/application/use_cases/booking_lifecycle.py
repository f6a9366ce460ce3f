from __future__ import annotations

import asyncio
import dataclasses
import logging
from dataclasses import dataclass

from laundrmate.application.dto.booking_payload import BookingCreate, BookingUpdate
from laundrmate.application.exceptions import (
    AuthError,
    BookingClientError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from laundrmate.application.ports.booking_gateway import BookingGatewayPort
from laundrmate.application.ports.booking_store import BookingStorePort
from laundrmate.application.ports.session_store import SessionStorePort
from laundrmate.domain.entities.booking import Booking, BookingId, BookingStatus
from laundrmate.domain.entities.session import Role, Session

_PENDING = BookingStatus.pending
_CONFIRMED = BookingStatus.confirmed
_CANCELLED = BookingStatus.cancelled

TRANSITIONS: dict[tuple[BookingStatus, BookingStatus], frozenset[Role]] = {
    (_PENDING, _CONFIRMED): frozenset({Role.owner}),
    (_PENDING, _CANCELLED): frozenset({Role.owner, Role.user}),
    (_CONFIRMED, _CANCELLED): frozenset({Role.owner}),
}

REOPEN_TRANSITIONS: dict[tuple[BookingStatus, BookingStatus], frozenset[Role]] = {
    (_CONFIRMED, _PENDING): frozenset({Role.owner}),
    (_CANCELLED, _PENDING): frozenset({Role.owner}),
}


@dataclass(frozen=True)
class MutationResult:
    ok: bool
    booking: Booking | None  # value held by the store once the call settled
    notice: str | None = None
    error: BookingClientError | None = None


class BookingLifecycleUseCase:
    """
    The one place that decides who may change a booking and how the change
    reaches the store.

    Status transitions and deletes are optimistic: the store changes first,
    then the gateway is called, and any failure is settled by re-reading the
    record from the server. Create and edit wait for the server before the
    store is touched.
    """

    def __init__(
        self,
        gateway: BookingGatewayPort,
        session_store: SessionStorePort,
        store: BookingStorePort,
        allow_reopen: bool = True,
        inflight_guard: bool = True,
    ) -> None:
        self._gateway = gateway
        self._session_store = session_store
        self._store = store
        self._transitions = dict(TRANSITIONS)
        if allow_reopen:
            self._transitions.update(REOPEN_TRANSITIONS)
        self._inflight_guard = inflight_guard
        self._in_flight: set[BookingId] = set()
        self._logger = logging.getLogger(__name__)

    @property
    def store(self) -> BookingStorePort:
        return self._store

    def available_transitions(self, booking: Booking) -> list[BookingStatus]:
        """Targets the current session may move this booking to."""
        session = self._session_store.get()
        if session is None:
            return []
        out: list[BookingStatus] = []
        for (source, target), roles in self._transitions.items():
            if source == booking.status and session.role in roles and _acts_for(session, booking):
                out.append(target)
        return out

    def check_transition(self, booking: Booking, target: BookingStatus, session: Session) -> None:
        if booking.status == target:
            raise InvalidTransitionError(f"Booking #{booking.id} is already {target.value}")
        roles = self._transitions.get((booking.status, target))
        if roles is None:
            raise InvalidTransitionError(f"Cannot move booking #{booking.id} from {booking.status.value} to {target.value}")
        if session.role not in roles:
            raise AuthError(f"Only owners can mark bookings {target.value}")
        if not _acts_for(session, booking):
            raise AuthError(f"Booking #{booking.id} belongs to another user")

    async def create(self, payload: BookingCreate) -> Booking:
        self._session_store.require()
        if payload.laundry_id is None:
            raise ValidationError("Laundry is required")
        booking = await self._gateway.create(payload)
        self._store.upsert(booking)
        return booking

    async def edit(self, booking_id: BookingId, payload: BookingUpdate) -> Booking:
        session = self._session_store.require()
        if "status" in payload.model_fields_set:
            raise ValidationError("Status changes go through a transition, not an edit")
        current = self._store.get(booking_id)
        if current is not None and not _acts_for(session, current):
            raise AuthError(f"Booking #{booking_id} belongs to another user")

        updated = await self._gateway.update(booking_id, payload)
        self._store.upsert(_keep_laundry(updated, current))
        self._logger.info("Booking edited", extra={"booking_id": booking_id})
        return updated

    async def transition(self, booking_id: BookingId, target: BookingStatus | str) -> MutationResult:
        try:
            target = BookingStatus(target)
        except ValueError as e:
            raise ValidationError(f"Unknown booking status: {target}") from e

        session = self._session_store.require()
        current = self._require_loaded(booking_id)
        self.check_transition(current, target, session)

        with self._guard(booking_id):
            self._store.patch(booking_id, status=target)
            self._logger.info(
                "Optimistic status change",
                extra={"booking_id": booking_id, "status": current.status.value, "target": target.value},
            )
            try:
                confirmed = await self._gateway.patch_status(booking_id, target)
            except BookingClientError as e:
                return await self._settle_failure(booking_id, current, e, "Failed to update status.")
            except asyncio.CancelledError:
                self._store.upsert(current)
                raise

            self._store.upsert(_keep_laundry(confirmed, current))
            return MutationResult(ok=True, booking=self._store.get(booking_id))

    async def delete(self, booking_id: BookingId) -> MutationResult:
        session = self._session_store.require()
        current = self._require_loaded(booking_id)
        if not _acts_for(session, current):
            raise AuthError(f"Booking #{booking_id} belongs to another user")

        with self._guard(booking_id):
            self._store.remove(booking_id)
            try:
                await self._gateway.delete(booking_id)
            except BookingClientError as e:
                return await self._settle_failure(booking_id, current, e, "Failed to delete.")
            except asyncio.CancelledError:
                self._store.upsert(current)
                raise
            return MutationResult(ok=True, booking=None)

    async def _settle_failure(
        self,
        booking_id: BookingId,
        previous: Booking,
        error: BookingClientError,
        notice: str,
    ) -> MutationResult:
        self._logger.warning(
            "Optimistic change rejected, re-reading booking",
            extra={"booking_id": booking_id, "error": str(error)},
        )
        try:
            fresh = await self._gateway.get_by_id(booking_id)
        except BookingClientError as refetch_error:
            self._logger.warning(
                "Re-read failed, dropping booking from view",
                extra={"booking_id": booking_id, "error": str(refetch_error)},
            )
            self._store.remove(booking_id)
        except asyncio.CancelledError:
            self._store.upsert(previous)
            raise
        else:
            self._store.upsert(_keep_laundry(fresh, previous))
        return MutationResult(ok=False, booking=self._store.get(booking_id), notice=notice, error=error)

    def _require_loaded(self, booking_id: BookingId) -> Booking:
        booking = self._store.get(booking_id)
        if booking is None:
            raise NotFoundError(f"Booking #{booking_id} is not loaded in this view")
        return booking

    def _guard(self, booking_id: BookingId) -> "_InFlight":
        if self._inflight_guard and booking_id in self._in_flight:
            raise InvalidTransitionError(f"Another change to booking #{booking_id} is still in progress")
        return _InFlight(self._in_flight, booking_id)


class _InFlight:
    def __init__(self, in_flight: set[BookingId], booking_id: BookingId) -> None:
        self._in_flight = in_flight
        self._booking_id = booking_id

    def __enter__(self) -> None:
        self._in_flight.add(self._booking_id)

    def __exit__(self, *exc_info: object) -> None:
        self._in_flight.discard(self._booking_id)


def _acts_for(session: Session, booking: Booking) -> bool:
    if session.is_owner:
        return True
    # Unknown ownership is left to the server to enforce.
    if session.user_id is None or booking.user_id is None:
        return True
    return str(session.user_id) == str(booking.user_id)


def _keep_laundry(fresh: Booking, previous: Booking | None) -> Booking:
    # Write responses often omit the embedded laundry; keep the one already shown.
    if fresh.laundry is None and previous is not None and previous.laundry is not None:
        return dataclasses.replace(fresh, laundry=previous.laundry)
    return fresh
