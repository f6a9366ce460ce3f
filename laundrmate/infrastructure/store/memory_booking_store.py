from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, Iterable

from laundrmate.application.ports.booking_store import BookingStorePort, StoreListener
from laundrmate.domain.entities.booking import Booking, BookingId

# Identity fields never change through a local merge.
_IMMUTABLE_FIELDS = frozenset({"id", "laundry_id"})


class MemoryBookingStore(BookingStorePort):
    def __init__(self, name: str = "bookings") -> None:
        self._name = name
        self._bookings: dict[BookingId, Booking] = {}
        self._listeners: list[StoreListener] = []
        self._logger = logging.getLogger(__name__)

    def replace_all(self, bookings: Iterable[Booking]) -> None:
        fresh: dict[BookingId, Booking] = {}
        for booking in bookings:
            fresh[booking.id] = booking  # last duplicate wins
        self._bookings = fresh
        self._notify()

    def upsert(self, booking: Booking) -> None:
        self._bookings[booking.id] = booking
        self._notify()

    def remove(self, booking_id: BookingId) -> None:
        if self._bookings.pop(booking_id, None) is not None:
            self._notify()

    def patch(self, booking_id: BookingId, **fields: Any) -> bool:
        current = self._bookings.get(booking_id)
        if current is None:
            return False
        blocked = _IMMUTABLE_FIELDS.intersection(fields)
        if blocked:
            raise ValueError(f"Cannot patch immutable field(s): {', '.join(sorted(blocked))}")
        # dataclasses.replace validates every name before building the new record.
        self._bookings[booking_id] = dataclasses.replace(current, **fields)
        self._notify()
        return True

    def get(self, booking_id: BookingId) -> Booking | None:
        return self._bookings.get(booking_id)

    def snapshot(self) -> list[Booking]:
        return list(self._bookings.values())

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def __len__(self) -> int:
        return len(self._bookings)

    def __contains__(self, booking_id: object) -> bool:
        return booking_id in self._bookings

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                # The mutation stands even if a listener fails.
                self._logger.error("Store listener failed", extra={"view": self._name, "error": str(e)})
