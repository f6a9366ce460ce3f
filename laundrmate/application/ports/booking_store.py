from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable

from laundrmate.domain.entities.booking import Booking, BookingId

StoreListener = Callable[[], None]


class BookingStorePort(ABC):
    """
    Per-view cache of bookings keyed by id.

    Mutations are synchronous; a listener never observes a half-applied change.
    """

    @abstractmethod
    def replace_all(self, bookings: Iterable[Booking]) -> None:
        raise NotImplementedError

    @abstractmethod
    def upsert(self, booking: Booking) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove(self, booking_id: BookingId) -> None:
        """Delete by id. No-op if absent."""
        raise NotImplementedError

    @abstractmethod
    def patch(self, booking_id: BookingId, **fields: Any) -> bool:
        """
        Shallow-merge fields into an existing record.
        Returns False (and changes nothing) when the id is absent.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, booking_id: BookingId) -> Booking | None:
        raise NotImplementedError

    @abstractmethod
    def snapshot(self) -> list[Booking]:
        raise NotImplementedError

    @abstractmethod
    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        raise NotImplementedError
