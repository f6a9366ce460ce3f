from __future__ import annotations

from abc import ABC, abstractmethod

from laundrmate.application.dto.booking_payload import BookingCreate, BookingUpdate
from laundrmate.domain.entities.booking import Booking, BookingId, BookingStatus


class BookingGatewayPort(ABC):
    """
    Request/response facade over the remote booking API.

    Every call is one round trip. Nothing is cached or retried and every
    failure is raised as a BookingClientError subclass.
    """

    @abstractmethod
    async def create(self, payload: BookingCreate) -> Booking:
        raise NotImplementedError

    @abstractmethod
    async def list_mine(self) -> list[Booking]:
        raise NotImplementedError

    @abstractmethod
    async def list_owned(self) -> list[Booking]:
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, booking_id: BookingId) -> Booking:
        raise NotImplementedError

    @abstractmethod
    async def update(self, booking_id: BookingId, payload: BookingUpdate) -> Booking:
        raise NotImplementedError

    @abstractmethod
    async def patch_status(self, booking_id: BookingId, status: BookingStatus) -> Booking:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, booking_id: BookingId) -> None:
        raise NotImplementedError
