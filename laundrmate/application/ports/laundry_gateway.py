from __future__ import annotations

from abc import ABC, abstractmethod

from laundrmate.application.dto.laundry_payload import LaundryPayload
from laundrmate.domain.entities.booking import LaundryId
from laundrmate.domain.entities.laundry import Laundry


class LaundryGatewayPort(ABC):
    @abstractmethod
    async def list_public(self) -> list[Laundry]:
        """List every laundry. Does not require a session."""
        raise NotImplementedError

    @abstractmethod
    async def list_mine(self) -> list[Laundry]:
        """List laundries owned by the signed-in owner."""
        raise NotImplementedError

    @abstractmethod
    async def create(self, payload: LaundryPayload) -> Laundry | None:
        raise NotImplementedError

    @abstractmethod
    async def update(self, laundry_id: LaundryId, payload: LaundryPayload) -> Laundry | None:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, laundry_id: LaundryId) -> None:
        raise NotImplementedError
