from __future__ import annotations

from dataclasses import dataclass

from laundrmate.domain.entities.booking import LaundryId


@dataclass(frozen=True)
class Laundry:
    id: LaundryId
    name: str
    description: str | None = None
    lat: float | None = None
    lng: float | None = None
    address: str | None = None
    image_url: str | None = None
    phone: str | None = None
    owner_id: int | str | None = None
