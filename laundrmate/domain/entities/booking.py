from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

BookingId = int | str
LaundryId = int | str

SERVICE_TYPES: tuple[str, ...] = ("Wash & Fold", "Dry Clean", "Ironing", "Wash & Iron")


class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"


@dataclass(frozen=True)
class LaundrySnapshot:
    # Denormalized copy embedded by the server for display only.
    name: str | None = None
    address: str | None = None
    phone: str | None = None
    image_url: str | None = None
    description: str | None = None
    lat: float | None = None
    lng: float | None = None


@dataclass(frozen=True)
class Booking:
    id: BookingId
    laundry_id: LaundryId
    user_id: int | str | None = None
    status: BookingStatus = BookingStatus.pending
    scheduled_at: datetime | None = None
    service_type: str | None = None
    notes: str | None = None
    price: Decimal | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    laundry: LaundrySnapshot | None = None
