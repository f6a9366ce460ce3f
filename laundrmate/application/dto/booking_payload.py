from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PlainSerializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

from laundrmate.domain.entities.booking import Booking, BookingStatus, LaundrySnapshot

# Serialized as a JSON number; the backend does not accept decimal strings.
Price = Annotated[Decimal, Field(ge=0), PlainSerializer(float, return_type=float, when_used="json")]


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class LaundrySnapshotDTO(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: int | str | None = Field(default=None, validation_alias=AliasChoices("id", "_id"))
    name: str | None = None
    address: str | None = None
    phone: str | None = None
    image_url: str | None = None
    description: str | None = None
    lat: float | None = None
    lng: float | None = None

    def to_entity(self) -> LaundrySnapshot:
        return LaundrySnapshot(
            name=self.name,
            address=self.address,
            phone=self.phone,
            image_url=self.image_url,
            description=self.description,
            lat=self.lat,
            lng=self.lng,
        )


class BookingDTO(BaseModel):
    """Booking as returned by the backend (camelCase, `_id` tolerated, embedded `Laundry`)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: int | str = Field(validation_alias=AliasChoices("id", "_id"))
    laundry_id: int | str | None = None
    user_id: int | str | None = None
    status: BookingStatus = BookingStatus.pending
    scheduled_at: datetime | None = None
    service_type: str | None = None
    notes: str | None = None
    price: Price | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    laundry: LaundrySnapshotDTO | None = Field(default=None, validation_alias=AliasChoices("Laundry", "laundry"))

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        if value is None:
            return BookingStatus.pending
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @model_validator(mode="after")
    def _resolve_laundry_id(self) -> "BookingDTO":
        if self.laundry_id is None and self.laundry is not None:
            self.laundry_id = self.laundry.id
        if self.laundry_id is None:
            raise ValueError("booking has no laundryId")
        return self

    def to_entity(self) -> Booking:
        return Booking(
            id=self.id,
            laundry_id=self.laundry_id,
            user_id=self.user_id,
            status=self.status,
            scheduled_at=self.scheduled_at,
            service_type=self.service_type,
            notes=self.notes,
            price=self.price,
            created_at=self.created_at,
            updated_at=self.updated_at,
            laundry=self.laundry.to_entity() if self.laundry else None,
        )


class _BookingFields(BaseModel):
    """
    Mutable booking fields shared by create and update.

    Fields left out of the constructor are not sent at all; fields given as
    None (or a blank form string) are sent as null and clear the value.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    scheduled_at: datetime | None = None
    service_type: str | None = None
    notes: str | None = None
    price: Price | None = None

    @field_validator("scheduled_at", "service_type", "notes", "price", mode="before")
    @classmethod
    def _blank(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class BookingCreate(_BookingFields):
    laundry_id: int | str | None = None

    @field_validator("laundry_id", mode="before")
    @classmethod
    def _blank_laundry(cls, value: Any) -> Any:
        return _blank_to_none(value)


class BookingUpdate(_BookingFields):
    # Only honoured for owner sessions; the lifecycle controller never sets it.
    status: BookingStatus | None = None

    def changes(self) -> dict[str, Any]:
        """Fields explicitly provided, keyed by Booking attribute name."""
        return {name: getattr(self, name) for name in self.model_fields_set}
