from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from laundrmate.domain.entities.laundry import Laundry


class LaundryDTO(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: int | str = Field(validation_alias=AliasChoices("id", "_id"))
    name: str = ""
    description: str | None = None
    lat: float | None = None
    lng: float | None = None
    address: str | None = None
    image_url: str | None = None
    phone: str | None = None
    owner_id: int | str | None = None

    def to_entity(self) -> Laundry:
        return Laundry(
            id=self.id,
            name=self.name,
            description=self.description,
            lat=self.lat,
            lng=self.lng,
            address=self.address,
            image_url=self.image_url,
            phone=self.phone,
            owner_id=self.owner_id,
        )


class LaundryPayload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    name: str
    description: str = ""
    lat: float | None = None
    lng: float | None = None
    address: str | None = None
    image_url: str | None = None

    @field_validator("name", "description", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value.strip() if isinstance(value, str) else value

    @field_validator("lat", "lng", "address", "image_url", mode="before")
    @classmethod
    def _blank(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_wire(self) -> dict[str, Any]:
        # address and image_url are sent only when given so an edit never clears them by omission.
        skipped = {name for name in ("address", "image_url") if name not in self.model_fields_set}
        return self.model_dump(mode="json", by_alias=True, exclude=skipped)
