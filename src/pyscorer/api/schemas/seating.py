from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def car_key(value):
    """Read digit-only text as an integer so body and path ids match."""

    if isinstance(value, str) and value.removeprefix("-").isdecimal():
        return int(value)
    return value


class FamilyPayload(BaseModel):
    """A family entry; fields beyond the key are stored as given."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    family_name: str = Field(alias="familyName", min_length=1)

    def to_item(self) -> dict:
        return self.model_dump(by_alias=True)


class CarPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int | str

    @field_validator("id", mode="before")
    @classmethod
    def _normalise_id(cls, value):
        return car_key(value)

    def to_item(self) -> dict:
        return self.model_dump()


class SnapshotPayload(BaseModel):
    """Saved seating or parking state. ``id`` and ``timestamp`` are optional."""

    model_config = ConfigDict(extra="allow")

    id: int | None = None
    timestamp: int | float | None = None
    name: str | None = None

    def to_item(self) -> dict:
        item = self.model_dump()
        for key in ("id", "timestamp", "name"):
            if item.get(key) is None:
                item.pop(key, None)
        return item


class BulkWriteResponse(BaseModel):
    count: int
