"""Amenity (facility) schemas."""
from pydantic import BaseModel, Field, model_validator


class AmenityCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    icon: str | None = None

    @model_validator(mode="before")
    @classmethod
    def accept_facility_type(cls, data):
        # Facility clients send {"facility_type": "..."}
        if isinstance(data, dict) and "name" not in data and "facility_type" in data:
            data = {**data, "name": data["facility_type"]}
        return data


class AmenityUpdate(AmenityCreate):
    pass


class AmenityResponse(BaseModel):
    id: int
    name: str
    icon: str | None = None

    class Config:
        from_attributes = True
