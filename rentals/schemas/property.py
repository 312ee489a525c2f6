"""Property schemas and the request parser feeding the property orchestrator."""
from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, model_validator

from rentals.domain import details_field, normalize_amenity_ids, parse_property_type
from rentals.errors import ValidationError
from rentals.models.property import Property, PropertyType
from rentals.repositories.properties import PropertyRepository
from rentals.schemas.amenity import AmenityResponse
from rentals.schemas.review import ReviewResponse, review_to_response
from rentals.services.properties import PropertyInput

# Older clients use these names
_FIELD_ALIASES = {
    "rent_per_day": "price_per_day",
    "price_per_night": "price_per_day",
    "guest": "max_guests",
    "guests": "max_guests",
}
_DETAIL_ALIASES = {
    "bedrooms": "total_bedrooms",
    "rooms": "total_rooms",
    "beds": "total_beds",
}
_DETAIL_FIELDS = ("total_bedrooms", "total_rooms", "total_beds")
_REQUIRED_ON_CREATE = ("title", "price_per_day")


class PropertyFields(BaseModel):
    """Base-row columns. Every field is optional here; create() checks the required ones."""
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    address: str | None = None
    city: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    price_per_day: Decimal | None = Field(None, ge=0)
    max_guests: int | None = Field(None, ge=1)

    @model_validator(mode="before")
    @classmethod
    def apply_aliases(cls, data):
        if not isinstance(data, dict):
            return data
        out = {}
        for key, value in data.items():
            key = _FIELD_ALIASES.get(key, key)
            if key not in cls.model_fields:
                continue
            # Empty form fields mean "not given"
            if isinstance(value, str) and not value.strip():
                continue
            out[key] = value
        return out


def _first_error(e: PydanticValidationError) -> ValidationError:
    err = e.errors()[0]
    name = ".".join(str(p) for p in err.get("loc", ())) or "body"
    return ValidationError(f"{name}: {err.get('msg', 'invalid value')}", field=name)


def _image_urls(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return []
        try:
            raw = json.loads(text)
        except ValueError:
            raw = [text]
    if not isinstance(raw, list):
        raw = [raw]
    urls = []
    for item in raw:
        if isinstance(item, dict):
            item = item.get("url") or item.get("image_url")
        if isinstance(item, str) and item.strip():
            urls.append(item.strip())
    return urls


def parse_property_input(raw: dict[str, Any], partial: bool = False) -> PropertyInput:
    """Turn a JSON body or form fields into a PropertyInput."""
    try:
        fields = PropertyFields.model_validate(raw).model_dump(exclude_unset=True)
    except PydanticValidationError as e:
        raise _first_error(e) from None
    fields = {k: v for k, v in fields.items() if v is not None}
    if not partial:
        for name in _REQUIRED_ON_CREATE:
            if name not in fields:
                raise ValidationError(f"{name} is required", field=name)
        fields.setdefault("max_guests", 1)

    property_type = None
    if raw.get("property_type") not in (None, ""):
        property_type = parse_property_type(raw["property_type"])

    details_data = {}
    for key, value in raw.items():
        key = _DETAIL_ALIASES.get(key, key)
        if key in _DETAIL_FIELDS:
            details_data[key] = value

    amenity_ids = None
    for key in ("facilities", "amenities"):
        if key in raw:
            amenity_ids = normalize_amenity_ids(raw[key])
            break

    image_urls = _image_urls(raw["images"]) if "images" in raw else None
    return PropertyInput(
        fields=fields,
        property_type=property_type,
        details_data=details_data,
        amenity_ids=amenity_ids,
        image_urls=image_urls,
    )


class ImageResponse(BaseModel):
    id: int
    image_url: str
    is_primary: bool
    position: int

    class Config:
        from_attributes = True


class PropertySummary(BaseModel):
    id: int
    owner_id: int
    host_name: str | None = None
    title: str
    description: str | None = None
    address: str | None = None
    city: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    price_per_day: float
    max_guests: int
    property_type: PropertyType
    total_bedrooms: int | None = None
    total_rooms: int | None = None
    total_beds: int | None = None
    primary_image: str | None = None
    images: list[ImageResponse] = []
    amenities: list[AmenityResponse] = []
    created_at: datetime | None = None


class PropertyDetailResponse(PropertySummary):
    reviews: list[ReviewResponse] = []
    avg_rating: float = 0
    review_count: int = 0


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class PropertyListResponse(BaseModel):
    properties: list[PropertySummary]
    pagination: Pagination


def _summary_data(prop: Property) -> dict[str, Any]:
    images = [ImageResponse.model_validate(img) for img in prop.images]
    primary = next((img.image_url for img in images if img.is_primary), None)
    data = {
        "id": prop.id,
        "owner_id": prop.owner_id,
        "host_name": prop.owner.name if prop.owner else None,
        "title": prop.title,
        "description": prop.description,
        "address": prop.address,
        "city": prop.city,
        "latitude": prop.latitude,
        "longitude": prop.longitude,
        "price_per_day": float(prop.price_per_day),
        "max_guests": prop.max_guests,
        "property_type": prop.property_type,
        "primary_image": primary,
        "images": images,
        "amenities": [AmenityResponse.model_validate(a) for a in prop.amenities],
        "created_at": prop.created_at,
    }
    details = PropertyRepository.details_of(prop)
    if details is not None:
        name, value = details_field(details)
        data[name] = value
    return data


def property_summary(prop: Property) -> PropertySummary:
    return PropertySummary(**_summary_data(prop))


def property_detail(prop: Property, reviews: list) -> PropertyDetailResponse:
    ratings = [r.property_rating for r in reviews]
    return PropertyDetailResponse(
        **_summary_data(prop),
        reviews=[review_to_response(r) for r in reviews],
        avg_rating=round(sum(ratings) / len(ratings), 2) if ratings else 0,
        review_count=len(ratings),
    )
