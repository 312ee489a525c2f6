"""Domain values shared by the availability engine and the property orchestrator."""
from __future__ import annotations

import json
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Union

from rentals.errors import ValidationError
from rentals.models.property import PropertyType

_DAY = timedelta(days=1)

# "Apartment" is what older clients send for flats
_TYPE_ALIASES = {
    "house": PropertyType.house,
    "flat": PropertyType.flat,
    "apartment": PropertyType.flat,
    "flat/apartment": PropertyType.flat,
    "room": PropertyType.room,
}


@dataclass(frozen=True)
class HouseDetails:
    total_bedrooms: int


@dataclass(frozen=True)
class FlatDetails:
    total_rooms: int


@dataclass(frozen=True)
class RoomDetails:
    total_beds: int


PropertyDetails = Union[HouseDetails, FlatDetails, RoomDetails]

# property type -> (details class, name of its required field)
DETAILS_BY_TYPE: dict[PropertyType, tuple[type, str]] = {
    PropertyType.house: (HouseDetails, "total_bedrooms"),
    PropertyType.flat: (FlatDetails, "total_rooms"),
    PropertyType.room: (RoomDetails, "total_beds"),
}


def parse_property_type(value: Any) -> PropertyType:
    if isinstance(value, PropertyType):
        return value
    key = str(value or "").strip().lower()
    if not key:
        raise ValidationError("property_type is required", field="property_type")
    try:
        return _TYPE_ALIASES[key]
    except KeyError:
        raise ValidationError(
            "property_type must be one of House, Flat/Apartment, Room",
            field="property_type",
        ) from None


def _positive_int(value: Any, field: str, required_for: str) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required for {required_for} properties", field=field)
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a whole number", field=field) from None
    if n <= 0:
        raise ValidationError(f"{field} must be greater than 0", field=field)
    return n


def build_details(property_type: PropertyType, data: dict[str, Any]) -> PropertyDetails:
    """Pick the subtype variant for property_type and validate its one required field."""
    cls, field = DETAILS_BY_TYPE[property_type]
    return cls(_positive_int(data.get(field), field, property_type.value))


def details_field(details: PropertyDetails) -> tuple[str, int]:
    if isinstance(details, HouseDetails):
        return "total_bedrooms", details.total_bedrooms
    if isinstance(details, FlatDetails):
        return "total_rooms", details.total_rooms
    if isinstance(details, RoomDetails):
        return "total_beds", details.total_beds
    raise TypeError(f"unknown property details: {details!r}")


def normalize_amenity_ids(raw: Any) -> list[int]:
    """
    Accepts a JSON array string ("[1,2,3]"), a comma separated string ("1,2"), a single
    scalar id, or a list (possibly of strings, possibly nested from repeated form fields).
    Returns unique integer ids in first-seen order; non-numeric entries are dropped.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return []
        try:
            raw = json.loads(text)
        except ValueError:
            raw = text.split(",")
    if not isinstance(raw, (list, tuple, set)):
        raw = [raw]

    ids: list[int] = []
    seen: set[int] = set()
    for item in raw:
        if isinstance(item, (list, tuple)):
            candidates = normalize_amenity_ids(list(item))
        else:
            candidates = [_as_id(item)]
        for n in candidates:
            if n is not None and n > 0 and n not in seen:
                seen.add(n)
                ids.append(n)
    return ids


def _as_id(item: Any) -> int | None:
    if isinstance(item, bool):
        return None
    if isinstance(item, int):
        return item
    if isinstance(item, float):
        return int(item) if item.is_integer() else None
    if isinstance(item, dict):
        return _as_id(item.get("id"))
    s = str(item).strip()
    return int(s) if s.isascii() and s.isdigit() else None


def number_of_days(start: date | datetime, end: date | datetime) -> int:
    """Whole days between start and end, rounded up (86,400,000 ms per day)."""
    if isinstance(start, datetime) != isinstance(end, datetime):
        start, end = _as_datetime(start), _as_datetime(end)
    return math.ceil((end - start) / _DAY)


def total_price(start: date | datetime, end: date | datetime, daily_rate: Decimal | float | int) -> Decimal:
    return Decimal(number_of_days(start, end)) * Decimal(str(daily_rate))


def _as_datetime(d: date | datetime) -> datetime:
    if isinstance(d, datetime):
        return d
    return datetime(d.year, d.month, d.day)
