"""Properties: search, detail, and owner create/update/delete."""
import json
import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from rentals.database import get_db
from rentals.dependencies import get_current_user, require_host
from rentals.domain import parse_property_type
from rentals.errors import NotFound, ValidationError
from rentals.models.user import User
from rentals.repositories import PropertyFilters, PropertyRepository
from rentals.schemas.property import (
    Pagination,
    PropertyDetailResponse,
    PropertyListResponse,
    PropertySummary,
    parse_property_input,
    property_detail,
    property_summary,
)
from rentals.services.properties import create_property, delete_property, update_property
from rentals.services.storage import ImageStorage, get_storage

router = APIRouter(prefix="/properties", tags=["properties"])

UPLOAD_FIELD = "property_images"
# Form keys that may repeat and are read as lists
_LIST_FIELDS = ("facilities", "amenities", "images")


@dataclass
class PropertyPayload:
    data: dict[str, Any]
    uploads: list[UploadFile] = field(default_factory=list)


async def property_payload(request: Request) -> PropertyPayload:
    """Read a create/update body sent as JSON or as multipart/urlencoded form data."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except json.JSONDecodeError:
            raise ValidationError("Request body is not valid JSON") from None
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        return PropertyPayload(data=body)

    form = await request.form()
    data: dict[str, Any] = {}
    uploads: list[UploadFile] = []
    for key in form.keys():
        values = form.getlist(key)
        if key == UPLOAD_FIELD:
            uploads.extend(v for v in values if isinstance(v, UploadFile) and v.filename)
            continue
        values = [v for v in values if isinstance(v, str)]
        if not values:
            continue
        data[key] = values if key in _LIST_FIELDS and len(values) > 1 else values[0]
    return PropertyPayload(data=data, uploads=uploads)


@router.get("", response_model=PropertyListResponse)
def list_properties(
    city: str | None = None,
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    bedrooms: int | None = Query(None, ge=0),
    property_type: str | None = None,
    search: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    filters = PropertyFilters(
        city=city,
        min_price=min_price,
        max_price=max_price,
        bedrooms=bedrooms,
        property_type=parse_property_type(property_type) if property_type else None,
        search=search,
    )
    rows, total = PropertyRepository(db).search(filters, page, limit)
    return PropertyListResponse(
        properties=[property_summary(p) for p in rows],
        pagination=Pagination(total=total, page=page, limit=limit, pages=math.ceil(total / limit)),
    )


@router.get("/host/{host_id}", response_model=list[PropertySummary])
def list_host_properties(host_id: int, db: Session = Depends(get_db)):
    return [property_summary(p) for p in PropertyRepository(db).list_by_owner(host_id)]


@router.get("/{property_id}", response_model=PropertyDetailResponse)
def get_property(property_id: int, db: Session = Depends(get_db)):
    props = PropertyRepository(db)
    prop = props.get(property_id)
    if not prop:
        raise NotFound("Property not found")
    return property_detail(prop, props.reviews_for(prop.id))


@router.post("", response_model=PropertyDetailResponse, status_code=201)
def create(
    current_user: User = Depends(require_host),
    payload: PropertyPayload = Depends(property_payload),
    db: Session = Depends(get_db),
    storage: ImageStorage = Depends(get_storage),
):
    data = parse_property_input(payload.data)
    prop = create_property(db, current_user, data, payload.uploads, storage)
    return property_detail(prop, [])


@router.put("/{property_id}", response_model=PropertyDetailResponse)
def update(
    property_id: int,
    current_user: User = Depends(get_current_user),
    payload: PropertyPayload = Depends(property_payload),
    db: Session = Depends(get_db),
    storage: ImageStorage = Depends(get_storage),
):
    data = parse_property_input(payload.data, partial=True)
    prop = update_property(db, current_user, property_id, data, payload.uploads, storage)
    return property_detail(prop, PropertyRepository(db).reviews_for(prop.id))


@router.delete("/{property_id}")
def delete(
    property_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: ImageStorage = Depends(get_storage),
):
    delete_property(db, current_user, property_id, storage)
    return {"message": "Property deleted successfully"}
