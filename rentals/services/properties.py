"""
Property orchestrator: multi-table writes for create / update / delete.

A property is the base row plus exactly one subtype row (House / Flat / Room),
its amenity join rows and its images. Every write set runs in one transaction.
Image rows are the exception when settings.images_best_effort is on: each one
gets its own SAVEPOINT and a failure is logged and skipped instead of undoing
the property.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rentals.config import get_settings
from rentals.database import atomic
from rentals.domain import DETAILS_BY_TYPE, PropertyDetails, build_details
from rentals.errors import Forbidden, NotFound, ValidationError
from rentals.models.amenity import Amenity
from rentals.models.property import Property, PropertyType
from rentals.models.user import User
from rentals.repositories import AmenityRepository, PropertyRepository
from rentals.services.storage import ImageStorage, KIND_PROPERTY, Upload, check_image_filename

logger = logging.getLogger(__name__)


@dataclass
class PropertyInput:
    """A parsed create/update request. None means the request did not mention it."""

    fields: dict[str, Any] = field(default_factory=dict)
    property_type: PropertyType | None = None
    details_data: dict[str, Any] = field(default_factory=dict)
    amenity_ids: list[int] | None = None
    image_urls: list[str] | None = None


def _check_uploads(uploads: Sequence[Upload]) -> None:
    limit = get_settings().max_property_images
    if len(uploads) > limit:
        raise ValidationError(f"Too many files (maximum {limit})")
    for upload in uploads:
        check_image_filename(upload.filename)


def _resolve_amenities(db: Session, ids: list[int]) -> list[Amenity]:
    amenities = AmenityRepository(db).get_many(ids)
    missing = [i for i in ids if i not in {a.id for a in amenities}]
    if missing:
        raise ValidationError(
            "Unknown amenity id(s): " + ", ".join(str(i) for i in missing),
            field="facilities",
        )
    return amenities


def _insert_image(
    db: Session,
    props: PropertyRepository,
    prop: Property,
    url: str,
    position: int,
    is_primary: bool,
    best_effort: bool,
) -> bool:
    if not best_effort:
        props.add_image(prop, url, position, is_primary)
        return True
    try:
        with db.begin_nested():
            props.add_image(prop, url, position, is_primary)
        return True
    except SQLAlchemyError as e:
        logger.warning("Image insert failed for property %s (%s): %s", prop.id, url, e)
        return False


def _write_images(
    db: Session,
    prop: Property,
    uploads: Sequence[Upload],
    image_urls: Sequence[str],
    storage: ImageStorage,
    stored: list[str],
) -> int:
    """Store uploads, then add URL-only images. The first image written is the primary one."""
    best_effort = get_settings().images_best_effort
    props = PropertyRepository(db)
    written = 0

    urls: list[str] = []
    for upload in uploads:
        try:
            url = storage.store(upload, KIND_PROPERTY)
        except (OSError, ValidationError) as e:
            if not best_effort:
                raise
            logger.warning("Image upload failed for property %s (%s): %s", prop.id, upload.filename, e)
            continue
        stored.append(url)
        urls.append(url)
    urls.extend(u for u in image_urls if u)

    for url in urls:
        if _insert_image(db, props, prop, url, written, written == 0, best_effort):
            written += 1
    return written


def create_property(
    db: Session,
    owner: User,
    data: PropertyInput,
    uploads: Sequence[Upload] = (),
    storage: ImageStorage | None = None,
) -> Property:
    if data.property_type is None:
        raise ValidationError("property_type is required", field="property_type")
    details = build_details(data.property_type, data.details_data)
    _check_uploads(uploads)
    amenities = _resolve_amenities(db, data.amenity_ids) if data.amenity_ids else []

    storage = storage or ImageStorage()
    stored: list[str] = []
    props = PropertyRepository(db)
    try:
        with atomic(db):
            prop = props.add(Property(owner_id=owner.id, property_type=data.property_type, **data.fields))
            props.save_details(prop, details)
            if amenities:
                props.set_amenities(prop, amenities)
            images = _write_images(db, prop, uploads, data.image_urls or [], storage, stored)
    except Exception:
        for url in stored:
            storage.discard(url)
        raise

    db.refresh(prop)
    logger.info(
        "Property %s created by user %s (%s, %d amenities, %d images)",
        prop.id, owner.id, prop.property_type.value, len(amenities), images,
    )
    return prop


def _owned_property(db: Session, owner: User, property_id: int, action: str) -> Property:
    prop = PropertyRepository(db).get(property_id)
    if not prop:
        raise NotFound("Property not found")
    if prop.owner_id != owner.id:
        raise Forbidden(f"You do not have permission to {action} this property")
    return prop


def _details_for_update(prop: Property, data: PropertyInput) -> PropertyDetails | None:
    """New subtype values, or None when the subtype row stays as it is."""
    if data.property_type is not None and data.property_type != prop.property_type:
        # Type change: the new subtype row needs its own field
        return build_details(data.property_type, data.details_data)
    _, field_name = DETAILS_BY_TYPE[prop.property_type]
    if field_name in data.details_data:
        return build_details(prop.property_type, data.details_data)
    return None


def update_property(
    db: Session,
    owner: User,
    property_id: int,
    data: PropertyInput,
    uploads: Sequence[Upload] = (),
    storage: ImageStorage | None = None,
) -> Property:
    """Partial update. Amenities and images, when supplied, replace the existing set."""
    prop = _owned_property(db, owner, property_id, "update")
    details = _details_for_update(prop, data)
    _check_uploads(uploads)
    amenities = _resolve_amenities(db, data.amenity_ids) if data.amenity_ids is not None else None
    replace_images = bool(uploads) or data.image_urls is not None

    storage = storage or ImageStorage()
    stored: list[str] = []
    props = PropertyRepository(db)
    old_urls = [img.image_url for img in prop.images] if replace_images else []
    try:
        with atomic(db):
            for key, value in data.fields.items():
                setattr(prop, key, value)
            if data.property_type is not None:
                prop.property_type = data.property_type
            if details is not None:
                props.save_details(prop, details)
            if amenities is not None:
                props.set_amenities(prop, amenities)
            if replace_images:
                props.clear_images(prop)
                _write_images(db, prop, uploads, data.image_urls or [], storage, stored)
    except Exception:
        for url in stored:
            storage.discard(url)
        raise

    for url in old_urls:
        if url not in (data.image_urls or []):
            storage.discard(url)
    db.refresh(prop)
    logger.info("Property %s updated by user %s", prop.id, owner.id)
    return prop


def delete_property(db: Session, owner: User, property_id: int, storage: ImageStorage | None = None) -> None:
    prop = _owned_property(db, owner, property_id, "delete")
    urls = [img.image_url for img in prop.images]
    with atomic(db):
        PropertyRepository(db).delete(prop)
    storage = storage or ImageStorage()
    for url in urls:
        storage.discard(url)
    logger.info("Property %s deleted by user %s", property_id, owner.id)
