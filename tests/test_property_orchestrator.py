import io

import pytest
from sqlalchemy.exc import SQLAlchemyError

from rentals.config import get_settings
from rentals.errors import Forbidden, NotFound
from rentals.models import Flat, House, Property, PropertyImage, property_amenities
from rentals.repositories import PropertyRepository
from rentals.schemas.property import parse_property_input
from rentals.services.properties import create_property, delete_property, update_property

from conftest import house_payload, make_user

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class FakeUpload:
    def __init__(self, filename, content=PNG):
        self.filename = filename
        self.file = io.BytesIO(content)


@pytest.fixture
def host(db):
    return make_user(db, "Hana Host", "host@example.com", is_host=True)


def failing_add_image(bad_url):
    original = PropertyRepository.add_image

    def add_image(self, prop, url, position, is_primary):
        if url == bad_url:
            raise SQLAlchemyError("disk full")
        return original(self, prop, url, position, is_primary)

    return add_image


def test_amenity_failure_rolls_back_everything(db, host, monkeypatch):
    def boom(self, prop, amenities):
        raise SQLAlchemyError("join table unavailable")

    monkeypatch.setattr(PropertyRepository, "set_amenities", boom)
    with pytest.raises(SQLAlchemyError):
        create_property(db, host, parse_property_input(house_payload(facilities=[1, 2])))

    assert db.query(Property).count() == 0
    assert db.query(House).count() == 0
    assert db.query(property_amenities).count() == 0


def test_failed_image_is_skipped_when_best_effort(db, host, monkeypatch):
    monkeypatch.setattr(PropertyRepository, "add_image", failing_add_image("https://cdn.example.com/a.jpg"))
    images = ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg", "https://cdn.example.com/c.jpg"]

    prop = create_property(db, host, parse_property_input(house_payload(images=images, facilities=[1])))

    assert db.query(Property).count() == 1
    assert [a.id for a in prop.amenities] == [1]
    assert [(i.image_url, i.is_primary) for i in prop.images] == [
        ("https://cdn.example.com/b.jpg", True),
        ("https://cdn.example.com/c.jpg", False),
    ]


def test_failed_image_rolls_back_when_not_best_effort(db, host, monkeypatch):
    monkeypatch.setattr(get_settings(), "images_best_effort", False)
    monkeypatch.setattr(PropertyRepository, "add_image", failing_add_image("https://cdn.example.com/b.jpg"))
    images = ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"]

    with pytest.raises(SQLAlchemyError):
        create_property(db, host, parse_property_input(house_payload(images=images)))

    assert db.query(Property).count() == 0
    assert db.query(PropertyImage).count() == 0


def test_stored_files_removed_when_creation_rolls_back(db, host, storage, monkeypatch, tmp_path):
    def boom(self, prop, url, position, is_primary):
        raise SQLAlchemyError("image table unavailable")

    monkeypatch.setattr(PropertyRepository, "add_image", boom)
    monkeypatch.setattr(get_settings(), "images_best_effort", False)
    uploads = [FakeUpload("front.png")]

    with pytest.raises(SQLAlchemyError):
        create_property(db, host, parse_property_input(house_payload()), uploads, storage)

    # The file was written before the insert failed, then removed again
    assert (tmp_path / "property-images").is_dir()
    assert list((tmp_path / "property-images").iterdir()) == []
    assert db.query(Property).count() == 0


def test_uploads_come_before_url_images(db, host, storage):
    data = parse_property_input(house_payload(images=["https://cdn.example.com/z.jpg"]))
    prop = create_property(db, host, data, [FakeUpload("one.png"), FakeUpload("two.gif")], storage)

    urls = [i.image_url for i in prop.images]
    assert len(urls) == 3
    assert urls[0].endswith(".png") and prop.images[0].is_primary
    assert urls[1].endswith(".gif")
    assert urls[2] == "https://cdn.example.com/z.jpg"


def test_empty_upload_skipped_when_best_effort(db, host, storage):
    prop = create_property(
        db, host, parse_property_input(house_payload()), [FakeUpload("empty.png", b""), FakeUpload("ok.png")], storage
    )
    assert len(prop.images) == 1
    assert prop.images[0].is_primary is True


def test_update_to_flat_swaps_subtype(db, host):
    prop = create_property(db, host, parse_property_input(house_payload()))
    update_property(db, host, prop.id, parse_property_input({"property_type": "Flat", "rooms": "2"}, partial=True))

    assert db.query(House).count() == 0
    assert db.query(Flat).one().total_rooms == 2


def test_update_and_delete_check_ownership(db, host):
    other = make_user(db, "Other", "other@example.com", is_host=True)
    prop = create_property(db, host, parse_property_input(house_payload()))

    with pytest.raises(Forbidden):
        update_property(db, other, prop.id, parse_property_input({"title": "x"}, partial=True))
    with pytest.raises(Forbidden):
        delete_property(db, other, prop.id)
    with pytest.raises(NotFound):
        delete_property(db, host, 12345)

    delete_property(db, host, prop.id)
    assert db.query(Property).count() == 0
    assert db.query(House).count() == 0
