import pytest

from conftest import future


@pytest.fixture
def completed_booking(client, users, listing):
    _, guest_headers = users["guest"]
    _, host_headers = users["host"]
    booking = client.post(
        "/api/bookings",
        json={"property_id": listing["id"], "start_date": future(2), "end_date": future(4)},
        headers=guest_headers,
    ).json()
    url = f"/api/bookings/{booking['id']}/status"
    client.put(url, json={"status": "Confirmed"}, headers=host_headers)
    client.put(url, json={"status": "Completed"}, headers=host_headers)
    return booking


def review_body(booking, **overrides):
    body = {
        "booking_id": booking["id"],
        "property_id": booking["property_id"],
        "property_rating": 4,
        "property_review": "Lovely stay",
        "host_rating": 5,
    }
    body.update(overrides)
    return body


def test_review_completed_booking(client, users, completed_booking):
    _, headers = users["guest"]
    r = client.post("/api/reviews", json=review_body(completed_booking), headers=headers)
    assert r.status_code == 201, r.text
    assert r.json()["author_name"] == "Gus Guest"

    detail = client.get(f"/api/properties/{completed_booking['property_id']}").json()
    assert detail["review_count"] == 1
    assert detail["avg_rating"] == 4


def test_pending_booking_cannot_be_reviewed(client, users, listing):
    _, headers = users["guest"]
    booking = client.post(
        "/api/bookings",
        json={"property_id": listing["id"], "start_date": future(2), "end_date": future(4)},
        headers=headers,
    ).json()
    r = client.post("/api/reviews", json=review_body(booking), headers=headers)
    assert r.status_code == 400
    assert r.json()["message"] == "You can only review properties from completed bookings"


def test_second_review_conflicts(client, users, completed_booking):
    _, headers = users["guest"]
    client.post("/api/reviews", json=review_body(completed_booking), headers=headers)
    r = client.post("/api/reviews", json=review_body(completed_booking), headers=headers)
    assert r.status_code == 409


def test_rating_out_of_range(client, users, completed_booking):
    _, headers = users["guest"]
    r = client.post("/api/reviews", json=review_body(completed_booking, property_rating=6), headers=headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid request"


def test_only_author_edits_or_deletes(client, users, completed_booking):
    _, guest_headers = users["guest"]
    _, host_headers = users["host"]
    client.post("/api/reviews", json=review_body(completed_booking), headers=guest_headers)
    url = f"/api/reviews/{completed_booking['id']}"

    r = client.put(url, json={"property_rating": 1}, headers=host_headers)
    assert r.status_code == 404

    r = client.put(url, json={"property_rating": 2, "property_review": "Noisy"}, headers=guest_headers)
    assert r.status_code == 200
    assert r.json()["property_rating"] == 2
    assert r.json()["host_rating"] == 5

    assert client.delete(url, headers=host_headers).status_code == 404
    assert client.delete(url, headers=guest_headers).status_code == 200
    assert client.get(f"/api/reviews/property/{completed_booking['property_id']}").json() == []


def test_my_reviews_include_property(client, users, completed_booking):
    _, headers = users["guest"]
    client.post("/api/reviews", json=review_body(completed_booking), headers=headers)
    mine = client.get("/api/reviews/user", headers=headers).json()
    assert len(mine) == 1
    assert mine[0]["property_title"] == "Lake House"
    assert mine[0]["property_city"] == "Annecy"


def test_duplicate_insert_past_the_check_conflicts(client, users, completed_booking, monkeypatch):
    from rentals.repositories import ReviewRepository

    _, headers = users["guest"]
    assert client.post("/api/reviews", json=review_body(completed_booking), headers=headers).status_code == 201

    # the pre-insert lookup misses, as when two requests race, so the unique index decides
    monkeypatch.setattr(ReviewRepository, "get_by_booking", lambda self, booking_id: None)
    r = client.post("/api/reviews", json=review_body(completed_booking), headers=headers)
    assert r.status_code == 409
    assert r.json()["message"] == "You have already reviewed this booking"
