from unittest.mock import AsyncMock, patch

from drivigo.models.instructor import InstructorAvailability, InstructorProfile
from drivigo.services.geocoding import GeocodedAddress, MapboxProvider
from tests.factories.builders import (
    LEARNER_LAT,
    LEARNER_LNG,
    auth_headers,
    create_instructor,
)

MONDAY = "2030-01-07"


def _find(client, start_date=MONDAY, time_slot="08:00-09:00"):
    return client.post(
        "/api/instructors/find",
        json={
            "startDate": start_date,
            "timeSlot": time_slot,
            "location": {"latitude": LEARNER_LAT, "longitude": LEARNER_LNG},
        },
    )


def test_find_filters_by_day_slot_and_radius(client, db):
    near = create_instructor(
        db,
        "near@example.com",
        name="Near",
        latitude=LEARNER_LAT + 0.01,  # roughly 1.1 km north
        slots=(("Monday", "08:00-09:00"),),
    )
    nearest = create_instructor(
        db, "nearest@example.com", name="Nearest", slots=(("Monday", "08:00-09:00"),)
    )
    create_instructor(
        db,
        "chennai@example.com",
        latitude=13.0827,
        longitude=80.2707,
        slots=(("Monday", "08:00-09:00"),),
    )
    create_instructor(db, "tuesday@example.com", slots=(("Tuesday", "08:00-09:00"),))
    create_instructor(db, "evening@example.com", slots=(("Monday", "17:00-18:00"),))
    create_instructor(
        db,
        "nowhere@example.com",
        latitude=None,
        longitude=None,
        slots=(("Monday", "08:00-09:00"),),
    )

    response = _find(client)

    assert response.status_code == 200
    rows = response.json()
    assert [row["user_id"] for row in rows] == [nearest.id, near.id]
    assert rows[0]["instructor_email"] == "nearest@example.com"
    assert rows[0]["car_model"] == "Maruti Swift"
    assert 1000 < rows[1]["distance_m"] < 1200


def test_find_returns_empty_list(client, instructor):
    response = _find(client, start_date="2030-01-08")  # Tuesday
    assert response.status_code == 200
    assert response.json() == []


def test_find_rejects_unknown_slot(client):
    response = _find(client, time_slot="03:00-04:00")
    assert response.status_code == 400


def test_get_profile(client, instructor):
    response = client.get("/api/instructor/profile", headers=auth_headers(instructor))

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Ravi Instructor"
    assert body["email"] == "instructor@example.com"
    assert body["car_model"] == "Maruti Swift"
    assert body["service_latitude"] == LEARNER_LAT


def test_update_profile_geocodes_service_address(client, db, instructor):
    location = GeocodedAddress(
        latitude=12.9352,
        longitude=77.6245,
        formatted_address="Koramangala, Bengaluru, Karnataka, India",
        provider_id="place.1",
        provider_data={},
    )
    with patch.object(MapboxProvider, "geocode", new=AsyncMock(return_value=location)) as geocode:
        response = client.put(
            "/api/instructor/profile",
            headers=auth_headers(instructor),
            json={
                "name": "Ravi K",
                "car_model": "Hyundai i20",
                "photo_url": None,
                "phone_number": "+919822222222",
                "service_address": "Koramangala, Bengaluru",
            },
        )

    assert response.status_code == 200
    assert response.json() == {"message": "Profile updated successfully!"}
    geocode.assert_awaited_once_with("Koramangala, Bengaluru")

    db.expire_all()
    profile = db.query(InstructorProfile).filter_by(user_id=instructor.id).one()
    assert profile.car_model == "Hyundai i20"
    assert profile.service_latitude == 12.9352
    assert profile.service_longitude == 77.6245
    assert profile.user.name == "Ravi K"


def test_update_profile_keeps_location_when_geocoding_finds_nothing(client, db, instructor):
    with patch.object(MapboxProvider, "geocode", new=AsyncMock(return_value=None)):
        response = client.put(
            "/api/instructor/profile",
            headers=auth_headers(instructor),
            json={
                "name": "Ravi",
                "car_model": "Tata Nexon",
                "photo_url": None,
                "phone_number": None,
                "service_address": "Nowhere at all",
            },
        )

    assert response.status_code == 200
    db.expire_all()
    profile = db.query(InstructorProfile).filter_by(user_id=instructor.id).one()
    assert profile.car_model == "Tata Nexon"
    assert profile.service_latitude == LEARNER_LAT
    assert profile.service_longitude == LEARNER_LNG


def test_availability_put_replaces_all_rows(client, db, instructor):
    headers = auth_headers(instructor)
    response = client.put(
        "/api/instructor/availability",
        headers=headers,
        json={
            "availability": [
                {"day": "Wednesday", "slot": "07:00-08:00"},
                {"day": "Friday", "slot": "17:00-18:00"},
                {"day": "Friday", "slot": "17:00-18:00"},
            ]
        },
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Availability updated successfully!"}

    listed = client.get("/api/instructor/availability", headers=headers).json()
    assert sorted((row["day_of_week"], row["time_slot"]) for row in listed) == [
        ("Friday", "17:00-18:00"),
        ("Wednesday", "07:00-08:00"),
    ]


def test_availability_invalid_slot_leaves_rows_untouched(client, db, instructor):
    response = client.put(
        "/api/instructor/availability",
        headers=auth_headers(instructor),
        json={"availability": [{"day": "Funday", "slot": "07:00-08:00"}]},
    )

    assert response.status_code == 400
    db.expire_all()
    rows = db.query(InstructorAvailability).all()
    assert [(row.day_of_week, row.time_slot) for row in rows] == [("Monday", "08:00-09:00")]


def test_availability_without_profile_is_not_found(client, learner):
    response = client.put(
        "/api/instructor/availability",
        headers=auth_headers(learner),
        json={"availability": []},
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Instructor profile not found."
