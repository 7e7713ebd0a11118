from datetime import date

import pytest

from drivigo.models.booking import Booking
from drivigo.models.notification import Notification
from drivigo.models.progress import StudentProgress
from tests.factories.builders import (
    auth_headers,
    create_booking,
    create_instructor,
    create_user,
)


def _record(client, instructor, learner, booking, **overrides):
    payload = {
        "learner_user_id": learner.id,
        "booking_id": booking.id,
        "driving_hours_logged": 1.5,
        "skills_practiced": ["parallel_parking", "clutch_control"],
        "performance_rating": 4,
        "areas_to_improve": ["mirror_checks"],
    }
    payload.update(overrides)
    return client.post("/api/progress/record", headers=auth_headers(instructor), json=payload)


def test_record_progress_completes_booking(client, db, learner, instructor, templates):
    booking = create_booking(db, learner, instructor)

    response = _record(client, instructor, learner, booking)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["total_driving_hours"] == 1.5

    db.expire_all()
    assert db.get(Booking, booking.id).status == "completed"
    progress = db.query(StudentProgress).filter_by(booking_id=booking.id).one()
    assert progress.lesson_date == date(2030, 1, 7)
    assert progress.lesson_completed is True

    notification = db.query(Notification).filter_by(user_id=learner.id).one()
    assert notification.title == "Lesson complete"


def test_hours_accumulate_and_rerecord_does_not_double_count(client, db, learner, instructor):
    first = create_booking(db, learner, instructor, start_date=date(2030, 1, 7))
    second = create_booking(db, learner, instructor, start_date=date(2030, 1, 8))

    assert _record(client, instructor, learner, first).json()["total_driving_hours"] == 1.5
    assert _record(client, instructor, learner, second, driving_hours_logged=2).json()[
        "total_driving_hours"
    ] == 3.5

    rerecorded = _record(client, instructor, learner, second, driving_hours_logged=1)
    assert rerecorded.json()["total_driving_hours"] == 2.5
    db.expire_all()
    assert db.query(StudentProgress).count() == 2


def test_learner_cannot_record(client, db, learner, instructor):
    booking = create_booking(db, learner, instructor)

    response = _record(client, learner, learner, booking)

    assert response.status_code == 403
    assert response.json()["detail"] == "Only instructors can record progress"


def test_other_instructors_booking_is_forbidden(client, db, learner, instructor):
    booking = create_booking(db, learner, instructor)
    other = create_instructor(db, "other@example.com")

    response = _record(client, other, learner, booking)

    assert response.status_code == 403
    db.expire_all()
    assert db.query(StudentProgress).count() == 0


def test_learner_mismatch_is_rejected(client, db, learner, instructor):
    booking = create_booking(db, learner, instructor)
    stranger = create_user(db, "stranger@example.com")

    response = _record(client, instructor, stranger, booking)

    assert response.status_code == 400
    assert response.json()["detail"] == "Learner does not match booking"


def test_rating_out_of_range_is_rejected(client, db, learner, instructor):
    booking = create_booking(db, learner, instructor)

    response = _record(client, instructor, learner, booking, performance_rating=6)

    assert response.status_code == 400


def test_student_progress_defaults_to_learner(client, db, learner, instructor):
    booking = create_booking(db, learner, instructor)
    _record(client, instructor, learner, booking)

    body = client.get("/api/progress/student", headers=auth_headers(learner)).json()

    assert body["stats"]["total_lessons"] == 1
    assert body["stats"]["total_hours"] == 1.5
    assert body["stats"]["average_rating"] == 4.0
    assert body["stats"]["all_skills_practiced"] == ["clutch_control", "parallel_parking"]
    assert body["lessons"][0]["instructor_name"] == "Ravi Instructor"


@pytest.mark.parametrize("path", ["/api/progress/student", "/api/progress/report"])
def test_instructor_needs_student_id(client, instructor, path):
    response = client.get(path, headers=auth_headers(instructor))

    assert response.status_code == 400
    assert response.json()["detail"] == "Student ID required"


def test_instructor_history(client, db, learner, instructor):
    booking = create_booking(db, learner, instructor)
    _record(client, instructor, learner, booking)

    body = client.get("/api/progress/instructor", headers=auth_headers(instructor)).json()
    assert body["stats"]["total_lessons_taught"] == 1
    assert body["stats"]["unique_students"] == 1
    assert body["lessons"][0]["learner_email"] == "learner@example.com"

    denied = client.get("/api/progress/instructor", headers=auth_headers(learner))
    assert denied.status_code == 403
    assert denied.json()["detail"] == "Only instructors can view teaching history"


def test_booking_progress(client, db, learner, instructor):
    booking = create_booking(db, learner, instructor)

    empty = client.get(f"/api/progress/booking/{booking.id}", headers=auth_headers(learner))
    assert empty.json() == {"success": True, "progress": None}

    _record(client, instructor, learner, booking)
    body = client.get(f"/api/progress/booking/{booking.id}", headers=auth_headers(learner)).json()
    assert body["progress"]["driving_hours_logged"] == 1.5


def test_report_for_student(client, db, learner, instructor):
    booking = create_booking(db, learner, instructor)
    _record(client, instructor, learner, booking)

    body = client.get(
        f"/api/progress/report/{learner.id}", headers=auth_headers(instructor)
    ).json()

    report = body["report"]
    assert report["studentId"] == learner.id
    assert report["summary"]["total_lessons"] == 1
    types = [entry["type"] for entry in report["recommendations"]]
    assert types == ["practice", "confidence", "skills"]
    assert report["areasToImprove"][0]["area"] == "mirror_checks"

    skills = client.get("/api/progress/skills", headers=auth_headers(learner)).json()
    assert {row["skill"] for row in skills["skillsPracticed"]} == {
        "clutch_control",
        "parallel_parking",
    }
