from types import SimpleNamespace

from drivigo.services.notification_service import render_template, template_title
from drivigo.services.push_notification_service import notification_url


def test_render_template_replaces_known_placeholders():
    rendered = render_template(
        "Hi {{student_name}}, lesson at {{ lesson_time }}.",
        {"student_name": "Asha", "lesson_time": "08:00-09:00"},
    )
    assert rendered == "Hi Asha, lesson at 08:00-09:00."


def test_render_template_leaves_unknown_placeholders():
    assert render_template("Car: {{car_model}}", {}) == "Car: {{car_model}}"


def test_render_template_stringifies_values():
    assert render_template("{{hours}} hours", {"hours": 2.5}) == "2.5 hours"


def test_render_template_none_renders_empty():
    assert render_template("Phone: {{phone}}", {"phone": None}) == "Phone: "


def test_template_title_prefers_subject():
    template = SimpleNamespace(subject="Booking confirmed", content="Your lesson. See you.")
    assert template_title(template) == "Booking confirmed"


def test_template_title_falls_back_to_first_sentence():
    template = SimpleNamespace(subject="", content="Lesson reminder. Tomorrow at 8.")
    assert template_title(template) == "Lesson reminder"


def test_notification_url_matches_exact_type():
    assert notification_url("payment_received") == "/instructor-earnings"


def test_notification_url_matches_template_prefix():
    assert notification_url("lesson_completion_push") == "/progress"
    assert notification_url("booking_confirmation_email") == "/dashboard"


def test_notification_url_defaults_to_dashboard():
    assert notification_url("something_else") == "/dashboard"
    assert notification_url(None) == "/dashboard"
