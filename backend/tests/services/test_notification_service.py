from unittest.mock import MagicMock

import pytest

from drivigo.core.exceptions import ServiceException, TemplateNotFoundException
from drivigo.models.notification import Notification
from drivigo.services.notification_service import NotificationService
from drivigo.services.sms_service import SMSStatus


class FakePushService:
    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []

    def send_push_notification(self, user_id, title, body, notification_type=None, data=None):
        self.sent.append({"user_id": user_id, "title": title, "body": body})
        return {"sent": 1, "failed": 0, "expired": 0, "results": []}


class FakeSMSService:
    def __init__(self, status=SMSStatus.SUCCESS) -> None:
        self.status = status
        self.sent: list[tuple[str, str]] = []

    async def send_sms_with_status(self, to_number, message):
        self.sent.append((to_number, message))
        if self.status is SMSStatus.SUCCESS:
            return {"sid": "SM123"}, self.status
        return None, self.status


class FakeRealtime:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    async def publish_to_user(self, user_id, event):
        self.events.append((user_id, event))
        return 1


@pytest.fixture
def email_service():
    service = MagicMock()
    service.send_notification_email.return_value = {"id": "email-1"}
    return service


def _service(db, email_service, sms=None, push=None, realtime=None):
    return NotificationService(
        db,
        push_service=push or FakePushService(),
        email_service=email_service,
        sms_service=sms or FakeSMSService(),
        realtime=realtime or FakeRealtime(),
    )


@pytest.mark.asyncio
async def test_all_channels_delivered_and_stamped(db, learner, templates, email_service):
    push = FakePushService()
    sms = FakeSMSService()
    realtime = FakeRealtime()
    service = _service(db, email_service, sms=sms, push=push, realtime=realtime)

    result = await service.send_notification(
        learner.id,
        "lesson_reminder_sms",
        {"lesson_time": "08:00-09:00", "instructor_name": "Ravi"},
        ["push", "email", "sms"],
    )

    assert result["success"] is True
    assert all(outcome["success"] for outcome in result["results"].values())
    assert result["results"]["sms"]["sid"] == "SM123"
    assert push.sent[0]["title"] == "Reminder"
    assert sms.sent == [
        ("+919811111111", "Reminder. Your lesson at 08:00-09:00 with Ravi is tomorrow.")
    ]
    email_service.send_notification_email.assert_called_once_with(
        "learner@example.com",
        "Reminder",
        "Reminder. Your lesson at 08:00-09:00 with Ravi is tomorrow.",
        "Asha Learner",
    )
    assert realtime.events[0][0] == learner.id
    assert realtime.events[0][1]["event"] == "newNotification"

    db.expire_all()
    notification = db.get(Notification, result["notificationId"])
    assert notification.push_sent_at is not None
    assert notification.email_sent_at is not None
    assert notification.sms_sent_at is not None


@pytest.mark.asyncio
async def test_failing_channel_does_not_block_others(db, learner, templates, email_service):
    email_service.send_notification_email.side_effect = ServiceException("Resend down")
    service = _service(db, email_service, sms=FakeSMSService(SMSStatus.ERROR))

    result = await service.send_notification(
        learner.id, "lesson_completion_push", {"student_name": "Asha"}, ["email", "sms", "push"]
    )

    assert result["results"]["email"] == {"success": False, "error": "Resend down"}
    assert result["results"]["sms"]["success"] is False
    assert result["results"]["push"]["success"] is True

    db.expire_all()
    notification = db.get(Notification, result["notificationId"])
    assert notification.push_sent_at is not None
    assert notification.email_sent_at is None
    assert notification.sms_sent_at is None


@pytest.mark.asyncio
async def test_sms_without_phone_number(db, instructor, templates, email_service):
    service = _service(db, email_service)

    result = await service.send_notification(
        instructor.id, "lesson_completion_push", {}, ["sms"]
    )

    assert result["results"]["sms"] == {
        "success": False,
        "error": "User phone number not found",
    }


@pytest.mark.asyncio
async def test_default_channels_and_missing_placeholders(db, learner, templates, email_service):
    push = FakePushService()
    service = _service(db, email_service, push=push)

    result = await service.send_notification(learner.id, "lesson_completion_push")

    assert set(result["results"]) == {"push", "email"}
    assert push.sent[0]["body"] == "Great job {{student_name}}! Your progress has been recorded."


@pytest.mark.asyncio
async def test_unknown_template_raises(db, learner, templates, email_service):
    service = _service(db, email_service)

    with pytest.raises(TemplateNotFoundException):
        await service.send_notification(learner.id, "missing_template", {}, ["push"])

    assert db.query(Notification).count() == 0


@pytest.mark.asyncio
async def test_realtime_failure_is_logged_not_raised(db, learner, templates, email_service):
    realtime = MagicMock()
    realtime.publish_to_user.side_effect = RuntimeError("socket gone")
    service = _service(db, email_service, realtime=realtime)

    result = await service.send_notification(
        learner.id, "lesson_completion_push", {"student_name": "Asha"}, ["push"]
    )

    assert result["results"]["push"]["success"] is True
