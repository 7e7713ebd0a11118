import json
from types import SimpleNamespace
from unittest.mock import patch

from pydantic import SecretStr
from pywebpush import WebPushException
import pytest

from drivigo.core.config import settings
from drivigo.models.notification import PushSubscription
from drivigo.services.push_notification_service import PushNotificationService


@pytest.fixture
def configured(monkeypatch):
    monkeypatch.setattr(settings, "vapid_public_key", "public-key")
    monkeypatch.setattr(settings, "vapid_private_key", SecretStr("private-key"))


@pytest.fixture
def service(db):
    return PushNotificationService(db)


def _subscribe(service, user, endpoint):
    return service.subscribe(user.id, endpoint, "p256dh", "auth")


def test_unconfigured_send_is_a_noop(service, learner):
    _subscribe(service, learner, "https://push.example.com/a")

    with patch("drivigo.services.push_notification_service.webpush") as webpush:
        summary = service.send_push_notification(learner.id, "Title", "Body")

    webpush.assert_not_called()
    assert summary == {"sent": 0, "failed": 0, "expired": 0, "results": []}


def test_send_to_every_active_subscription(configured, service, learner):
    _subscribe(service, learner, "https://push.example.com/a")
    _subscribe(service, learner, "https://push.example.com/b")
    service.unsubscribe(learner.id, "https://push.example.com/b")

    with patch("drivigo.services.push_notification_service.webpush") as webpush:
        summary = service.send_push_notification(
            learner.id, "Lesson complete", "Well done", "lesson_completion_push"
        )

    assert summary["sent"] == 1
    kwargs = webpush.call_args.kwargs
    assert kwargs["subscription_info"]["endpoint"] == "https://push.example.com/a"
    assert kwargs["vapid_private_key"] == "private-key"
    payload = json.loads(kwargs["data"])
    assert payload["title"] == "Lesson complete"
    assert payload["data"]["url"] == "/progress"


def test_gone_subscription_is_deactivated(configured, db, service, learner):
    _subscribe(service, learner, "https://push.example.com/gone")
    error = WebPushException("gone", response=SimpleNamespace(status_code=410))

    with patch("drivigo.services.push_notification_service.webpush", side_effect=error):
        summary = service.send_push_notification(learner.id, "Title", "Body")

    assert summary["expired"] == 1
    assert summary["sent"] == 0
    db.expire_all()
    assert db.query(PushSubscription).one().is_active is False


def test_other_push_errors_keep_subscription(configured, db, service, learner):
    _subscribe(service, learner, "https://push.example.com/flaky")
    error = WebPushException("server error", response=SimpleNamespace(status_code=500))

    with patch("drivigo.services.push_notification_service.webpush", side_effect=error):
        summary = service.send_push_notification(learner.id, "Title", "Body")

    assert summary["failed"] == 1
    db.expire_all()
    assert db.query(PushSubscription).one().is_active is True
