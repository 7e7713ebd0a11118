import pytest
from starlette.websockets import WebSocketDisconnect

from tests.factories.builders import auth_headers


def test_bad_token_closes_socket(client):
    with client.websocket_connect("/ws") as websocket:
        websocket.send_json({"event": "authenticate", "data": "not-a-token"})
        assert websocket.receive_json() == {
            "event": "error",
            "data": {"message": "Token is not valid"},
        }
        with pytest.raises(WebSocketDisconnect) as exc_info:
            websocket.receive_json()
    assert exc_info.value.code == 4401


@pytest.mark.parametrize(
    "send",
    [
        lambda websocket: websocket.send_bytes(b"\x00\x01"),
        lambda websocket: websocket.send_text("not json"),
    ],
)
def test_unreadable_authenticate_frame_closes_socket(client, send):
    with client.websocket_connect("/ws") as websocket:
        send(websocket)
        assert websocket.receive_json() == {
            "event": "error",
            "data": {"message": "Token is not valid"},
        }
        with pytest.raises(WebSocketDisconnect) as exc_info:
            websocket.receive_json()
    assert exc_info.value.code == 4401


def test_authenticated_socket_receives_new_notifications(client, learner, templates):
    token = auth_headers(learner)["Authorization"].split(" ", 1)[1]

    with client.websocket_connect("/ws") as websocket:
        websocket.send_json({"event": "authenticate", "data": token})
        assert websocket.receive_json() == {
            "event": "authenticated",
            "data": {"userId": learner.id},
        }

        response = client.post(
            "/api/notifications/send",
            headers=auth_headers(learner),
            json={
                "userId": learner.id,
                "type": "lesson_completion_push",
                "data": {"student_name": "Asha"},
                "channels": ["push"],
            },
        )
        assert response.status_code == 200

        event = websocket.receive_json()
        assert event["event"] == "newNotification"
        assert event["data"]["id"] == response.json()["notificationId"]
        assert event["data"]["message"] == (
            "Great job Asha! Your progress has been recorded."
        )


def test_metrics_endpoint(client):
    client.get("/health")

    response = client.get("/internal/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "drivigo_http_request_duration_seconds" in response.text
    assert "drivigo_prometheus_scrapes_total" in response.text


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.headers["X-Request-ID"]


def test_binary_frames_after_authentication_are_ignored(client, learner, templates):
    token = auth_headers(learner)["Authorization"].split(" ", 1)[1]

    with client.websocket_connect("/ws") as websocket:
        websocket.send_json({"event": "authenticate", "data": token})
        websocket.receive_json()
        websocket.send_bytes(b"\x00\x01")

        response = client.post(
            "/api/notifications/send",
            headers=auth_headers(learner),
            json={
                "userId": learner.id,
                "type": "lesson_completion_push",
                "data": {"student_name": "Asha"},
                "channels": ["push"],
            },
        )

        assert websocket.receive_json()["data"]["id"] == response.json()["notificationId"]
