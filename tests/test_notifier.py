"""Tests for WebhookNotifier."""

from unittest.mock import MagicMock

import pytest
import requests

from shellrun.errors import NotificationError
from shellrun.notifier import Notifier, WebhookNotifier
from shellrun.schemas import RunResult, RunStatus


@pytest.fixture
def result():
    return RunResult(
        status=RunStatus.SUCCESS,
        capture={"dims": b"640x480"},
        custom_data={"id": 7},
    )


def _session(status_code=200, text=""):
    session = MagicMock()
    session.post.return_value.status_code = status_code
    session.post.return_value.text = text
    return session


class TestWebhookNotifier:
    """Tests for posting results to webhooks."""

    def test_is_a_notifier(self):
        assert isinstance(WebhookNotifier(session=_session()), Notifier)

    def test_posts_result_as_json(self, result):
        session = _session()

        WebhookNotifier(session=session, timeout=5)("http://example.com/hook", result)

        session.post.assert_called_once_with(
            "http://example.com/hook",
            json={
                "status": "success",
                "error": None,
                "capture": {"dims": "640x480"},
                "customData": {"id": 7},
            },
            headers={"Content-Type": "application/json"},
            timeout=5,
        )

    def test_failure_result(self):
        session = _session()
        failed = RunResult(status=RunStatus.FAILURE, error="boom")

        WebhookNotifier(session=session)("http://example.com/hook", failed)

        payload = session.post.call_args.kwargs["json"]
        assert payload["status"] == "failure"
        assert payload["error"] == "boom"

    def test_binary_capture_is_replaced_in_payload(self):
        session = _session()
        binary = RunResult(status=RunStatus.SUCCESS, capture={"png": b"\x89PNG\r\n"})

        WebhookNotifier(session=session)("http://example.com/hook", binary)

        payload = session.post.call_args.kwargs["json"]
        assert payload["capture"] == {"png": "\ufffdPNG\r\n"}
        assert binary.capture == {"png": b"\x89PNG\r\n"}

    def test_error_status(self, result):
        session = _session(status_code=500, text="oops")

        with pytest.raises(NotificationError) as exc_info:
            WebhookNotifier(session=session)("http://example.com/hook", result)

        assert exc_info.value.status_code == 500
        assert exc_info.value.url == "http://example.com/hook"
        assert "oops" in str(exc_info.value)

    def test_redirect_status_fails(self, result):
        with pytest.raises(NotificationError):
            WebhookNotifier(session=_session(status_code=302))("http://x", result)

    def test_transport_error(self, result):
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(NotificationError, match="refused") as exc_info:
            WebhookNotifier(session=session)("http://example.com/hook", result)

        assert exc_info.value.status_code is None
