"""
Gemini gateway tests – request envelope, timeout and error mapping.
The requests session is mocked; nothing leaves the process.
"""

from unittest import mock

import pytest
import requests

from conftest import FakeResponse, gemini_body
from healthai.errors import UpstreamError
from healthai.services.llm_gateway import GeminiGateway


@pytest.fixture
def session():
    return mock.Mock(spec=requests.Session)


@pytest.fixture
def gateway(session):
    return GeminiGateway(
        base_url="https://generativelanguage.googleapis.com/v1beta/",
        model="gemini-pro",
        session=session,
    )


class TestGeminiGateway:
    def test_posts_envelope_with_key_and_timeout(self, gateway, session):
        session.post.return_value = FakeResponse(200, text=gemini_body("ok"))

        raw = gateway.complete("Suggest something", "secret-key")

        assert raw == gemini_body("ok")
        args, kwargs = session.post.call_args
        assert args[0] == ("https://generativelanguage.googleapis.com/v1beta"
                           "/models/gemini-pro:generateContent")
        assert kwargs["headers"]["x-goog-api-key"] == "secret-key"
        assert "params" not in kwargs
        assert "secret-key" not in args[0]
        assert kwargs["json"] == {"contents": [{"parts": [{"text": "Suggest something"}]}]}
        assert kwargs["timeout"] == 30

    def test_single_attempt_on_non_200(self, gateway, session):
        session.post.return_value = FakeResponse(503, text='{"error": "overloaded"}')

        with pytest.raises(UpstreamError) as exc_info:
            gateway.complete("p", "k")

        assert "503" in exc_info.value.message
        assert session.post.call_count == 1

    def test_timeout_maps_to_upstream_error(self, gateway, session):
        session.post.side_effect = requests.Timeout("read timed out")
        with pytest.raises(UpstreamError):
            gateway.complete("p", "k")

    def test_connection_error_maps_to_upstream_error(self, gateway, session):
        session.post.side_effect = requests.ConnectionError("dns failure")
        with pytest.raises(UpstreamError):
            gateway.complete("p", "k")

    def test_error_message_hides_api_key(self, gateway, session):
        session.post.return_value = FakeResponse(400, text="bad request")
        with pytest.raises(UpstreamError) as exc_info:
            gateway.complete("p", "super-secret")
        assert "super-secret" not in exc_info.value.message

    def test_complete_text_extracts_generated_text(self, gateway, session):
        session.post.return_value = FakeResponse(200, text=gemini_body("Hello clinician"))
        assert gateway.complete_text("p", "k") == "Hello clinician"

    def test_connection_error_hides_api_key(self, gateway, session, caplog):
        session.post.side_effect = requests.ConnectionError(
            "Max retries exceeded with url: /models/gemini-pro:generateContent?key=super-secret"
        )
        with caplog.at_level("ERROR", logger="healthai.llm"):
            with pytest.raises(UpstreamError) as exc_info:
                gateway.complete("p", "super-secret")

        assert "super-secret" not in exc_info.value.message
        assert "ConnectionError" in exc_info.value.message
        assert "super-secret" not in caplog.text
