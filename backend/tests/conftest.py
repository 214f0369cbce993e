"""
Pytest configuration & fixtures for HealthAI backend tests.

Key design decisions:
  - Uses sqlite:///:memory: for speed and isolation.
  - OCR backend disabled and Gemini calls stubbed so no test touches
    the network.
"""

import json
import os
import sys
import uuid

import pytest

# ── 1. Ensure backend package is importable ──
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# ── 2. Set test environment BEFORE anything else ──
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["FLASK_SECRET_KEY"] = "test-secret-key"
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["OCR_BACKEND"] = "disabled"
os.environ["APP_ENV"] = "testing"

# ── 3. NOW safe to import application modules ──
from healthai.main import create_app
from healthai.container import get_services
from healthai.database import db as _db


def gemini_body(text: str) -> str:
    """Serialize a minimal Gemini generateContent response."""
    return json.dumps({
        "candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]
    })


class FakeResponse:
    """Stand-in for requests.Response."""

    def __init__(self, status_code=200, text="", payload=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if payload is None else json.dumps(payload)

    def json(self):
        if self._payload is not None:
            return self._payload
        return json.loads(self.text)


# ═══════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════

@pytest.fixture(scope="session")
def app():
    """Create application for testing."""
    application = create_app()
    application.config["TESTING"] = True
    return application


@pytest.fixture
def app_ctx(app):
    """One application context per test, shared by the fixtures below."""
    with app.app_context() as ctx:
        yield ctx


@pytest.fixture
def client(app, app_ctx):
    """Flask test client with database ready."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def services(app_ctx):
    return get_services()


@pytest.fixture
def stub_gemini(services, monkeypatch):
    """
    Replace the Gemini HTTP call. Set `.reply` to the generated text or
    `.error` to an exception instance; `.calls` records every prompt.
    """

    class _Stub:
        reply = "Medication: Amoxicillin, Dosage: 500mg, Frequency: twice daily"
        error = None
        calls = []

        def complete(self, prompt, api_key):
            self.calls.append(prompt)
            if self.error is not None:
                raise self.error
            return gemini_body(self.reply)

    stub = _Stub()
    stub.calls = []
    monkeypatch.setattr(services.gateway, "complete", stub.complete)
    return stub


@pytest.fixture
def patient_ids():
    return {"patientId": str(uuid.uuid4()), "clinicianId": str(uuid.uuid4())}


@pytest.fixture
def db_session(app_ctx):
    return _db.session
