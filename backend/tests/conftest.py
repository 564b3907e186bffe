import json
import os
import tempfile

import pytest

# Settings are read at import time, so configure the environment first
_TMP_DIR = tempfile.mkdtemp(prefix="ssbprep-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/test.db"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "admin-pass"
os.environ["GEMINI_API_KEY"] = "test-key"
os.environ.pop("OPENROUTER_API_KEY", None)
os.environ.pop("LOG_FILE", None)

from fastapi.testclient import TestClient  # noqa: E402

from ssbprep import assessment, exercises  # noqa: E402
from ssbprep.db import Base, SessionLocal, engine  # noqa: E402
from ssbprep.main import app as fastapi_app  # noqa: E402
from ssbprep.models import AppDocument, AuthSession  # noqa: E402

Base.metadata.create_all(bind=engine)

FAKE_FEEDBACK = {
    "overall_summary": "Clear thinking with a positive outlook.",
    "olqs_demonstrated": ["Initiative", "courage", "Cooperation", "Made Up Quality"],
    "strengths": [{"point": "Acts quickly", "example_olq": "Initiative"}],
    "weaknesses": [{"point": "Short answers", "example_olq": "Power of Expression"}],
    "detailed_olq_assessment": [{"olq": "Initiative", "assessment": "Good"}],
    "actionable_advice": {"what_to_practice": ["More TATs"], "how_to_improve": ["Read"], "what_to_avoid": ["Negativity"]},
}


class FakeGeminiClient:
    """Stands in for the REST client; records prompts and returns canned output."""

    calls = []
    response = json.dumps(FAKE_FEEDBACK)
    written_response = "Question Number: 1\nOriginal Answer: test\nAssessment: fine\n\nFinal Summary: ok"
    fail = False

    async def generate(self, prompt, **kwargs):
        FakeGeminiClient.calls.append({"prompt": prompt, **kwargs})
        if FakeGeminiClient.fail:
            raise RuntimeError("model unavailable")
        return FakeGeminiClient.response

    async def generate_multimodal(self, parts, **kwargs):
        FakeGeminiClient.calls.append({"parts": parts, **kwargs})
        if FakeGeminiClient.fail:
            raise RuntimeError("model unavailable")
        return FakeGeminiClient.written_response

    async def aclose(self):
        return None


@pytest.fixture(autouse=True)
def fake_gemini(monkeypatch):
    FakeGeminiClient.calls = []
    FakeGeminiClient.response = json.dumps(FAKE_FEEDBACK)
    FakeGeminiClient.fail = False
    monkeypatch.setattr(assessment, "_new_client", lambda: FakeGeminiClient())
    return FakeGeminiClient


@pytest.fixture(autouse=True)
def clean_state():
    with SessionLocal() as db:
        db.query(AppDocument).delete()
        db.query(AuthSession).delete()
        db.commit()
    exercises._sessions.clear()
    yield
    exercises._sessions.clear()


@pytest.fixture()
def client():
    with TestClient(fastapi_app) as c:
        yield c


def login(client, name="Asha Rao", roll_number="SSB001"):
    r = client.post("/auth/login", json={"name": name, "roll_number": roll_number})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture()
def auth_headers(client):
    return login(client)


@pytest.fixture()
def admin_headers(client):
    r = client.post("/auth/admin/token", data={"username": "admin", "password": "admin-pass"})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}
