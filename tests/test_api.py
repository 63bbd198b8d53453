import pytest
from fastapi.testclient import TestClient

from conftest import FakeAdapter
from main import create_app
from studbud.modules.generation.errors import RateLimitError

BASE = "/v1/study/sessions"


def _client(adapter=None) -> TestClient:
    return TestClient(create_app(adapter=adapter or FakeAdapter()))


@pytest.fixture
def client() -> TestClient:
    return _client()


def _new_session(client: TestClient) -> str:
    resp = client.post(BASE)
    assert resp.status_code == 201
    body = resp.json()
    assert body["phase"] == "IDLE"
    return body["id"]


def test_root_reports_provider(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["provider"] == "fake"


def test_text_to_viewing_and_export(client, photosynthesis_text):
    sid = _new_session(client)

    resp = client.post(f"{BASE}/{sid}/text", json={"text": photosynthesis_text})
    assert resp.json()["phase"] == "SELECTING_MODE"

    resp = client.post(f"{BASE}/{sid}/generate", json={"mode": "QUIZ", "count": 4})
    body = resp.json()
    assert body["phase"] == "VIEWING"
    assert body["total"] == 4
    for item in body["items"]:
        assert item["correct_answer"] in item["options"]

    resp = client.post(f"{BASE}/{sid}/next")
    assert resp.json()["cursor"] == 1

    resp = client.get(f"{BASE}/{sid}/export", params={"format": "text"})
    assert resp.status_code == 200
    assert "StudBud Practice Quiz" in resp.text
    assert "[CORRECT]" in resp.text

    resp = client.get(f"{BASE}/{sid}/export")
    assert len(resp.json()["items"]) == 4


def test_thin_text_offers_search(client):
    sid = _new_session(client)

    resp = client.post(f"{BASE}/{sid}/text", json={"text": "cats"})
    body = resp.json()
    assert body["phase"] == "INSUFFICIENT_CONTENT"
    assert body["search_seed"] == "cats"

    resp = client.post(f"{BASE}/{sid}/search")
    assert resp.json()["use_external_search"] is True

    resp = client.post(f"{BASE}/{sid}/generate", json={"mode": "QUIZ", "count": 3})
    body = resp.json()
    assert body["phase"] == "VIEWING"
    assert body["sources"][0]["uri"] == "https://example.org/cats"


def test_count_out_of_range_is_422_without_transition(client):
    sid = _new_session(client)
    client.post(f"{BASE}/{sid}/topic", json={"topic": "cats"})

    resp = client.post(f"{BASE}/{sid}/generate", json={"mode": "QUIZ", "count": 150})
    assert resp.status_code == 422
    assert resp.json()["detail"]["kind"] == "ValidationError"

    assert client.get(f"{BASE}/{sid}").json()["phase"] == "SELECTING_MODE"


def test_empty_text_is_422_with_error_detail(client):
    sid = _new_session(client)

    resp = client.post(f"{BASE}/{sid}/text", json={"text": "   "})
    assert resp.status_code == 422
    assert set(resp.json()["detail"]) == {"kind", "message"}
    assert client.get(f"{BASE}/{sid}").json()["phase"] == "IDLE"


def test_invalid_input_response_is_documented(client):
    paths = client.get("/openapi.json").json()["paths"]
    op = paths[f"{BASE}/{{session_id}}/generate"]["post"]
    schema = op["responses"]["422"]["content"]["application/json"]["schema"]
    assert schema["$ref"].endswith("/ErrorResponse")


def test_provider_failure_is_reported_in_state():
    client = _client(FakeAdapter(error=RateLimitError()))
    sid = _new_session(client)
    client.post(f"{BASE}/{sid}/topic", json={"topic": "cats"})

    resp = client.post(f"{BASE}/{sid}/generate", json={"mode": "FLASHCARDS", "count": 3})
    body = resp.json()
    assert resp.status_code == 200
    assert body["phase"] == "ERROR"
    assert body["error_kind"] == "RateLimitError"

    assert client.post(f"{BASE}/{sid}/reset").json()["phase"] == "IDLE"


def test_upload_text_file(client, photosynthesis_text):
    sid = _new_session(client)
    resp = client.post(
        f"{BASE}/{sid}/upload",
        files={"file": ("notes.txt", photosynthesis_text.encode(), "text/plain")},
    )
    assert resp.json()["phase"] == "SELECTING_MODE"


def test_out_of_phase_trigger_is_409(client):
    sid = _new_session(client)
    resp = client.post(f"{BASE}/{sid}/search")
    assert resp.status_code == 409
    assert resp.json()["detail"]["phase"] == "IDLE"


def test_unknown_session_is_404(client):
    assert client.get(f"{BASE}/missing").status_code == 404


def test_delete_session(client):
    sid = _new_session(client)
    assert client.delete(f"{BASE}/{sid}").status_code == 204
    assert client.get(f"{BASE}/{sid}").status_code == 404
