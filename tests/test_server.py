import httpx
import pytest
from fastapi.testclient import TestClient

from factories import anime, manga
from server.main import app
from server.routers import insights, wrapped


async def _noop(*args, **kwargs):
    return None


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(insights, "log_page_view", _noop)
    return TestClient(app)


def _profile():
    return {
        "mal_user_id": "42",
        "username": "tester",
        "gender": None,
        "anime_count": 2,
        "manga_count": 1,
        "anime_json": [anime("A", score=8, finish="2023-01-01"), anime("B", finish="2024-02-02")],
        "manga_json": [manga("M", finish="2024-03-01")],
    }


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_profile_not_found(client, monkeypatch):
    monkeypatch.setattr(insights, "get_profile", _noop)
    response = client.get("/api/profile/404")
    assert response.status_code == 404


def test_profile_lists_available_years(client, monkeypatch):
    async def get_profile(mal_id):
        return _profile()

    monkeypatch.setattr(insights, "get_profile", get_profile)
    body = client.get("/api/profile/42").json()
    assert body["username"] == "tester"
    assert body["available_years"] == [2024, 2023]


def test_insights_prefers_stored_snapshot(client, monkeypatch):
    async def get_stored(mal_id, year):
        assert year == "2024"
        return {"selected_year": 2024, "cached": True}

    monkeypatch.setattr(insights, "get_stored_insights", get_stored)
    body = client.get("/api/insights/42?year=2024").json()
    assert body["source"] == "stored"
    assert body["insights"]["cached"] is True


def test_insights_computed_from_stored_lists(client, monkeypatch):
    async def get_profile(mal_id):
        return _profile()

    monkeypatch.setattr(insights, "get_stored_insights", _noop)
    monkeypatch.setattr(insights, "get_profile", get_profile)
    body = client.get("/api/insights/42?year=2024").json()
    assert body["source"] == "computed"
    assert body["insights"]["anime"]["total"] == 1
    assert body["insights"]["manga"]["total"] == 1


def test_insights_bad_year(client):
    assert client.get("/api/insights/42?year=soon").status_code == 400


def _mal_handler(request):
    path = request.url.path
    if request.url.host == "api.jikan.moe":
        return httpx.Response(200, json={"data": {"images": {"jpg": {"image_url": "author.jpg"}}}})
    if request.headers.get("Authorization") != "Bearer good":
        return httpx.Response(401, json={"error": "invalid_token"})
    if path.endswith("/users/@me"):
        return httpx.Response(200, json={"id": 42, "name": "tester", "gender": "female"})
    if path.endswith("/animelist"):
        return httpx.Response(200, json={
            "data": [anime("Live Show", score=9, genres=["Drama"], finish="2024-05-05")],
            "paging": {},
        })
    if path.endswith("/mangalist"):
        return httpx.Response(200, json={
            "data": [manga("Live Manga", authors=[("Inio", "Asano", 3037)], finish="2024-06-06")],
            "paging": {},
        })
    if "/characters" in path:
        return httpx.Response(200, json={"data": []})
    return httpx.Response(404)


@pytest.fixture
def mal(monkeypatch):
    monkeypatch.setattr(
        wrapped, "make_async_client",
        lambda: httpx.AsyncClient(transport=httpx.MockTransport(_mal_handler)),
    )


def test_wrapped_requires_bearer(client, mal):
    assert client.get("/api/wrapped").status_code == 401


def test_wrapped_rejected_token(client, mal):
    response = client.get("/api/wrapped", headers={"Authorization": "Bearer bad"})
    assert response.status_code == 401


def test_wrapped_live(client, mal):
    response = client.get("/api/wrapped?year=2024", headers={"Authorization": "Bearer good"})
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["name"] == "tester"
    assert body["available_years"] == [2024]
    assert body["insights"]["anime"]["total"] == 1
    assert body["insights"]["manga"]["total"] == 1
    assert body["insights"]["portraits"]["authors"] == {"Inio Asano": "author.jpg"}


def test_token_exchange_errors(client, monkeypatch):
    monkeypatch.setenv("MAL_CLIENT_ID", "abc")
    monkeypatch.setattr(
        wrapped, "make_async_client",
        lambda: httpx.AsyncClient(transport=httpx.MockTransport(
            lambda request: httpx.Response(400, json={"error": "invalid_grant"})
        )),
    )
    missing = client.post("/api/auth/token", json={"code": "x"})
    assert missing.status_code == 400
    assert missing.json()["error"] == "missing_parameters"

    response = client.post(
        "/api/auth/token",
        json={"code": "x", "code_verifier": "v", "redirect_uri": "http://localhost/cb"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_grant"


def test_token_exchange_success(client, monkeypatch):
    monkeypatch.setenv("MAL_CLIENT_ID", "abc")
    monkeypatch.setattr(
        wrapped, "make_async_client",
        lambda: httpx.AsyncClient(transport=httpx.MockTransport(
            lambda request: httpx.Response(200, json={"access_token": "tok", "expires_in": 3600})
        )),
    )
    response = client.post(
        "/api/auth/token",
        json={"code": "x", "code_verifier": "v", "redirect_uri": "http://localhost/cb"},
    )
    assert response.status_code == 200
    assert response.json()["access_token"] == "tok"
