import httpx
import pytest

from cli import fetch_mal


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_fetch_list_follows_paging():
    seen_offsets = []

    def handler(request):
        offset = int(request.url.params["offset"])
        seen_offsets.append(offset)
        assert request.url.path == "/v2/users/@me/animelist"
        assert "list_status" in request.url.params["fields"]
        if offset == 0:
            return httpx.Response(200, json={
                "data": [{"node": {"id": 1, "title": "A"}}],
                "paging": {"next": "https://api.myanimelist.net/v2/users/@me/animelist?offset=100"},
            })
        return httpx.Response(200, json={"data": [{"node": {"id": 2, "title": "B"}}], "paging": {}})

    with _client(handler) as client:
        entries = fetch_mal.fetch_list("anime", client, delay=0)

    assert [e["node"]["title"] for e in entries] == ["A", "B"]
    assert seen_offsets == [0, fetch_mal.PAGE_SIZE]


def test_unauthorized_raises_permission_error():
    with _client(lambda request: httpx.Response(401, json={"error": "invalid_token"})) as client:
        with pytest.raises(PermissionError):
            fetch_mal.fetch_user(client)


def test_server_error_raises_http_error():
    with _client(lambda request: httpx.Response(500, text="boom")) as client:
        with pytest.raises(httpx.HTTPStatusError):
            fetch_mal.fetch_list_page("manga", 0, client)


def test_token_exchange_success():
    def handler(request):
        body = request.content.decode()
        assert "grant_type=authorization_code" in body
        assert "client_id=abc" in body
        return httpx.Response(200, json={"access_token": "tok", "refresh_token": "ref"})

    with _client(handler) as client:
        token = fetch_mal.exchange_code_for_token("code", "verifier", "http://localhost/cb", client, client_id="abc")
    assert token["access_token"] == "tok"


def test_token_exchange_maps_known_errors():
    response = httpx.Response(400, json={"error": "invalid_grant", "error_description": "expired"})
    with pytest.raises(fetch_mal.TokenExchangeError) as excinfo:
        fetch_mal.parse_token_response(response)
    assert excinfo.value.error == "invalid_grant"
    assert excinfo.value.status_code == 400
    assert "expired" in excinfo.value.description.lower()


def test_token_exchange_empty_and_non_json_bodies():
    with pytest.raises(fetch_mal.TokenExchangeError) as excinfo:
        fetch_mal.parse_token_response(httpx.Response(502, text=""))
    assert excinfo.value.error == "empty_response"

    with pytest.raises(fetch_mal.TokenExchangeError) as excinfo:
        fetch_mal.parse_token_response(httpx.Response(200, text="<html>"))
    assert excinfo.value.error == "invalid_response"


def test_token_exchange_requires_client_id(monkeypatch):
    monkeypatch.delenv("MAL_CLIENT_ID", raising=False)
    with pytest.raises(fetch_mal.TokenExchangeError) as excinfo:
        fetch_mal.exchange_code_for_token("c", "v", "r", client=None)
    assert excinfo.value.error == "server_configuration"
