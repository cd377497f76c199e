# backend/tests/test_notion_proxy.py

import json

import httpx

from tooldir.notion.client import NotionTransportError, NotionUpstreamError
from tooldir.notion.proxy import CORS_HEADERS, NotionProxy


class FakeNotionClient:
    """query_database の呼び出しを記録するだけのスタブ。"""

    def __init__(self, result=None, error=None):
        self.result = result if result is not None else {"results": [], "has_more": False}
        self.error = error
        self.calls = []

    def query_database(self, overrides=None):
        self.calls.append(overrides)
        if self.error is not None:
            raise self.error
        return self.result


def _assert_cors(response):
    for name, value in CORS_HEADERS.items():
        assert response.headers[name] == value


def test_delete_is_rejected_with_405():
    client = FakeNotionClient()
    proxy = NotionProxy(client_factory=lambda: client)

    response = proxy.handle("DELETE")

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}
    assert client.calls == []
    _assert_cors(response)


def test_options_preflight_returns_empty_200_without_calling_notion():
    client = FakeNotionClient()
    proxy = NotionProxy(client_factory=lambda: client)

    response = proxy.handle("OPTIONS")

    assert response.status_code == 200
    assert response.body == ""
    assert client.calls == []
    _assert_cors(response)


def test_get_relays_notion_response_verbatim():
    payload = {
        "object": "list",
        "results": [{"id": "page-1", "properties": {}}],
        "next_cursor": None,
        "has_more": False,
    }
    client = FakeNotionClient(result=payload)
    proxy = NotionProxy(client_factory=lambda: client)

    response = proxy.handle("GET")

    assert response.status_code == 200
    assert response.json() == payload
    assert response.headers["Cache-Control"] == "public, max-age=60"
    assert response.headers["Content-Type"] == "application/json"
    assert client.calls == [None]
    _assert_cors(response)


def test_post_body_is_passed_as_overrides():
    client = FakeNotionClient()
    proxy = NotionProxy(client_factory=lambda: client)
    overrides = {"sorts": [{"property": "Tool Name", "direction": "ascending"}]}

    response = proxy.handle("POST", json.dumps(overrides).encode("utf-8"))

    assert response.status_code == 200
    assert client.calls == [overrides]


def test_post_with_empty_body_uses_default_query():
    client = FakeNotionClient()
    proxy = NotionProxy(client_factory=lambda: client)

    response = proxy.handle("POST", b"")

    assert response.status_code == 200
    assert client.calls == [None]


def test_post_with_invalid_json_is_400():
    client = FakeNotionClient()
    proxy = NotionProxy(client_factory=lambda: client)

    response = proxy.handle("POST", b"{not json")

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request body"
    assert client.calls == []


def test_post_with_non_object_json_is_400():
    client = FakeNotionClient()
    proxy = NotionProxy(client_factory=lambda: client)

    response = proxy.handle("POST", b"[1, 2, 3]")

    assert response.status_code == 400
    assert client.calls == []


def test_missing_credential_is_500_without_outbound_call(monkeypatch):
    monkeypatch.delenv("NOTION_API_KEY", raising=False)
    calls = []

    def fake_post(*args, **kwargs):
        calls.append((args, kwargs))
        return httpx.Response(status_code=200, content=b"{}")

    monkeypatch.setattr(httpx, "post", fake_post)

    response = NotionProxy().handle("GET")

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Configuration error"
    assert "NOTION_API_KEY" in body["message"]
    assert calls == []
    _assert_cors(response)


def test_missing_database_id_is_500(monkeypatch):
    monkeypatch.delenv("NOTION_DATABASE_ID", raising=False)

    response = NotionProxy().handle("POST")

    assert response.status_code == 500
    assert "NOTION_DATABASE_ID" in response.json()["message"]


def test_upstream_404_is_relayed_with_details():
    client = FakeNotionClient(
        error=NotionUpstreamError(status_code=404, body={"message": "not found"})
    )
    proxy = NotionProxy(client_factory=lambda: client)

    response = proxy.handle("GET")

    assert response.status_code == 404
    body = response.json()
    assert "error" in body
    assert body["details"] == {"message": "not found"}
    _assert_cors(response)


def test_upstream_404_through_real_client(monkeypatch):
    def fake_post(*args, **kwargs):
        return httpx.Response(status_code=404, content=b'{"message": "not found"}')

    monkeypatch.setattr(httpx, "post", fake_post)

    response = NotionProxy().handle("GET")

    assert response.status_code == 404
    assert response.json() == {
        "error": "Notion API error",
        "details": {"message": "not found"},
    }


def test_transport_error_is_500_with_message():
    client = FakeNotionClient(error=NotionTransportError("connection reset"))
    proxy = NotionProxy(client_factory=lambda: client)

    response = proxy.handle("GET")

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to fetch data from Notion",
        "message": "connection reset",
    }


def test_method_is_case_insensitive():
    client = FakeNotionClient()
    proxy = NotionProxy(client_factory=lambda: client)

    assert proxy.handle("get").status_code == 200


def test_malformed_base_url_is_500_with_cors(monkeypatch):
    monkeypatch.setenv("NOTION_API_BASE_URL", "http://[::1")

    response = NotionProxy().handle("GET")

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to fetch data from Notion"
    assert response.json()["message"]
    _assert_cors(response)


def test_unexpected_client_error_is_500_and_not_raised():
    client = FakeNotionClient(error=KeyError("results"))
    proxy = NotionProxy(client_factory=lambda: client)

    response = proxy.handle("GET")

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to fetch data from Notion",
        "message": "'results'",
    }
    _assert_cors(response)


def test_post_with_invalid_utf8_is_400():
    client = FakeNotionClient()
    proxy = NotionProxy(client_factory=lambda: client)

    response = proxy.handle("POST", b'{"page_size": "\xff"}')

    assert response.status_code == 400
    assert "UTF-8" in response.json()["message"]
    assert client.calls == []
