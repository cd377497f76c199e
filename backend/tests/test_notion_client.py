# backend/tests/test_notion_client.py

import json

import httpx
import pytest

from tooldir.notion.client import (
    DEFAULT_QUERY,
    NotionClient,
    NotionClientError,
    NotionTransportError,
    NotionUpstreamError,
    build_query,
)


@pytest.fixture(autouse=True)
def _notion_env(monkeypatch):
    monkeypatch.setenv("NOTION_API_KEY", "dummy-key")
    monkeypatch.setenv("NOTION_DATABASE_ID", "dummy-db")


def test_query_database_success(monkeypatch):
    client = NotionClient()

    fake_response_data = {
        "object": "list",
        "results": [
            {
                "id": "page-1",
                "properties": {
                    "Tool Name": {"title": [{"plain_text": "Acme"}]},
                },
            }
        ],
        "has_more": False,
        "next_cursor": None,
    }
    captured = {}

    def fake_post(url, **kwargs):
        captured["url"] = url
        captured.update(kwargs)
        return httpx.Response(
            status_code=200,
            content=json.dumps(fake_response_data).encode("utf-8"),
        )

    monkeypatch.setattr(httpx, "post", fake_post)

    data = client.query_database()

    assert data == fake_response_data
    assert captured["url"] == "https://api.notion.com/v1/databases/dummy-db/query"
    assert captured["headers"]["Authorization"] == "Bearer dummy-key"
    assert captured["headers"]["Notion-Version"] == "2022-06-28"
    assert captured["json"] == {
        "filter": {"property": "Status", "select": {"equals": "Active"}},
        "sorts": [{"property": "Rating", "direction": "descending"}],
    }
    # タイムアウトは既定では指定しない
    assert captured["timeout"] is None


def test_query_database_merges_overrides(monkeypatch):
    client = NotionClient()
    captured = {}

    def fake_post(url, **kwargs):
        captured.update(kwargs)
        return httpx.Response(status_code=200, content=b'{"results": []}')

    monkeypatch.setattr(httpx, "post", fake_post)

    client.query_database({"sorts": [{"property": "Tool Name", "direction": "ascending"}]})

    assert captured["json"]["sorts"] == [{"property": "Tool Name", "direction": "ascending"}]
    assert captured["json"]["filter"] == DEFAULT_QUERY["filter"]


def test_build_query_does_not_mutate_default():
    query = build_query({"page_size": 10})
    query["filter"]["select"]["equals"] = "Draft"

    assert DEFAULT_QUERY["filter"]["select"]["equals"] == "Active"
    assert "page_size" not in DEFAULT_QUERY


def test_query_database_404_raises_upstream_error(monkeypatch):
    client = NotionClient()

    def fake_post(*args, **kwargs):
        return httpx.Response(status_code=404, content=b'{"message": "not found"}')

    monkeypatch.setattr(httpx, "post", fake_post)

    with pytest.raises(NotionUpstreamError) as exc_info:
        client.query_database()

    assert exc_info.value.status_code == 404
    assert exc_info.value.body == {"message": "not found"}


def test_query_database_non_json_error_body_is_kept_as_text(monkeypatch):
    client = NotionClient()

    def fake_post(*args, **kwargs):
        return httpx.Response(status_code=502, content=b"Bad Gateway")

    monkeypatch.setattr(httpx, "post", fake_post)

    with pytest.raises(NotionUpstreamError) as exc_info:
        client.query_database()

    assert exc_info.value.body == "Bad Gateway"


def test_query_database_network_error(monkeypatch):
    client = NotionClient()

    def fake_post(*args, **kwargs):
        raise httpx.ConnectError("network error")

    monkeypatch.setattr(httpx, "post", fake_post)

    with pytest.raises(NotionTransportError):
        client.query_database()


def test_query_database_malformed_success_body(monkeypatch):
    client = NotionClient()

    def fake_post(*args, **kwargs):
        return httpx.Response(status_code=200, content=b"<html>oops</html>")

    monkeypatch.setattr(httpx, "post", fake_post)

    with pytest.raises(NotionClientError):
        client.query_database()


def test_timeout_can_be_configured(monkeypatch):
    monkeypatch.setenv("NOTION_TIMEOUT_SECONDS", "7.5")

    client = NotionClient()

    assert client.config.timeout_seconds == 7.5


def test_invalid_base_url_raises_transport_error(monkeypatch):
    monkeypatch.setenv("NOTION_API_BASE_URL", "http://[::1")

    client = NotionClient()

    with pytest.raises(NotionTransportError):
        client.query_database()
