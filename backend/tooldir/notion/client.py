# backend/tooldir/notion/client.py

"""
Notion API との通信を担当するクライアントモジュール。
"""

import copy
from typing import Any, Dict, Optional

import httpx

from .config import NotionConfig, get_notion_config

# Status == Active のツールだけを Rating 降順で取得する
DEFAULT_QUERY: Dict[str, Any] = {
    "filter": {
        "property": "Status",
        "select": {"equals": "Active"},
    },
    "sorts": [
        {
            "property": "Rating",
            "direction": "descending",
        }
    ],
}


class NotionClientError(RuntimeError):
    """Notion クライアント全般の例外。"""


class NotionUpstreamError(NotionClientError):
    """Notion API が 2xx 以外を返した場合の例外。"""

    def __init__(self, status_code: int, body: Any = None) -> None:
        super().__init__(f"Notion API error: status_code={status_code}")
        self.status_code = status_code
        self.body = body


class NotionTransportError(NotionClientError):
    """接続エラー・レスポンス解析エラー時の例外。"""


def build_query(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    固定クエリに呼び出し元の上書き値を浅くマージしたボディを返す。

    DEFAULT_QUERY 自体は変更しない。
    """
    query: Dict[str, Any] = copy.deepcopy(DEFAULT_QUERY)
    if overrides:
        query.update(overrides)
    return query


class NotionClient:
    """
    Notion API の薄いラッパークライアント。

    - データベースの query（読み取り専用）
    """

    def __init__(self, config: Optional[NotionConfig] = None) -> None:
        self.config = config or get_notion_config()

    def _build_headers(self) -> Dict[str, str]:
        """
        Notion API 呼び出しに必要なヘッダーを構築。
        """
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Notion-Version": self.config.api_version,
            "Content-Type": "application/json",
        }

    @property
    def query_url(self) -> str:
        return f"{self.config.api_base_url}/databases/{self.config.database_id}/query"

    def query_database(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        データベースを 1 回だけ query し、Notion のレスポンス JSON をそのまま返す。

        :param overrides: filter / sorts などの上書き値（POST ボディ由来）
        :raises NotionUpstreamError: Notion が 4xx/5xx を返した場合
        :raises NotionTransportError: 接続エラーや JSON でないレスポンスの場合
        """
        try:
            response = httpx.post(
                self.query_url,
                headers=self._build_headers(),
                json=build_query(overrides),
                timeout=self.config.timeout_seconds,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            # 接続エラー・タイムアウトに加え、NOTION_API_BASE_URL が不正な場合もここに来る
            raise NotionTransportError(f"Failed to call Notion API: {exc}") from exc

        if response.status_code // 100 != 2:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            raise NotionUpstreamError(status_code=response.status_code, body=body)

        try:
            return response.json()
        except ValueError as exc:
            raise NotionTransportError(
                f"Unexpected Notion API response format: {exc}"
            ) from exc
