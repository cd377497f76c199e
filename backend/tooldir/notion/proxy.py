# backend/tooldir/notion/proxy.py

"""
Notion データベースへの読み取り専用プロキシ。

ブラウザから直接 Notion API を叩けない（トークンを隠す / CORS）ため、
固定クエリ（Status == Active, Rating 降順）を 1 回だけ投げて結果を中継する。

- OPTIONS          → 空ボディで即 200（外部呼び出しなし）
- GET / POST       → Notion を query して結果をそのまま返す
- それ以外のメソッド → 405

どの応答にも CORS ヘッダーを付与し、例外はハンドラの外へ投げない。
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Union

from tooldir.utils.config import ConfigurationError

from .client import NotionClient, NotionTransportError, NotionUpstreamError

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ("GET", "POST")

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}

CACHE_CONTROL = "public, max-age=60"

ClientFactory = Callable[[], NotionClient]


class InvalidRequestBodyError(ValueError):
    """POST ボディが JSON オブジェクトとして解釈できない場合の例外。"""


@dataclass
class ProxyResponse:
    """プロキシ 1 回分の応答。ボディは送信用にシリアライズ済み。"""

    status_code: int
    body: str = ""
    headers: Dict[str, str] = field(default_factory=dict)

    def json(self) -> Any:
        return json.loads(self.body) if self.body else None


def _json_response(
    status_code: int,
    payload: Any,
    extra_headers: Optional[Dict[str, str]] = None,
) -> ProxyResponse:
    headers = {**CORS_HEADERS, "Content-Type": "application/json"}
    if extra_headers:
        headers.update(extra_headers)
    return ProxyResponse(
        status_code=status_code,
        body=json.dumps(payload, ensure_ascii=False),
        headers=headers,
    )


def parse_overrides(body: Union[str, bytes, None]) -> Optional[Dict[str, Any]]:
    """
    POST ボディから query の上書き値を取り出す。

    空ボディは「上書きなし」として None を返す。
    """
    if body is None:
        return None
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidRequestBodyError(f"Request body is not valid UTF-8: {exc}") from exc
    if not body.strip():
        return None

    try:
        parsed = json.loads(body)
    except ValueError as exc:
        raise InvalidRequestBodyError(f"Request body is not valid JSON: {exc}") from exc

    if not isinstance(parsed, dict):
        raise InvalidRequestBodyError("Request body must be a JSON object.")

    return parsed


class NotionProxy:
    """
    受信リクエスト 1 件につき Notion を 1 回だけ呼び出すハンドラ。

    client_factory は呼び出しのたびに評価する。設定不足の場合はここで
    ConfigurationError になり、外部呼び出しは発生しない。
    """

    def __init__(self, client_factory: Optional[ClientFactory] = None) -> None:
        self._client_factory = client_factory or NotionClient

    def handle(self, method: str, body: Union[str, bytes, None] = None) -> ProxyResponse:
        method = (method or "").upper()

        if method == "OPTIONS":
            return ProxyResponse(status_code=200, body="", headers=dict(CORS_HEADERS))

        if method not in ALLOWED_METHODS:
            return _json_response(405, {"error": "Method not allowed"})

        overrides: Optional[Dict[str, Any]] = None
        if method == "POST":
            try:
                overrides = parse_overrides(body)
            except InvalidRequestBodyError as exc:
                logger.warning("Rejected proxy request body: %s", exc)
                return _json_response(
                    400,
                    {"error": "Invalid request body", "message": str(exc)},
                )

        try:
            client = self._client_factory()
        except ConfigurationError as exc:
            logger.error("Notion proxy is not configured: %s", exc)
            return _json_response(
                500,
                {"error": "Configuration error", "message": str(exc)},
            )

        try:
            data = client.query_database(overrides)
        except NotionUpstreamError as exc:
            logger.error(
                "Notion API returned an error: status=%s body=%s",
                exc.status_code,
                exc.body,
            )
            return _json_response(
                exc.status_code,
                {"error": "Notion API error", "details": exc.body},
            )
        except NotionTransportError as exc:
            logger.error("Error fetching from Notion: %s", exc)
            return _json_response(
                500,
                {"error": "Failed to fetch data from Notion", "message": str(exc)},
            )
        except Exception as exc:  # noqa: BLE001
            # 想定外の例外もハンドラの外へは投げず、500 として返す
            logger.exception("Unexpected error while proxying Notion query.")
            return _json_response(
                500,
                {"error": "Failed to fetch data from Notion", "message": str(exc)},
            )

        return _json_response(200, data, {"Cache-Control": CACHE_CONTROL})
