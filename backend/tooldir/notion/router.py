# backend/tooldir/notion/router.py

from fastapi import APIRouter, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool

from .proxy import NotionProxy

router = APIRouter(tags=["notion"])

# 許可外メソッドにも独自の 405 ボディを返すため、全メソッドをこのルートで受ける
PROXY_ROUTE_METHODS = ["GET", "POST", "OPTIONS", "PUT", "PATCH", "DELETE", "HEAD"]


# Dependency provider
# - テスト時に FastAPI dependency_overrides で差し替え可能にする
def get_notion_proxy() -> NotionProxy:
    return NotionProxy()


@router.api_route(
    "/.netlify/functions/notion",
    methods=PROXY_ROUTE_METHODS,
    include_in_schema=False,
)
@router.api_route(
    "/api/notion",
    methods=PROXY_ROUTE_METHODS,
    summary="Notion のツールデータベースを query して中継",
    description="Status=Active のツールを Rating 降順で取得し、Notion のレスポンスをそのまま返す。",
)
async def proxy_notion(
    request: Request,
    proxy: NotionProxy = Depends(get_notion_proxy),
) -> Response:
    """
    Notion プロキシのエンドポイント。

    - ステータス・ボディ・ヘッダーの組み立ては NotionProxy に任せる
    - ここではリクエストボディを読み取り、Response に詰め替えるだけ
    """
    body = await request.body()
    # httpx の同期呼び出しでイベントループを塞がないようにスレッドで実行
    result = await run_in_threadpool(proxy.handle, request.method, body)
    return Response(
        content=result.body,
        status_code=result.status_code,
        headers=result.headers,
    )
