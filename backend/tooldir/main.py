# backend/tooldir/main.py

"""
バックエンドアプリケーションのエントリーポイント。

主な責務:
- /api/notion プロキシエンドポイントを公開する
- / ディレクトリページと /tools 一覧 API を公開する
"""

from fastapi import FastAPI

from tooldir.catalog.router import router as catalog_router
from tooldir.notion.router import router as notion_router
from tooldir.utils.config import setup_collation_locale
from tooldir.utils.log_config import setup_logging


def create_app() -> FastAPI:
    """
    FastAPI アプリケーションファクトリ。

    - Notion プロキシ (/api/notion, /.netlify/functions/notion)
    - ツールディレクトリ (/, /tools)
    - ヘルスチェックエンドポイント (/health)
    """
    setup_logging()
    setup_collation_locale()

    app = FastAPI(title="AI Tools Directory")

    # ルーター登録
    app.include_router(notion_router)
    app.include_router(catalog_router)

    @app.get("/health", tags=["health"])
    def health_check() -> dict:
        """
        簡易ヘルスチェックエンドポイント。
        モニタリングや動作確認用。
        """
        return {"status": "ok"}

    return app


# uvicorn 実行時のエントリーポイント
app = create_app()
