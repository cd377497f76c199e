# backend/tooldir/catalog/session.py

"""
カタログのビューモデルを保持するシンプルな状態管理モジュール。

- 取得済みの全件（CatalogView）をプロセスの寿命の間保持する
- 再読み込み時は新しいビューモデルを組み立て、完了時に丸ごと置き換える
- テスト時にリセットできるようにする
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Optional

from tooldir.notion.proxy import NotionProxy

from . import pipeline
from .schemas import CatalogView, LoadState

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Dict[str, Any]]


class CatalogLoadError(RuntimeError):
    """プロキシからツール一覧を取得できなかった場合の例外。"""


def fetch_from_proxy(proxy: Optional[NotionProxy] = None) -> Dict[str, Any]:
    """
    NotionProxy をプロセス内で呼び出し、成功時のレスポンス JSON を返す。

    200 以外は CatalogLoadError として扱う。
    """
    proxy = proxy or NotionProxy()
    response = proxy.handle("GET")

    if response.status_code != 200:
        raise CatalogLoadError(
            f"Failed to fetch tools: {response.status_code} {response.body}"
        )

    try:
        data = response.json()
    except ValueError as exc:
        raise CatalogLoadError(f"Failed to parse tools response: {exc}") from exc

    return data if isinstance(data, dict) else {}


class CatalogSession:
    """
    CatalogView の持ち主。

    画面操作（カテゴリ / 検索 / ソート）はここに保存せず、
    呼び出し側で pipeline の関数を current_view に適用して使う。
    """

    def __init__(self, fetcher: Optional[Fetcher] = None) -> None:
        self._fetcher = fetcher or fetch_from_proxy
        self._view: CatalogView = pipeline.start_loading()
        self._loaded_once = False
        self._load_lock = threading.Lock()

    @property
    def view(self) -> CatalogView:
        return self._view

    def _load(self) -> CatalogView:
        # _load_lock を保持した状態で呼ぶこと
        view = pipeline.start_loading()

        try:
            payload = self._fetcher()
        except Exception as exc:  # noqa: BLE001
            logger.error("Error fetching tools: %s", exc)
            view = pipeline.load_failed(view, str(exc))
        else:
            view = pipeline.load_succeeded(view, payload)

        # 読み込み中も他のリクエストには直前のビューモデルを見せ、完了時に一度だけ差し替える
        self._view = view
        self._loaded_once = True
        return view

    def reload(self) -> CatalogView:
        """
        Loading から読み込み直す。失敗した場合は Error 状態になる。

        同時に呼ばれた場合は 1 件ずつ順番に読み込む。
        """
        with self._load_lock:
            return self._load()

    def ensure_loaded(self) -> CatalogView:
        """
        初回アクセス時だけ読み込む。以降は保持中のビューモデルを返す。

        初回アクセスが同時に来ても、Notion への問い合わせは 1 回だけ。
        """
        if self._loaded_once:
            return self._view

        with self._load_lock:
            if self._loaded_once:
                return self._view
            return self._load()


_catalog_session: Optional[CatalogSession] = None


def get_catalog_session() -> CatalogSession:
    """
    共有の CatalogSession インスタンスを返す。

    初回呼び出し時にのみ生成し、それ以降は同じインスタンスを返す。
    """
    global _catalog_session
    if _catalog_session is None:
        _catalog_session = CatalogSession()
    return _catalog_session


def reset_state() -> None:
    """
    テスト用に CatalogSession のシングルトン状態をリセットする。
    """
    global _catalog_session
    _catalog_session = None


def is_loaded(view: CatalogView) -> bool:
    return view.state is LoadState.LOADED
