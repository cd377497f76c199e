# backend/tooldir/catalog/router.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import HTMLResponse

from . import pipeline
from .render import render_page
from .schemas import CatalogView, ToolListResponse
from .session import CatalogSession, get_catalog_session, is_loaded

router = APIRouter(tags=["catalog"])


def _current_view(
    session: CatalogSession,
    category: Optional[str],
    q: Optional[str],
    sort: Optional[str],
    reload: bool,
) -> CatalogView:
    """
    保持中のビューモデルにクエリパラメータの表示条件を適用する。

    reload=True の場合だけ Notion から取得し直す。
    フィルタ・ソートはプロキシを呼ばず、取得済みの全件に対して行う。
    """
    view = session.reload() if reload else session.ensure_loaded()

    if category is not None:
        view = pipeline.select_category(view, category)
    if q is not None:
        view = pipeline.search(view, q)
    if sort:
        view = pipeline.sort(view, sort)

    return view


@router.get(
    "/",
    response_class=HTMLResponse,
    summary="ツールディレクトリのページを表示",
)
def directory_page(
    category: Optional[str] = Query(None, description="カテゴリ（all で全件）"),
    q: Optional[str] = Query(None, description="名前・説明の検索語"),
    sort: Optional[str] = Query(None, description="name / rating / price-low / price-high"),
    reload: bool = Query(False, description="Notion から読み込み直す"),
    session: CatalogSession = Depends(get_catalog_session),
) -> HTMLResponse:
    """
    ディレクトリページ全体の HTML を返す。

    読み込みに失敗している場合も 200 でエラーパネル（Retry 付き）を表示する。
    """
    view = _current_view(session, category, q, sort, reload)
    return HTMLResponse(content=render_page(view))


@router.get(
    "/tools",
    response_model=ToolListResponse,
    summary="表示条件を適用したツール一覧を取得",
)
def list_tools(
    category: Optional[str] = Query(None),
    q: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    reload: bool = Query(False),
    session: CatalogSession = Depends(get_catalog_session),
) -> ToolListResponse:
    """
    / と同じ表示条件で、表示中のツール一覧を JSON で返す。

    - 読み込み失敗（Error 状態）→ 503 Service Unavailable
    """
    view = _current_view(session, category, q, sort, reload)

    if not is_loaded(view):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=view.error or "Tools are not loaded.",
        )

    return ToolListResponse(
        items=view.visible,
        count=len(view.visible),
        categories=view.categories,
        state=view.state,
    )
