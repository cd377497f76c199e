# backend/tooldir/catalog/pipeline.py

"""
カタログ表示のパイプライン。

- 全件からのおすすめ抽出 / カテゴリ・検索語でのフィルタ / ソート
- CatalogView（ビューモデル）の状態遷移

状態遷移の関数はすべて CatalogView を受け取り、新しい CatalogView を返す。
受け取ったオブジェクトは変更しない。
"""

import locale
import logging
import math
import re
import unicodedata
from typing import Any, Iterable, List, Optional, Tuple, Union

from .parser import parse_records
from .schemas import (
    ALL_CATEGORIES,
    CatalogStats,
    CatalogView,
    LoadState,
    SortKey,
    Tool,
    ViewState,
)

logger = logging.getLogger(__name__)

_PRICE_NUMBER = re.compile(r"\d+(\.\d+)?")


# ---- 一覧操作 ---------------------------------------------------------


def derive_featured(tools: Iterable[Tool]) -> List[Tool]:
    """featured のツールだけを入力順のまま返す。"""
    return [tool for tool in tools if tool.featured]


def derive_category_set(tools: Iterable[Tool]) -> List[str]:
    """
    カテゴリフィルタのボタン一覧。

    先頭は必ず "all"、以降は初出順の重複なしカテゴリ。
    """
    categories = [ALL_CATEGORIES]
    for tool in tools:
        if tool.category not in categories:
            categories.append(tool.category)
    return categories


def derive_stats(tools: List[Tool]) -> CatalogStats:
    return CatalogStats(
        tool_count=len(tools),
        category_count=len({tool.category for tool in tools}),
    )


def apply_filter(tools: Iterable[Tool], category: str, search_term: str) -> List[Tool]:
    """
    カテゴリと検索語で絞り込む。

    - category == "all" なら全カテゴリ
    - search_term は name / description に対する大文字小文字無視の部分一致
    """
    term = (search_term or "").lower()
    return [
        tool
        for tool in tools
        if (category == ALL_CATEGORIES or tool.category == category)
        and (not term or term in tool.name.lower() or term in tool.description.lower())
    ]


def extract_price(price: str) -> float:
    """価格文字列から最初の数値を取り出す。数値がなければ 0。"""
    match = _PRICE_NUMBER.search(price or "")
    return float(match.group(0)) if match else 0.0


def _base_letters(name: str) -> str:
    """「Écrivain」→「ecrivain」。アクセント記号と大文字小文字の違いを落とす。"""
    decomposed = unicodedata.normalize("NFKD", name.casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def name_sort_key(name: str) -> Tuple[str, str, str]:
    """
    ロケールを考慮した名前の比較キー。

    1. アクセント・大文字小文字を無視した基本文字（localeCompare の第 1 レベル相当）
    2. 大文字小文字を無視した名前
    3. 名前そのもの

    各レベルは LC_COLLATE（setup_collation_locale で設定）の照合順で比較する。
    """
    try:
        return (
            locale.strxfrm(_base_letters(name)),
            locale.strxfrm(name.casefold()),
            locale.strxfrm(name),
        )
    except ValueError:
        # 埋め込み NUL などで strxfrm が使えない場合
        return _base_letters(name), name.casefold(), name


def _coerce_sort_key(key: Union[SortKey, str, None]) -> Optional[SortKey]:
    if key is None or isinstance(key, SortKey):
        return key
    try:
        return SortKey(key)
    except ValueError:
        logger.warning("Unknown sort key %r; keeping current order.", key)
        return None


def apply_sort(tools: Iterable[Tool], key: Union[SortKey, str, None]) -> List[Tool]:
    """
    表示中の一覧を安定ソートした新しいリストを返す。

    未知のキー / None の場合は並びを変えない。
    """
    tools = list(tools)
    sort_key = _coerce_sort_key(key)

    if sort_key is SortKey.NAME:
        return sorted(tools, key=lambda tool: name_sort_key(tool.name))
    if sort_key is SortKey.RATING:
        return sorted(tools, key=lambda tool: tool.rating, reverse=True)
    if sort_key is SortKey.PRICE_LOW:
        return sorted(tools, key=lambda tool: extract_price(tool.price))
    if sort_key is SortKey.PRICE_HIGH:
        return sorted(tools, key=lambda tool: extract_price(tool.price), reverse=True)
    return tools


def star_count(rating: float) -> int:
    """評価値を四捨五入した星の数（0.5 は切り上げ）。"""
    return max(int(math.floor(rating + 0.5)), 0)


# ---- 状態遷移 ---------------------------------------------------------


def _visible_for(tools: List[Tool], view: ViewState) -> List[Tool]:
    filtered = apply_filter(tools, view.category, view.search_term)
    return apply_sort(filtered, view.sort_key)


def start_loading() -> CatalogView:
    """読み込み開始時の空のビューモデル。"""
    return CatalogView(state=LoadState.LOADING)


def load_succeeded(view: CatalogView, payload: Any) -> CatalogView:
    """
    プロキシのレスポンスを取り込み、Loaded 状態のビューモデルを作る。

    全件は丸ごと置き換え、表示条件は初期値に戻す。
    """
    results = payload.get("results") if isinstance(payload, dict) else None
    tools = parse_records(results)
    view_state = ViewState()

    logger.info("Loaded %d tools from Notion.", len(tools))

    return CatalogView(
        state=LoadState.LOADED,
        tools=tools,
        featured=derive_featured(tools),
        categories=derive_category_set(tools),
        visible=_visible_for(tools, view_state),
        view=view_state,
    )


def load_failed(view: CatalogView, message: str) -> CatalogView:
    """読み込み失敗。再読み込みするまで Error 状態のまま。"""
    return CatalogView(state=LoadState.ERROR, error=message)


def _with_view_state(view: CatalogView, view_state: ViewState) -> CatalogView:
    if view.state is not LoadState.LOADED:
        return view
    return view.model_copy(
        update={
            "view": view_state,
            "visible": _visible_for(view.tools, view_state),
        }
    )


def select_category(view: CatalogView, category: str) -> CatalogView:
    return _with_view_state(
        view, view.view.model_copy(update={"category": category or ALL_CATEGORIES})
    )


def search(view: CatalogView, search_term: str) -> CatalogView:
    return _with_view_state(
        view, view.view.model_copy(update={"search_term": search_term or ""})
    )


def sort(view: CatalogView, key: Union[SortKey, str, None]) -> CatalogView:
    return _with_view_state(
        view, view.view.model_copy(update={"sort_key": _coerce_sort_key(key)})
    )
