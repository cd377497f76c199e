# backend/tooldir/catalog/render.py

"""
Tool / CatalogView → HTML 断片のレンダリング。

- すべて純粋関数（同じ入力なら同じマークアップ）
- 画面への組み込み（レスポンスとして返すこと）は router 側の責務
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence
from urllib.parse import urlencode

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from .pipeline import derive_stats, star_count
from .schemas import ALL_CATEGORIES, CatalogView, LoadState, SortKey, Tool, ViewState

# Resolve template directory relative to this package
TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

STAR = "⭐"

FALLBACK_LOGO = (
    "data:image/svg+xml,%3Csvg xmlns=%22http://www.w3.org/2000/svg%22 viewBox=%220 0 100 100%22%3E"
    "%3Crect fill=%22%23667eea%22 width=%22100%22 height=%22100%22/%3E"
    "%3Ctext x=%2250%22 y=%2250%22 font-size=%2240%22 fill=%22white%22 text-anchor=%22middle%22 "
    "dominant-baseline=%22central%22%3E🔧%3C/text%3E%3C/svg%3E"
)

NO_TOOLS_MESSAGE = "No tools found matching your criteria."
NO_FEATURED_MESSAGE = "No featured tools yet. Mark some tools as featured in Notion!"
PAGE_TITLE = "AI Tools Directory"

SORT_OPTIONS = [
    ("", "Sort by: Default"),
    (SortKey.NAME.value, "Name (A-Z)"),
    (SortKey.RATING.value, "Highest Rated"),
    (SortKey.PRICE_LOW.value, "Price: Low to High"),
    (SortKey.PRICE_HIGH.value, "Price: High to Low"),
]


def _format_rating(rating: float) -> str:
    """4.0 → "4"、4.5 → "4.5"。"""
    if float(rating).is_integer():
        return str(int(rating))
    return f"{rating:g}"


env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
env.filters["stars"] = lambda rating: STAR * star_count(rating)
env.filters["rating_number"] = _format_rating


def render(tools: Sequence[Tool], empty_message: str = NO_TOOLS_MESSAGE) -> str:
    """
    ツールごとのカードを並べた HTML 断片を返す。

    空の場合はプレースホルダーのメッセージを返す。
    """
    template = env.get_template("tool_grid.html")
    return template.render(
        tools=list(tools),
        empty_message=empty_message,
        fallback_logo=FALLBACK_LOGO,
    )


def render_featured(featured: Sequence[Tool]) -> str:
    return render(featured, empty_message=NO_FEATURED_MESSAGE)


def build_query_string(view: ViewState, **updates: Optional[str]) -> str:
    """
    現在の表示条件に updates を重ねたクエリ文字列（先頭の ? 付き）を返す。

    初期値と同じ項目は省略する。
    """
    params: Dict[str, str] = {
        "category": view.category,
        "q": view.search_term,
        "sort": view.sort_key.value if view.sort_key else "",
    }
    for key, value in updates.items():
        params[key] = value or ""

    pairs = [
        (key, value)
        for key, value in params.items()
        if value and not (key == "category" and value == ALL_CATEGORIES)
    ]
    return f"?{urlencode(pairs)}" if pairs else "?"


def render_categories(
    categories: Sequence[str],
    active: str = ALL_CATEGORIES,
    view: Optional[ViewState] = None,
    base_path: str = "/",
) -> str:
    """カテゴリフィルタのボタン一覧。"all" は "All Tools" と表示する。"""
    view = view or ViewState(category=active)
    items = [
        {
            "value": category,
            "label": "All Tools" if category == ALL_CATEGORIES else category,
            "active": category == active,
            "href": base_path + build_query_string(view, category=category),
        }
        for category in categories
    ]
    return env.get_template("categories.html").render(categories=items)


def render_error(message: str, retry_href: str = "/?reload=1") -> str:
    """読み込み失敗時のエラーパネル。Retry は全体の再読み込み。"""
    return env.get_template("error_panel.html").render(
        message=message,
        retry_href=retry_href,
    )


def render_page(view: CatalogView, base_path: str = "/") -> str:
    """
    CatalogView だけを入力としてディレクトリページ全体を描画する。
    """
    view_state = view.view

    if view.state is LoadState.ERROR:
        error_html = render_error(view.error or "Unknown error", retry_href=f"{base_path}?reload=1")
        featured_html = tools_html = error_html
    else:
        featured_html = render_featured(view.featured)
        tools_html = render(view.visible)

    sort_value = view_state.sort_key.value if view_state.sort_key else ""
    sort_options: List[Dict[str, object]] = [
        {"value": value, "label": label, "selected": value == sort_value}
        for value, label in SORT_OPTIONS
    ]

    return env.get_template("page.html").render(
        title=PAGE_TITLE,
        base_path=base_path,
        stats=derive_stats(view.tools),
        view=view_state,
        sort_options=sort_options,
        featured_html=Markup(featured_html),
        tools_html=Markup(tools_html),
        categories_html=Markup(
            render_categories(view.categories, view_state.category, view_state, base_path)
        ),
    )
