# backend/tooldir/catalog/schemas.py
"""
ツール一覧（カタログ）表示用の Pydantic スキーマ定義。

- Tool: Notion の 1 レコードを正規化した内部モデル
- ViewState: カテゴリ / 検索語 / ソートキーの現在値
- CatalogView: 画面全体のビューモデル（状態 + 全件 + 表示中の一覧）
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

ALL_CATEGORIES = "all"
DEFAULT_CATEGORY = "Uncategorized"
DEFAULT_AFFILIATE_LINK = "#"
DEFAULT_PRICE = "Contact for pricing"
DEFAULT_LOGO = (
    'data:image/svg+xml,<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">'
    '<rect fill="%23667eea" width="100" height="100"/>'
    '<text x="50" y="50" font-size="40" fill="white" text-anchor="middle" '
    'dominant-baseline="central">🚀</text></svg>'
)


class SortKey(str, Enum):
    """ソートセレクタの選択肢。"""

    NAME = "name"
    RATING = "rating"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"


class LoadState(str, Enum):
    """カタログ読み込みの状態。Error は再読み込みでのみ抜けられる。"""

    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class Tool(BaseModel):
    """
    Notion の 1 レコードを表現する内部モデル。

    JSON では元のフロントエンドと同じ camelCase（affiliateLink / logoUrl）で出力する。
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field("", description="Notion ページ ID")
    name: str = Field("", description="ツール名（Tool Name）")
    title: str = Field("", description="サブタイトル（Title）。説明が空のときの代替表示")
    category: str = Field(DEFAULT_CATEGORY, description="カテゴリ（select 値）")
    description: str = Field("", description="説明文")
    affiliate_link: str = Field(
        DEFAULT_AFFILIATE_LINK,
        alias="affiliateLink",
        description="アフィリエイトリンク URL",
    )
    price: str = Field(DEFAULT_PRICE, description="価格（自由テキスト）")
    rating: float = Field(0, description="評価（0〜5 想定）")
    pros: List[str] = Field(default_factory=list, description="良い点")
    cons: List[str] = Field(default_factory=list, description="注意点")
    featured: bool = Field(False, description="おすすめ枠に表示するか")
    logo_url: str = Field(DEFAULT_LOGO, alias="logoUrl", description="ロゴ画像 URL")


class ViewState(BaseModel):
    """
    ユーザー操作で変わる表示条件。

    永続化はせず、操作のたびに CatalogView ごと作り直す。
    """

    category: str = ALL_CATEGORIES
    search_term: str = ""
    sort_key: Optional[SortKey] = None


class CatalogView(BaseModel):
    """
    カタログ画面のビューモデル。

    パイプラインの各操作はこのオブジェクトを受け取り、新しいインスタンスを返す。
    """

    state: LoadState = LoadState.LOADING
    tools: List[Tool] = Field(default_factory=list, description="取得済みの全件")
    featured: List[Tool] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=lambda: [ALL_CATEGORIES])
    visible: List[Tool] = Field(default_factory=list, description="フィルタ・ソート後の一覧")
    view: ViewState = Field(default_factory=ViewState)
    error: Optional[str] = None


class ToolListResponse(BaseModel):
    """
    /tools のレスポンス全体。
    """

    items: List[Tool]
    count: int
    categories: List[str]
    state: LoadState


class CatalogStats(BaseModel):
    """ヘッダーに表示する件数。"""

    tool_count: int = 0
    category_count: int = 0
