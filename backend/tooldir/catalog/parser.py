# backend/tooldir/catalog/parser.py

"""
Notion API レスポンス → Tool への変換。

- 1 レコードにつき 1 Tool を作る純粋関数（外部呼び出し・副作用なし）
- 欠けている / 型が違うプロパティはデフォルト値に倒し、例外は投げない
"""

import logging
import math
import re
from typing import Any, Dict, List, Optional

from tooldir.utils.config import get_env_bool

from .schemas import (
    DEFAULT_AFFILIATE_LINK,
    DEFAULT_CATEGORY,
    DEFAULT_LOGO,
    DEFAULT_PRICE,
    Tool,
)

logger = logging.getLogger(__name__)

# これより長く改行を含まない行は、大文字始まりの単語ごとに分割を試みる
LONG_LINE_THRESHOLD = 80

_LINE_BREAK = re.compile(r"\r?\n")
_CAPITALIZED_WORD = re.compile(r"(?=[A-Z][a-z])")


def _prop(properties: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = properties.get(name)
    return value if isinstance(value, dict) else {}


def _plain_text(fragments: Any) -> str:
    """
    Notion の rich_text / title 配列から plain_text を連結して返す。
    """
    if not isinstance(fragments, list):
        return ""
    return "".join(
        fragment["plain_text"]
        for fragment in fragments
        if isinstance(fragment, dict) and isinstance(fragment.get("plain_text"), str)
    )


def _extract_select_name(prop: Dict[str, Any]) -> Optional[str]:
    select = prop.get("select")
    if isinstance(select, dict):
        name = select.get("name")
        if isinstance(name, str) and name:
            return name
    return None


def _extract_url(prop: Dict[str, Any]) -> Optional[str]:
    url = prop.get("url")
    if isinstance(url, str) and url:
        return url
    return None


def _extract_number(prop: Dict[str, Any]) -> float:
    value = prop.get("number")
    # bool は int のサブクラスなので除外する
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except OverflowError:
        return 0
    # NaN / Infinity は表示・ソートで扱えないので 0 とみなす
    return number if math.isfinite(number) else 0


def split_points(text: str, *, split_on_capitals: bool = True) -> List[str]:
    """
    Pros / Cons のテキストを箇条書きの配列に分割する。

    1. 改行で分割し、空行を捨てる
    2. split_on_capitals が True の場合、長い 1 行は大文字始まりの単語の直前で分割する
       （Notion 側で改行が潰れて連結されたテキスト向けの救済策。保証はしない）
    """
    points: List[str] = []
    for line in _LINE_BREAK.split(text):
        if not line.strip():
            continue
        if split_on_capitals and len(line) > LONG_LINE_THRESHOLD:
            points.extend(part for part in _CAPITALIZED_WORD.split(line) if part.strip())
        else:
            points.append(line)
    return points


def parse_record(page: Any, *, split_on_capitals: bool = True) -> Tool:
    """
    Notion のページオブジェクト 1 件を Tool に変換する。
    """
    if not isinstance(page, dict):
        page = {}

    properties = page.get("properties")
    if not isinstance(properties, dict):
        properties = {}

    page_id = page.get("id")

    return Tool(
        id=page_id if isinstance(page_id, str) else "",
        name=_plain_text(_prop(properties, "Tool Name").get("title")),
        title=_plain_text(_prop(properties, "Title").get("rich_text")),
        category=_extract_select_name(_prop(properties, "Category")) or DEFAULT_CATEGORY,
        description=_plain_text(_prop(properties, "Description").get("rich_text")),
        affiliate_link=_extract_url(_prop(properties, "Affiliate Link")) or DEFAULT_AFFILIATE_LINK,
        price=_plain_text(_prop(properties, "Price").get("rich_text")) or DEFAULT_PRICE,
        rating=_extract_number(_prop(properties, "Rating")),
        pros=split_points(
            _plain_text(_prop(properties, "Pros").get("rich_text")),
            split_on_capitals=split_on_capitals,
        ),
        cons=split_points(
            _plain_text(_prop(properties, "Cons").get("rich_text")),
            split_on_capitals=split_on_capitals,
        ),
        featured=_prop(properties, "Featured").get("checkbox") is True,
        logo_url=_extract_url(_prop(properties, "Logo URL")) or DEFAULT_LOGO,
    )


def parse_records(raw_list: Any, *, split_on_capitals: Optional[bool] = None) -> List[Tool]:
    """
    Notion の results 配列を Tool のリストに変換する。

    results が None / 配列以外の場合は空リストを返す（エラーにはしない）。
    split_on_capitals を省略した場合は TOOLS_SPLIT_ON_CAPITALS 環境変数に従う。
    """
    if not isinstance(raw_list, list):
        logger.warning("Invalid Notion results; expected a list but got %s", type(raw_list).__name__)
        return []

    if split_on_capitals is None:
        split_on_capitals = get_env_bool("TOOLS_SPLIT_ON_CAPITALS", True)

    return [parse_record(page, split_on_capitals=split_on_capitals) for page in raw_list]
