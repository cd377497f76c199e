# backend/tooldir/utils/config.py

"""
環境変数読み取り用のユーティリティ。
Notion プロキシとカタログ表示の両方で共通利用する。
"""

import locale
import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """設定値が不足している / 不正な場合の基底例外。"""


class EnvVarMissingError(ConfigurationError):
    """必須環境変数が設定されていない場合に投げる例外。"""

    def __init__(self, name: str) -> None:
        super().__init__(f"Required environment variable '{name}' is not set.")
        self.name = name


def get_env(
    name: str,
    default: Optional[str] = None,
    *,
    required: bool = True,
) -> Optional[str]:
    """
    環境変数を取得するヘルパー。

    :param name: 環境変数名
    :param default: デフォルト値（required=False の場合のみ使用）
    :param required: True の場合、未設定なら例外を投げる
    :return: 文字列値
    """
    value = os.getenv(name)

    if value is None or value == "":
        if required:
            raise EnvVarMissingError(name)
        return default

    return value


def get_env_bool(name: str, default: bool) -> bool:
    """
    真偽値の環境変数を取得する。

    - "1" / "true" / "yes" / "on" を True とみなす（大文字小文字は無視）
    - 未設定の場合は default を返す
    """
    raw = get_env(name, required=False)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def get_env_float(name: str, default: Optional[float] = None) -> Optional[float]:
    """
    数値の環境変数を取得する。

    - 未設定 or パース不能の場合は default を返す。
    """
    raw = get_env(name, required=False)
    if raw is None:
        return default

    try:
        return float(raw)
    except ValueError:
        return default


def setup_collation_locale() -> str:
    """
    名前ソート用に LC_COLLATE を設定する。

    - TOOLS_COLLATE_LOCALE が設定されていればそれを使う（例: en_US.UTF-8）
    - 未設定なら環境変数 LC_ALL / LC_COLLATE / LANG に従う
    - どちらも使えない場合は "C" に戻す

    :return: 実際に設定されたロケール名
    """
    requested = get_env("TOOLS_COLLATE_LOCALE", default="", required=False)
    try:
        return locale.setlocale(locale.LC_COLLATE, requested)
    except locale.Error as exc:
        logger.warning(
            "Collation locale %r is not available (%s); falling back to 'C'.",
            requested,
            exc,
        )
        return locale.setlocale(locale.LC_COLLATE, "C")
