# backend/tooldir/utils/log_config.py

"""
ロギング初期化。

アプリ起動時に一度だけ root logger にハンドラを設定する。
各モジュールは logging.getLogger(__name__) でロガーを取得するだけでよい。
"""

import logging
import sys

from .config import get_env

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def setup_logging() -> None:
    global _configured
    if _configured:
        return

    log_level = (get_env("LOG_LEVEL", default="INFO", required=False) or "INFO").upper()
    level = getattr(logging, log_level, logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # 既にハンドラがある場合（uvicorn / pytest など）は重複させない
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    _configured = True
