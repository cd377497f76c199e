# backend/tooldir/notion/__init__.py

"""
Notion 連携用モジュール群。

主な責務:
- Notion API からツールデータベースを読み取る（読み取り専用）
- ブラウザ / カタログ表示向けにレスポンスを中継する
"""
