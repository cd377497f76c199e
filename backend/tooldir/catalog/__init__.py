# backend/tooldir/catalog/__init__.py

"""
ツールカタログ（表示パイプライン）モジュール群。

主な責務:
- Notion のレコードを Tool に正規化する
- カテゴリ / 検索 / ソートで表示一覧を作る
- ツールカードの HTML を描画する
"""
