# backend/tooldir/__init__.py
"""
AI Tools Directory backend application package.

This package contains:
- main: FastAPI application entrypoint
- notion: Notion proxy modules
- catalog: tool catalog pipeline and page rendering
"""
