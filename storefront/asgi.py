"""
ASGI entrypoint: expose `app` pour les process managers (ex: `uvicorn storefront.asgi:app`).
"""

from storefront.app import app

__all__ = ["app"]
