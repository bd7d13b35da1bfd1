"""
Factory d'application pour les entrypoints (storefront.asgi, tests).
"""
from fastapi import FastAPI

from .exceptions import register_exception_handlers
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_no_cache_middleware, register_security_middleware
from .routers import register_routers


def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - middlewares (CORS, hôtes, en-têtes de sécurité, no-cache)
      - gestionnaires d'exceptions ({"error": ...})
      - tous les routers (payments, emails, orders, addresses, admin, health)
    """
    app = FastAPI(title="Lord Smith Lamps API", lifespan=lifespan)
    register_basic_middlewares(app)
    register_security_middleware(app)
    register_no_cache_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
