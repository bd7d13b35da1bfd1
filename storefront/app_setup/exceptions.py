"""
Gestionnaires d'exceptions de l'application.
- HTTPException (FastAPI/Starlette): corps JSON {"error": <detail>} avec le code d'origine.
- ConfigError (secret absent): 500 {"error": <message>}, aucun appel externe n'a été tenté.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.config import ConfigError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error_as_json(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(ConfigError)
    async def config_error_as_json(request: Request, exc: ConfigError):
        logger.error("Configuration manquante sur %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})
