"""
Limitation de débit des endpoints sensibles (checkout, formulaire de contact).
Clé: hash du Bearer token, sinon IP du client, toujours par chemin.
Ordre de décision:
1. LOCAL_RATE_LIMIT_FALLBACK=1: fenêtre glissante en mémoire (app.state)
2. app.state.rate_limit_enabled=False: aucune limite
3. sinon fastapi-limiter (Redis); limiteur non initialisé: aucune limite
"""
from typing import Any, Dict, List
import hashlib
import logging
import os
import time

from fastapi import HTTPException, Request, Response
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
from redis.exceptions import RedisError

from storefront.utils.security import get_bearer_token

logger = logging.getLogger(__name__)


def _client_key(request: Request) -> str:
    token = get_bearer_token(request)
    if token:
        who = "user:" + hashlib.sha256(token.encode("utf-8")).hexdigest()[:16]
    else:
        who = "ip:" + (request.client.host if request.client else "local")
    return f"{who}:{request.url.path}"


async def _identifier(request: Request) -> str:
    return _client_key(request)


def _hit_local_window(request: Request, times: int, seconds: int) -> None:
    windows: Dict[str, List[float]] = getattr(request.app.state, "local_rate_windows", None) or {}
    key = _client_key(request)
    now = time.time()
    # Fenêtres expirées retirées: la table reste bornée aux clients actifs
    for stale in [k for k, hits in windows.items() if not hits or now - hits[-1] >= seconds]:
        del windows[stale]
    recent = [t for t in windows.get(key, []) if now - t < seconds]
    request.app.state.local_rate_windows = windows
    if len(recent) >= times:
        raise HTTPException(status_code=429, detail="Too Many Requests")
    windows[key] = recent + [now]


def optional_rate_limit(times: int, seconds: int):
    """Dépendance FastAPI: `dependencies=[Depends(optional_rate_limit(10, 60))]`."""
    limiter = RateLimiter(times=times, seconds=seconds, identifier=_identifier)

    async def _dependency(request: Request):
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            _hit_local_window(request, times, seconds)
            return
        if getattr(request.app.state, "rate_limit_enabled", None) is False:
            return
        if FastAPILimiter.redis is None:
            logger.debug("FastAPILimiter non initialisé, pas de limite sur %s", request.url.path)
            return
        try:
            await limiter(request, Response())
        except RedisError as e:
            # Redis indisponible: requête acceptée sans limite
            logger.warning("Rate limiting ignoré sur %s: %s", request.url.path, e)

    return _dependency


def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    enabled = getattr(request.app.state, "rate_limit_enabled", None)
    ready = getattr(FastAPILimiter, "redis", None) is not None
    return {
        "enabled": None if enabled is None else bool(enabled),
        "ready": ready,
        "backend": "redis" if ready else None,
    }
