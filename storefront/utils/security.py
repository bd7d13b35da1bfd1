import hmac
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request

from storefront import config
from storefront.config import ConfigError


def get_bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization") or ""
    if not auth_header:
        return None
    if auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip() or None
    return auth_header.strip() or None


def get_current_user(request: Request) -> Dict[str, Any]:
    """
    Authentifie la requête via le Bearer token Supabase.
    - 401 "Missing authorization header" si absent
    - 401 "Unauthorized" si Supabase Auth rejette le token
    - ConfigError (500) si Supabase n'est pas configuré
    Retour: {id, email, metadata, token}
    """
    token = get_bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Missing authorization header")

    try:
        from storefront.auth.repository import get_user_from_access_token
        user = get_user_from_access_token(token)
    except ConfigError:
        raise
    except Exception:
        raise HTTPException(status_code=401, detail="Unauthorized")
    if not user.get("id"):
        raise HTTPException(status_code=401, detail="Unauthorized")
    return {
        "id": user.get("id"),
        "email": user.get("email"),
        "metadata": user.get("user_metadata") or {},
        "token": token,
    }


def require_user(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    return user


def require_admin(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    from storefront.auth.repository import is_admin
    if not is_admin(user.get("id")):
        raise HTTPException(status_code=403, detail="Forbidden")
    return {**user, "role": "admin"}


def require_internal_caller(request: Request) -> Dict[str, Any]:
    """
    Appels internes (fonctions e-mail): Bearer = clé service-role, sinon un admin.
    """
    token = get_bearer_token(request)
    service_key = config.SUPABASE_SERVICE_KEY
    if token and service_key and hmac.compare_digest(token, service_key):
        return {"id": None, "role": "service"}
    return require_admin(get_current_user(request))
