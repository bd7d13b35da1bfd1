from typing import Any, Dict, Optional
import logging

import storefront.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)


def _normalize_user(user) -> Dict[str, Any]:
    if not user:
        return {}
    if isinstance(user, dict):
        return user
    return {
        "id": getattr(user, "id", None),
        "email": getattr(user, "email", None),
        "user_metadata": getattr(user, "user_metadata", None) or {},
    }


# --- Auth (supabase.auth.*) ---

def get_user_from_access_token(access_token: str) -> Dict[str, Any]:
    """Récupère et normalise l'utilisateur depuis supabase.auth.get_user(access_token)."""
    res = supabase_client.get_supabase().auth.get_user(access_token)
    return _normalize_user(getattr(res, "user", None))


def get_user_by_id(user_id: str) -> Dict[str, Any]:
    """API admin GoTrue (service-role): {id, email, user_metadata} ou {}."""
    res = supabase_client.get_service_supabase().auth.admin.get_user_by_id(user_id)
    return _normalize_user(getattr(res, "user", None))


# --- Table user_roles ---

def is_admin(user_id: str) -> bool:
    """user_roles.is_admin pour l'utilisateur (False si absent ou en cas d'erreur)."""
    if not user_id:
        return False
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("user_roles")
            .select("is_admin")
            .eq("user_id", user_id)
            .maybe_single()
            .execute()
        )
        row: Optional[dict] = getattr(res, "data", None) if res is not None else None
        return bool((row or {}).get("is_admin"))
    except Exception:
        logger.exception("auth.repository.is_admin failed user_id=%s", user_id)
        return False
