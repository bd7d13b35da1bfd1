"""
Accès aux données pour 'shipping_addresses'.
- Opérations utilisateur: client RLS (token de l'utilisateur).
- Lectures internes (e-mails, admin): client service-role.
"""
from typing import Any, Dict, List, Optional
import logging

import storefront.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

TABLE = "shipping_addresses"


def _first(res) -> Optional[dict]:
    rows = getattr(res, "data", None) if res is not None else None
    if isinstance(rows, list):
        return rows[0] if rows else None
    if isinstance(rows, dict):
        return rows
    return None


# module storefront.addresses.repository
def list_addresses(user_token: str, user_id: str) -> List[dict]:
    """Adresses de l'utilisateur, par défaut d'abord puis plus récentes."""
    res = (
        supabase_client.get_user_supabase(user_token)
        .table(TABLE)
        .select("*")
        .eq("user_id", user_id)
        .order("is_default", desc=True)
        .order("created_at", desc=True)
        .execute()
    )
    return res.data or []


def get_address(user_token: str, user_id: str, address_id: str) -> Optional[dict]:
    res = (
        supabase_client.get_user_supabase(user_token)
        .table(TABLE)
        .select("*")
        .eq("id", address_id)
        .eq("user_id", user_id)
        .maybe_single()
        .execute()
    )
    return _first(res)


def clear_defaults(user_token: str, user_id: str) -> None:
    """Retire le drapeau is_default de toutes les adresses de l'utilisateur."""
    (
        supabase_client.get_user_supabase(user_token)
        .table(TABLE)
        .update({"is_default": False})
        .eq("user_id", user_id)
        .eq("is_default", True)
        .execute()
    )


def insert_address(user_token: str, data: Dict[str, Any]) -> Optional[dict]:
    res = supabase_client.get_user_supabase(user_token).table(TABLE).insert(data).execute()
    return _first(res)


def update_address(user_token: str, user_id: str, address_id: str, data: Dict[str, Any]) -> Optional[dict]:
    res = (
        supabase_client.get_user_supabase(user_token)
        .table(TABLE)
        .update(data)
        .eq("id", address_id)
        .eq("user_id", user_id)
        .execute()
    )
    return _first(res)


def delete_address(user_token: str, user_id: str, address_id: str) -> bool:
    try:
        (
            supabase_client.get_user_supabase(user_token)
            .table(TABLE)
            .delete()
            .eq("id", address_id)
            .eq("user_id", user_id)
            .execute()
        )
        return True
    except Exception:
        logger.exception("addresses.repository.delete_address failed id=%s", address_id)
        return False


def get_default_address(user_id: str) -> Optional[dict]:
    """Adresse par défaut (service-role), None si aucune ou en cas d'erreur."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("*")
            .eq("user_id", user_id)
            .eq("is_default", True)
            .maybe_single()
            .execute()
        )
        return _first(res)
    except Exception:
        logger.exception("addresses.repository.get_default_address failed user_id=%s", user_id)
        return None


def get_preferred_address(user_id: str) -> Optional[dict]:
    """Adresse par défaut, sinon la plus récente (service-role)."""
    if not user_id:
        return None
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("*")
            .eq("user_id", user_id)
            .order("is_default", desc=True)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        return _first(res)
    except Exception:
        logger.exception("addresses.repository.get_preferred_address failed user_id=%s", user_id)
        return None
