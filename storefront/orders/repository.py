"""
Accès aux données pour les commandes ('orders', 'order_items').
Écritures via service-role (webhook, admin). Lectures utilisateur via client RLS.
"""
from typing import Any, Dict, List, Optional
import logging

from postgrest.exceptions import APIError

import storefront.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)


def _first(res) -> Optional[dict]:
    rows = getattr(res, "data", None) if res is not None else None
    if isinstance(rows, list):
        return rows[0] if rows else None
    if isinstance(rows, dict):
        return rows
    return None


# module storefront.orders.repository
def find_order_by_payment_reference(reference: str) -> Optional[dict]:
    """
    Commande existante pour une référence de paiement Stripe (garde d'idempotence).
    Propage l'erreur: mieux vaut un 5xx (re-livraison Stripe) qu'un doublon.
    """
    if not reference:
        return None
    res = (
        supabase_client.get_service_supabase()
        .table("orders")
        .select("*")
        .eq("stripe_payment_intent_id", reference)
        .limit(1)
        .execute()
    )
    return _first(res)


class DuplicateOrder(Exception):
    """Une commande existe déjà pour cette référence de paiement (violation d'unicité 23505)."""


def _api_error_code(e: APIError) -> Optional[str]:
    code = getattr(e, "code", None)
    if not code and e.args and isinstance(e.args[0], dict):
        code = e.args[0].get("code")
    return code


def insert_order(data: Dict[str, Any]) -> dict:
    """
    Insère une commande et retourne la ligne créée.
    - DuplicateOrder si la contrainte unique sur stripe_payment_intent_id est violée
    - RuntimeError si l'insertion échoue pour une autre raison
    """
    try:
        res = supabase_client.get_service_supabase().table("orders").insert(data).execute()
    except APIError as e:
        if _api_error_code(e) == "23505":
            raise DuplicateOrder(data.get("stripe_payment_intent_id"))
        logger.exception("orders.repository.insert_order failed user_id=%s", data.get("user_id"))
        raise RuntimeError("Failed to create order")
    except Exception:
        logger.exception("orders.repository.insert_order failed user_id=%s", data.get("user_id"))
        raise RuntimeError("Failed to create order")
    order = _first(res)
    if not order:
        raise RuntimeError("Failed to create order")
    return order


def insert_order_item(data: Dict[str, Any]) -> Optional[dict]:
    """Insère une ligne de commande; None (et log) en cas d'échec."""
    try:
        res = supabase_client.get_service_supabase().table("order_items").insert(data).execute()
        return _first(res) or {"status": "ok"}
    except Exception:
        logger.exception(
            "orders.repository.insert_order_item failed order_id=%s product_id=%s",
            data.get("order_id"),
            data.get("product_id"),
        )
        return None


def get_order_with_items(order_id: str) -> Optional[dict]:
    """Commande + order_items(*) par id, None si introuvable."""
    if not order_id:
        return None
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select("*, order_items(*)")
            .eq("id", order_id)
            .maybe_single()
            .execute()
        )
        return _first(res)
    except Exception:
        logger.exception("orders.repository.get_order_with_items failed id=%s", order_id)
        return None


def list_orders(limit: int = 200) -> List[dict]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select("*")
            .order("order_date", desc=True)
            .limit(limit)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.list_orders failed")
        return []


def list_order_items(order_id: str) -> List[dict]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("order_items")
            .select("*")
            .eq("order_id", order_id)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.list_order_items failed order_id=%s", order_id)
        return []


def list_user_orders(user_token: str, user_id: str, limit: int = 50) -> List[dict]:
    """Historique de l'utilisateur (RLS via son token)."""
    try:
        res = (
            supabase_client.get_user_supabase(user_token)
            .table("orders")
            .select("*, order_items(*)")
            .eq("user_id", user_id)
            .order("order_date", desc=True)
            .limit(limit)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.list_user_orders failed user_id=%s", user_id)
        return []


def update_order(order_id: str, data: Dict[str, Any]) -> Optional[dict]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .update(data)
            .eq("id", order_id)
            .execute()
        )
        return _first(res)
    except Exception:
        logger.exception("orders.repository.update_order failed id=%s data=%s", order_id, data)
        return None
