"""Couche service des commandes.
Rôles:
- Finaliser une session Stripe payée: commande, lignes, décrément de stock.
- Administration: listing détaillé, expédition (tracking), historique utilisateur.
Les e-mails ne sont pas envoyés ici: le service retourne de quoi les planifier
(tâche de fond côté vue), un échec d'envoi ne doit jamais faire échouer le webhook.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

from fastapi import HTTPException

from storefront.addresses import repository as addresses_repository
from storefront.orders import repository
from storefront.payments import metadata as session_meta
from storefront.payments import stripe_client
from storefront.products import inventory

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _duplicate(order: Optional[dict]) -> Dict[str, Any]:
    return {"order": order, "duplicate": True, "items_created": 0, "skipped": 0, "stock": {}, "notification": None}


def finalize_checkout_session(session: Dict[str, Any]) -> Dict[str, Any]:
    """Matérialise la commande d'une session checkout.session.completed.
    - 400 si metadata.user_id est absent (aucune écriture).
    - Idempotent: si une commande porte déjà la même référence de paiement, rien n'est écrit.
    - Les lignes sont relues chez Stripe (ce qui a réellement été payé).
    - Lignes sans product_id: ignorées avec warning. Stock insuffisant: warning, pas de décrément.
    Retour: {"order", "duplicate", "items_created", "skipped", "stock", "notification"}
    """
    session_id = (session or {}).get("id") or ""
    meta = session_meta.extract_session_metadata(session)
    user_id = meta["user_id"]
    if not user_id:
        logger.error("No user_id in session metadata (session=%s)", session_id)
        raise HTTPException(status_code=400, detail="Missing user_id")

    reference = session_meta.payment_reference(session)
    existing = repository.find_order_by_payment_reference(reference)
    if existing:
        logger.info("Session %s déjà traitée (order=%s), événement ignoré", session_id, existing.get("id"))
        return _duplicate(existing)

    line_items = stripe_client.list_line_items(session_id)

    amount_total = (session or {}).get("amount_total")
    try:
        order = repository.insert_order({
            "user_id": user_id,
            "total_amount": (amount_total or 0) / 100,
            "subtotal_amount": meta["subtotal"],
            "tax_amount": meta["tax"],
            "shipping_amount": meta["shipping"],
            "stripe_payment_intent_id": reference,
            "status": "completed",
            "shipped": False,
            "order_date": _now_iso(),
        })
    except repository.DuplicateOrder:
        # Livraison concurrente: la commande a été insérée entre la lecture et l'écriture
        logger.info("Session %s insérée en parallèle, événement ignoré", session_id)
        return _duplicate(repository.find_order_by_payment_reference(reference))
    order_id = order.get("id")

    items_created = 0
    skipped = 0
    stock: Dict[str, str] = {}
    for raw in line_items:
        if session_meta.is_tax_line(raw):
            continue
        item = session_meta.resolve_line_item(raw)
        product_id = item["product_id"]
        if not product_id:
            logger.warning("No product_id found in line item metadata (order=%s)", order_id)
            skipped += 1
            continue

        row = repository.insert_order_item({"order_id": order_id, **item})
        if row:
            items_created += 1

        stock[product_id] = inventory.decrement_stock(product_id, item["quantity"])

    logger.info("Order %s created successfully for user %s (items=%s)", order_id, user_id, items_created)
    return {
        "order": order,
        "duplicate": False,
        "items_created": items_created,
        "skipped": skipped,
        "stock": stock,
        "notification": {"order_id": order_id, "user_id": user_id},
    }


# --- Administration / historique ---

def list_orders_with_details(limit: int = 200) -> List[dict]:
    """Toutes les commandes (récentes d'abord) avec lignes et adresse préférée du client."""
    orders = repository.list_orders(limit=limit)
    detailed = []
    for order in orders:
        detailed.append({
            **order,
            "order_items": repository.list_order_items(order.get("id")),
            "shipping_address": addresses_repository.get_preferred_address(order.get("user_id")),
        })
    return detailed


def list_user_orders(user: Dict[str, Any]) -> List[dict]:
    return repository.list_user_orders(user.get("token") or "", user.get("id") or "")


def set_order_shipped(order_id: str, shipped: bool, tracking_number: Optional[str] = None) -> Optional[dict]:
    """Expédie (shipped_at=maintenant, tracking) ou annule l'expédition (efface les deux)."""
    if shipped:
        updates: Dict[str, Any] = {
            "shipped": True,
            "shipped_at": _now_iso(),
            "tracking_number": (tracking_number or "").strip() or None,
        }
    else:
        updates = {"shipped": False, "shipped_at": None, "tracking_number": None}
    return repository.update_order(order_id, updates)
