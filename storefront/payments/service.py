"""
Cas d'usage 'payments': orchestre produits, panier, Stripe et commandes.
"""
from typing import Any, Dict, List, Optional
import logging

from fastapi import HTTPException

from storefront import config
from storefront.addresses import service as addresses_service
from storefront.cart import pricing
from storefront.config import ConfigError
from storefront.orders import service as orders_service
from storefront.products import repository as products_repository

from . import cart as cart_logic
from . import stripe_client

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


def checkout_urls() -> Dict[str, str]:
    base = config.APP_URL
    return {
        "success_url": f"{base}?session_id={{CHECKOUT_SESSION_ID}}",
        "cancel_url": f"{base}?canceled=true",
    }


def create_checkout_session(
    *,
    user: Dict[str, Any],
    cart_items: Any,
    shipping_address_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Prépare la session Stripe hébergée pour le panier de l'utilisateur.
    Les prix viennent du catalogue, jamais du client. Aucune écriture locale.
    Retour: {"url": <url de la session>}
    """
    stripe_client.require_stripe()
    items = cart_logic.parse_cart_items(cart_items)

    try:
        products = products_repository.get_products_map(i["product_id"] for i in items)
    except (HTTPException, ConfigError):
        raise
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to fetch products from database")

    if shipping_address_id and not addresses_service.get_address(user, shipping_address_id):
        raise HTTPException(status_code=400, detail="Invalid shipping address")

    line_items: List[Dict[str, Any]] = cart_logic.to_line_items(products, items)
    totals = pricing.compute_totals(cart_logic.lines_for_pricing(products, items))
    if totals["tax"] > 0:
        line_items.append(cart_logic.tax_line_item(totals["tax"]))

    metadata = cart_logic.make_metadata(user["id"], items, totals, shipping_address_id)
    session = stripe_client.create_session(
        line_items=line_items,
        metadata=metadata,
        shipping_options=cart_logic.shipping_options(totals["shipping"]),
        **checkout_urls(),
    )
    url = session.get("url")
    if not url:
        logger.error("Session Stripe sans url (id=%s)", session.get("id"))
        raise HTTPException(status_code=500, detail="Failed to create checkout session")
    logger.info(
        "payments.checkout session=%s user_id=%s lines=%s total=%.2f",
        session.get("id"), user["id"], len(items), totals["total"],
    )
    return {"url": url}


def handle_event(event: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Traite un événement Stripe déjà vérifié.
    - checkout.session.completed: finalise la commande (voir orders.service)
    - autres types: ignorés (log), retour None
    """
    event_type = (event or {}).get("type")
    if event_type != CHECKOUT_COMPLETED:
        logger.info("Événement Stripe ignoré: %s", event_type)
        return None
    session = ((event.get("data") or {}).get("object")) or {}
    return orders_service.finalize_checkout_session(session)
