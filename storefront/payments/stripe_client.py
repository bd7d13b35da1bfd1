"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
"""
import json
import logging
from typing import Any, Dict, List, Optional

import stripe
from fastapi import HTTPException

from storefront import config

logger = logging.getLogger(__name__)


# module storefront.payments.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - Soulève ConfigError si STRIPE_SECRET_KEY est absent (échec immédiat, aucun appel réseau).
    """
    stripe.api_key = config.require_setting("STRIPE_SECRET_KEY")
    stripe.api_version = config.STRIPE_API_VERSION
    return stripe


def as_dict(obj: Any) -> Dict[str, Any]:
    """Convertit un objet Stripe (ou un dict de test) en dict."""
    if obj is None:
        return {}
    if isinstance(obj, dict):
        return obj
    for attr in ("to_dict", "to_dict_recursive"):
        fn = getattr(obj, attr, None)
        if callable(fn):
            return fn()
    return dict(obj)


def create_session(
    *,
    line_items: List[Dict[str, Any]],
    success_url: str,
    cancel_url: str,
    metadata: Dict[str, str],
    shipping_options: Optional[List[Dict[str, Any]]] = None,
    mode: str = "payment",
) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout hébergée.
    - line_items: lignes Stripe (price_data/quantity)
    - metadata: {"user_id", "cart_items", "subtotal", "shipping", "tax", ...}
    - shipping_options: frais de port forfaitaires (optionnel)
    Retour: dict session (ex: {"id": "cs_test_...", "url": "https://..."})
    """
    require_stripe()
    params: Dict[str, Any] = {
        "line_items": line_items,
        "mode": mode,
        "success_url": success_url,
        "cancel_url": cancel_url,
        "metadata": metadata,
    }
    if shipping_options:
        params["shipping_options"] = shipping_options
    session = stripe.checkout.Session.create(**params)
    return as_dict(session)


def list_line_items(session_id: str) -> List[Dict[str, Any]]:
    """
    Liste les lignes réellement payées d'une session (produit développé).
    Parcourt toutes les pages (auto_paging_iter).
    """
    require_stripe()
    items = stripe.checkout.Session.list_line_items(
        session_id,
        expand=["data.price.product"],
        limit=100,
    )
    return [as_dict(item) for item in items.auto_paging_iter()]


def parse_event(payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
    """
    Valide un événement Stripe signé (webhook) et le retourne en dict.
    - Exige STRIPE_SECRET_KEY et STRIPE_WEBHOOK_SECRET (ConfigError sinon)
    - 400 "No signature provided" si l'en-tête Stripe-Signature est absent
    - 400 "Invalid signature" si la signature ou le payload est invalide
    La vérification porte sur le corps brut (bytes non re-sérialisés).
    """
    require_stripe()
    secret = config.require_setting("STRIPE_WEBHOOK_SECRET")
    if not signature:
        raise HTTPException(status_code=400, detail="No signature provided")
    try:
        stripe.Webhook.construct_event(payload, signature, secret)
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.error("Webhook signature verification failed: %s", e)
        raise HTTPException(status_code=400, detail="Invalid signature")
    # Signature valide: on travaille sur le JSON brut (dict natif)
    return json.loads(payload)
