"""
Désérialisation des métadonnées et des lignes d'une session Stripe Checkout.
"""
import json
from typing import Any, Dict, Optional

from storefront.cart.pricing import amount_from

from .cart import TAX_LINE_KIND


# module storefront.payments.metadata
def extract_session_metadata(session: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extrait {user_id, cart_items, subtotal, tax, shipping, shipping_address_id}.
    - Tolérant aux erreurs: cart_items=[] si JSON invalide, montants à 0.0 si absents.
    """
    meta = (session or {}).get("metadata") or {}
    try:
        cart_items = json.loads(meta.get("cart_items") or "[]")
    except (TypeError, ValueError):
        cart_items = []
    return {
        "user_id": meta.get("user_id") or None,
        "cart_items": cart_items if isinstance(cart_items, list) else [],
        "subtotal": amount_from(meta.get("subtotal")),
        "tax": amount_from(meta.get("tax")),
        "shipping": amount_from(meta.get("shipping")),
        "shipping_address_id": meta.get("shipping_address_id") or None,
    }


def payment_reference(session: Dict[str, Any]) -> str:
    """
    Référence de paiement d'une session: payment_intent (id ou objet développé),
    à défaut l'id de session.
    """
    intent = (session or {}).get("payment_intent")
    if isinstance(intent, dict):
        intent = intent.get("id")
    return str(intent or (session or {}).get("id") or "")


def _product_of(item: Dict[str, Any]) -> Dict[str, Any]:
    product = ((item or {}).get("price") or {}).get("product")
    return product if isinstance(product, dict) else {}


def is_tax_line(item: Dict[str, Any]) -> bool:
    return (_product_of(item).get("metadata") or {}).get("kind") == TAX_LINE_KIND


def resolve_line_item(item: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalise une ligne Stripe payée:
    {product_id|None, product_name, product_price, quantity, subtotal}
    - product_id provient de price.product.metadata.product_id (produit développé)
    - product_price = unit_amount / 100; quantity vaut 1 par défaut
    """
    product = _product_of(item)
    product_id: Optional[str] = (product.get("metadata") or {}).get("product_id") or None
    name = product.get("name") or (item or {}).get("description") or "Unknown Product"
    unit_amount = ((item or {}).get("price") or {}).get("unit_amount")
    unit_price = (unit_amount or 0) / 100
    quantity = int((item or {}).get("quantity") or 1)
    return {
        "product_id": product_id,
        "product_name": name,
        "product_price": unit_price,
        "quantity": quantity,
        "subtotal": round(unit_price * quantity, 2),
    }
