"""
Logique panier côté checkout (pas de Stripe, pas de DB).
Construit les line_items Stripe à partir des prix autoritatifs du catalogue.
"""
import json
from typing import Any, Dict, List, Optional

from fastapi import HTTPException

from storefront.cart import pricing
from storefront.config import CURRENCY

# Limite Stripe: 500 caractères par valeur de metadata
METADATA_VALUE_LIMIT = 500
TAX_LINE_KIND = "tax"


# module storefront.payments.cart
def _as_quantity(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    try:
        qty = int(value)
    except (TypeError, ValueError):
        return None
    return qty if qty > 0 else None


def parse_cart_items(raw: Any) -> List[Dict[str, Any]]:
    """
    Valide le panier brut [{product_id, quantity}, ...].
    - Soulève HTTPException(400) si absent, vide, ou si une ligne est malformée
      (id vide, quantité non entière ou <= 0).
    - Conserve une entrée par ligne (pas d'agrégation).
    """
    if not raw or not isinstance(raw, list):
        raise HTTPException(status_code=400, detail="Cart items are required")
    items: List[Dict[str, Any]] = []
    for entry in raw:
        if not isinstance(entry, dict):
            raise HTTPException(status_code=400, detail="Cart items are required")
        product_id = str(entry.get("product_id") or "").strip()
        qty = _as_quantity(entry.get("quantity"))
        if not product_id or qty is None:
            raise HTTPException(status_code=400, detail="Cart items are required")
        items.append({"product_id": product_id, "quantity": qty})
    return items


def to_line_items(products_by_id: Dict[str, Dict[str, Any]], cart_items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Une ligne Stripe par entrée du panier, au prix du catalogue.
    - Le prix éventuellement envoyé par le client est ignoré.
    - Soulève HTTPException(400) si un produit est introuvable (aucune session partielle).
    """
    line_items: List[Dict[str, Any]] = []
    for item in cart_items:
        product = products_by_id.get(item["product_id"])
        if not product:
            raise HTTPException(status_code=400, detail=f"Product not found: {item['product_id']}")
        line_items.append({
            "price_data": {
                "currency": CURRENCY,
                "product_data": {
                    "name": product.get("name") or "Product",
                    "metadata": {"product_id": str(product.get("id"))},
                },
                "unit_amount": pricing.to_cents(product.get("price")),
            },
            "quantity": item["quantity"],
        })
    return line_items


def lines_for_pricing(products_by_id: Dict[str, Dict[str, Any]], cart_items: List[Dict[str, Any]]) -> List[pricing.Line]:
    return [(products_by_id[i["product_id"]], i["quantity"]) for i in cart_items if i["product_id"] in products_by_id]


def tax_line_item(tax: float) -> Dict[str, Any]:
    """Ligne Stripe de taxe, marquée kind=tax pour être exclue des order_items."""
    return {
        "price_data": {
            "currency": CURRENCY,
            "product_data": {
                "name": "Sales tax",
                "metadata": {"kind": TAX_LINE_KIND},
            },
            "unit_amount": pricing.to_cents(tax),
        },
        "quantity": 1,
    }


def shipping_options(shipping: float) -> List[Dict[str, Any]]:
    """Option de livraison forfaitaire Stripe ([] si pas de frais)."""
    amount = pricing.to_cents(shipping)
    if amount <= 0:
        return []
    return [{
        "shipping_rate_data": {
            "type": "fixed_amount",
            "display_name": "Standard shipping",
            "fixed_amount": {"amount": amount, "currency": CURRENCY},
        }
    }]


def make_metadata(
    user_id: str,
    cart_items: List[Dict[str, Any]],
    totals: Dict[str, float],
    shipping_address_id: Optional[str] = None,
) -> Dict[str, str]:
    """
    Sérialise les métadonnées Stripe associées à la session.
    - cart_items: JSON informatif, tronqué à la limite Stripe.
    - subtotal/shipping/tax: montants calculés côté serveur, relus par le webhook.
    """
    cart_meta = [{"product_id": i["product_id"], "quantity": i["quantity"]} for i in cart_items]
    metadata = {
        "user_id": user_id,
        "cart_items": json.dumps(cart_meta)[:METADATA_VALUE_LIMIT],
        "subtotal": f"{totals['subtotal']:.2f}",
        "shipping": f"{totals['shipping']:.2f}",
        "tax": f"{totals['tax']:.2f}",
    }
    if shipping_address_id:
        metadata["shipping_address_id"] = str(shipping_address_id)
    return metadata
