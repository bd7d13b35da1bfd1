"""
Règles de prix du panier (pures, sans Stripe ni DB).
Partagées par le panier en mémoire (affichage) et par le service de checkout
(montants autoritatifs stockés dans la metadata de la session).
"""
from typing import Any, Dict, Iterable, Tuple

from storefront.config import TAX_RATE

# module storefront.cart.pricing
# (produit, quantité)
Line = Tuple[Dict[str, Any], int]


def to_money(value: float) -> float:
    return round(float(value), 2)


def amount_from(value: Any) -> float:
    """
    Convertit une valeur (str|int|float|None) en montant float.
    Retourne 0.0 si parsing impossible.
    """
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def to_cents(value: float) -> int:
    return int(round(amount_from(value) * 100))


def compute_subtotal(lines: Iterable[Line]) -> float:
    return to_money(sum(amount_from(p.get("price")) * int(qty) for p, qty in lines))


def compute_shipping(lines: Iterable[Line]) -> float:
    # Frais de port forfaitaires par ligne, non multipliés par la quantité
    return to_money(sum(amount_from(p.get("shipping_price")) for p, qty in lines if int(qty) > 0))


def compute_tax(subtotal: float, rate: float = TAX_RATE) -> float:
    return to_money(amount_from(subtotal) * rate)


def compute_totals(lines: Iterable[Line], rate: float = TAX_RATE) -> Dict[str, float]:
    """
    Calcule {subtotal, shipping, tax, total} pour une liste de (produit, quantité).
    - subtotal = Σ prix × quantité
    - shipping = Σ shipping_price (forfait par ligne)
    - tax = subtotal × rate (9.5% par défaut)
    - total = subtotal + shipping + tax
    """
    lines = list(lines)
    subtotal = compute_subtotal(lines)
    shipping = compute_shipping(lines)
    tax = compute_tax(subtotal, rate)
    return {
        "subtotal": subtotal,
        "shipping": shipping,
        "tax": tax,
        "total": to_money(subtotal + shipping + tax),
    }
