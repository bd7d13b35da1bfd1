"""
Module 'cart': panier en mémoire et règles de prix partagées.
"""

from .models import Cart, CartItem
from .pricing import (
    amount_from,
    compute_shipping,
    compute_subtotal,
    compute_tax,
    compute_totals,
    to_cents,
    to_money,
)

__all__ = [
    "Cart",
    "CartItem",
    "amount_from",
    "compute_shipping",
    "compute_subtotal",
    "compute_tax",
    "compute_totals",
    "to_cents",
    "to_money",
]
