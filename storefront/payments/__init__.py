"""
Module 'payments' (feature-first): point d'entrée public.
Réunit logique panier, metadata Stripe, client Stripe et services de checkout/webhook.
"""

from .cart import parse_cart_items, to_line_items, make_metadata, tax_line_item, shipping_options
from .metadata import extract_session_metadata, payment_reference, resolve_line_item
from .stripe_client import require_stripe, create_session, list_line_items, parse_event
from .service import create_checkout_session, handle_event

__all__ = [
    # cart
    "parse_cart_items",
    "to_line_items",
    "make_metadata",
    "tax_line_item",
    "shipping_options",
    # metadata
    "extract_session_metadata",
    "payment_reference",
    "resolve_line_item",
    # stripe
    "require_stripe",
    "create_session",
    "list_line_items",
    "parse_event",
    # services
    "create_checkout_session",
    "handle_event",
]
