"""
Cas d'usage 'notifications': e-mails transactionnels (confirmation, expédition, contact).
Les fonctions send_* propagent les erreurs (vues e-mail -> 500).
Les fonctions dispatch_* sont destinées aux tâches de fond: elles journalisent et avalent.
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from jinja2 import Environment, FileSystemLoader, select_autoescape

from storefront import config
from storefront.addresses import repository as addresses_repository
from storefront.auth import repository as auth_repository
from storefront.cart import pricing
import storefront.infra.supabase_client as supabase_client
from storefront.orders import repository as orders_repository

from .resend_client import send_email

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)

CONFIRMATION_SUBJECT = "Order Confirmation - Thank you for your purchase!"


class OrderNotFound(LookupError):
    pass


def order_ref(order_id: str) -> str:
    """Référence courte affichée au client: 8 premiers caractères en majuscules."""
    return str(order_id or "")[:8].upper()


def shipping_subject(order_id: str) -> str:
    return f"Your order has shipped! - Order #{order_ref(order_id)}"


def display_name(user: Dict[str, Any]) -> str:
    """user_metadata.name, à défaut la partie locale de l'e-mail."""
    name = ((user or {}).get("user_metadata") or {}).get("name")
    if name:
        return name
    return str((user or {}).get("email") or "").split("@")[0] or "Customer"


def _order_items(order: Dict[str, Any]) -> List[Dict[str, Any]]:
    items = []
    for raw in order.get("order_items") or []:
        items.append({
            "product_name": raw.get("product_name") or "Unknown Product",
            "quantity": int(raw.get("quantity") or 0),
            "product_price": pricing.amount_from(raw.get("product_price")),
            "subtotal": pricing.amount_from(raw.get("subtotal")),
        })
    return items


def _order_totals(order: Dict[str, Any], items: List[Dict[str, Any]]) -> Dict[str, float]:
    # Montants enregistrés sur la commande; sous-total recalculé si absent
    subtotal = pricing.amount_from(order.get("subtotal_amount")) or pricing.to_money(sum(i["subtotal"] for i in items))
    return {
        "subtotal": subtotal,
        "shipping": pricing.amount_from(order.get("shipping_amount")),
        "tax": pricing.amount_from(order.get("tax_amount")),
        "total": pricing.amount_from(order.get("total_amount")),
    }


def _load_order(order_id: str) -> Dict[str, Any]:
    order = orders_repository.get_order_with_items(order_id)
    if not order:
        raise OrderNotFound("Order not found")
    return order


def _render(template: str, **context: Any) -> str:
    return _env.get_template(template).render(year=datetime.now(timezone.utc).year, **context)


def _order_context(order_id: str, order: Dict[str, Any], user_name: str) -> Dict[str, Any]:
    items = _order_items(order)
    return {
        "order_ref": order_ref(order_id),
        "user_name": user_name,
        "items": items,
        "totals": _order_totals(order, items),
        "tax_label": f"{config.TAX_RATE * 100:g}%",
    }


def send_order_confirmation(order_id: str, user_email: str, user_name: str) -> Optional[str]:
    """Reçu HTML de la commande. Retourne l'id Resend de l'e-mail."""
    order = _load_order(order_id)
    html = _render("order_confirmation.html", **_order_context(order_id, order, user_name))
    result = send_email(
        sender=config.ORDERS_FROM_EMAIL,
        to=user_email,
        subject=CONFIRMATION_SUBJECT,
        html=html,
    )
    logger.info("Confirmation envoyée order=%s email_id=%s", order_id, result.get("id"))
    return result.get("id")


def send_shipping_notification(
    order_id: str,
    user_email: str,
    user_name: str,
    tracking_number: Optional[str] = None,
) -> Optional[str]:
    """Avis d'expédition (tracking + adresse par défaut si connue)."""
    order = _load_order(order_id)
    address = addresses_repository.get_default_address(order.get("user_id"))
    html = _render(
        "shipping_notification.html",
        tracking_number=tracking_number,
        address=address,
        **_order_context(order_id, order, user_name),
    )
    result = send_email(
        sender=config.ORDERS_FROM_EMAIL,
        to=user_email,
        subject=shipping_subject(order_id),
        html=html,
    )
    logger.info("Avis d'expédition envoyé order=%s email_id=%s", order_id, result.get("id"))
    return result.get("id")


def _record_contact_submission(name: str, email: str, message: str) -> None:
    try:
        supabase_client.get_service_supabase().table("contact_submissions").insert(
            {"name": name, "email": email, "message": message}
        ).execute()
    except Exception:
        logger.exception("notifications.service._record_contact_submission failed email=%s", email)


def send_contact_email(name: str, email: str, message: str) -> Optional[str]:
    """Transmet le formulaire de contact à la boîte de la boutique (HTML + texte)."""
    context = {"name": name, "email": email, "message": message, "message_lines": message.split("\n")}
    result = send_email(
        sender=config.NOREPLY_FROM_EMAIL,
        to=config.CONTACT_INBOX,
        subject=f"New Contact Form Submission from {name}",
        html=_render("contact.html", **context),
        text=_render("contact.txt", **context),
        reply_to=email,
    )
    _record_contact_submission(name, email, message)
    return result.get("id")


# --- Tâches de fond (jamais bloquantes pour l'appelant) ---

def _buyer(user_id: str) -> Optional[Dict[str, Any]]:
    user = auth_repository.get_user_by_id(user_id)
    if not user.get("email"):
        logger.warning("Aucun e-mail pour l'utilisateur %s, notification ignorée", user_id)
        return None
    return user


def dispatch_order_confirmation(order_id: str, user_id: str) -> None:
    """Retrouve l'acheteur (API admin Auth) puis envoie la confirmation. Erreurs journalisées."""
    try:
        buyer = _buyer(user_id)
        if buyer:
            send_order_confirmation(order_id, buyer["email"], display_name(buyer))
    except Exception:
        logger.exception("notifications.dispatch_order_confirmation failed order=%s", order_id)


def dispatch_shipping_notification(order_id: str, tracking_number: Optional[str] = None) -> None:
    try:
        order = _load_order(order_id)
        buyer = _buyer(order.get("user_id"))
        if buyer:
            send_shipping_notification(order_id, buyer["email"], display_name(buyer), tracking_number)
    except Exception:
        logger.exception("notifications.dispatch_shipping_notification failed order=%s", order_id)
