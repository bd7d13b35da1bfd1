import logging
from typing import Any, Dict

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request

from storefront.config import ConfigError
from storefront.notifications import service as notifications_service
from storefront.utils.rate_limit import optional_rate_limit
from storefront.utils.security import require_user

from storefront.payments import stripe_client
from storefront.payments import service as payments_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])


# module storefront.payments.views
@router.post("/checkout-session", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_checkout_session(request: Request, user: dict = Depends(require_user)):
    """
    Crée une session Checkout Stripe pour le panier de l'utilisateur authentifié.
    - Entrée JSON: { "cart_items": [ { "product_id": "<id>", "quantity": <int> }, ... ],
                     "shipping_address_id": "<id>" (optionnel) }
    - Sécurité: require_user + rate limit (10 req / 60s)
    - Les prix sont relus en base (service-role), le prix client est ignoré
    - Réponse: {"url": "<url Stripe hébergée>"}
    - Erreurs: 400 panier invalide / produit introuvable, 500 lecture catalogue
    """
    try:
        body = await request.json()
    except Exception:
        body = None
    if not isinstance(body, dict):
        body = {}

    try:
        return payments_service.create_checkout_session(
            user=user,
            cart_items=body.get("cart_items"),
            shipping_address_id=body.get("shipping_address_id") or None,
        )
    except (HTTPException, ConfigError):
        raise
    except Exception as e:
        logger.exception("Erreur create_checkout_session user_id=%s", user.get("id"))
        raise HTTPException(status_code=500, detail=str(e) or "Internal server error")


@router.post("/webhook", include_in_schema=False)
async def stripe_webhook(request: Request, background_tasks: BackgroundTasks):
    """
    Webhook Stripe: consomme checkout.session.completed pour créer la commande.
    - Signature: vérifiée sur le corps brut (Stripe-Signature + STRIPE_WEBHOOK_SECRET)
    - Commande + lignes + décrément de stock: orders.service.finalize_checkout_session
    - E-mail de confirmation: tâche de fond après la réponse (échec journalisé seulement)
    - Réponses: {"received": true} (+ "duplicate": true si déjà traité)
    - Erreurs: 400 signature/metadata, 500 sinon (Stripe relivre)
    """
    payload = await request.body()
    event = stripe_client.parse_event(payload, request.headers.get("stripe-signature"))
    try:
        result = payments_service.handle_event(event)
    except (HTTPException, ConfigError):
        raise
    except Exception as e:
        logger.exception("Erreur stripe_webhook event=%s", (event or {}).get("id"))
        raise HTTPException(status_code=500, detail=str(e) or "Webhook processing failed")

    response: Dict[str, Any] = {"received": True}
    if not result:
        return response
    if result.get("duplicate"):
        response["duplicate"] = True
        return response

    notification = result.get("notification") or {}
    if notification.get("order_id") and notification.get("user_id"):
        background_tasks.add_task(
            notifications_service.dispatch_order_confirmation,
            notification["order_id"],
            notification["user_id"],
        )
    logger.info(
        "payments.webhook order=%s items=%s skipped=%s stock=%s",
        (result.get("order") or {}).get("id"), result.get("items_created"), result.get("skipped"), result.get("stock"),
    )
    return response
