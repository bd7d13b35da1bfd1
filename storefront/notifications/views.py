# module storefront.notifications.views

"""Endpoints e-mail (Resend).
- /order-confirmation et /shipping-notification: appels internes (clé service-role ou admin).
- /contact: formulaire public, rate-limité.
Corps JSON en camelCase (orderId, userEmail, userName, trackingNumber).
Réponses: {"success": true, "emailId": ...}; 400 si champ manquant; 500 {"error": ...} sinon.
"""
from typing import Any, Dict
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from storefront.config import ConfigError
from storefront.notifications import service as notifications_service
from storefront.utils.rate_limit import optional_rate_limit
from storefront.utils.security import require_internal_caller

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/emails", tags=["Emails API"])


async def _json_body(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except Exception:
        body = None
    return body if isinstance(body, dict) else {}


def _require(body: Dict[str, Any], *fields: str) -> None:
    if not all(str(body.get(f) or "").strip() for f in fields):
        logger.warning("Champs requis manquants: %s", [f for f in fields if not body.get(f)])
        raise HTTPException(status_code=400, detail="Missing required fields")


@router.post("/order-confirmation")
async def order_confirmation(request: Request, caller: dict = Depends(require_internal_caller)):
    body = await _json_body(request)
    _require(body, "orderId", "userEmail", "userName")
    try:
        email_id = notifications_service.send_order_confirmation(body["orderId"], body["userEmail"], body["userName"])
    except ConfigError:
        raise
    except Exception as e:
        logger.exception("Erreur order_confirmation order=%s", body.get("orderId"))
        raise HTTPException(status_code=500, detail=str(e) or "Internal server error")
    return {"success": True, "emailId": email_id}


@router.post("/shipping-notification")
async def shipping_notification(request: Request, caller: dict = Depends(require_internal_caller)):
    body = await _json_body(request)
    _require(body, "orderId", "userEmail", "userName")
    try:
        email_id = notifications_service.send_shipping_notification(
            body["orderId"],
            body["userEmail"],
            body["userName"],
            tracking_number=body.get("trackingNumber") or None,
        )
    except ConfigError:
        raise
    except Exception as e:
        logger.exception("Erreur shipping_notification order=%s", body.get("orderId"))
        raise HTTPException(status_code=500, detail=str(e) or "Internal server error")
    return {"success": True, "emailId": email_id}


@router.post("/contact", dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
async def contact(request: Request):
    """Formulaire de contact public -> boîte de la boutique."""
    body = await _json_body(request)
    _require(body, "name", "email", "message")
    try:
        email_id = notifications_service.send_contact_email(
            str(body["name"]).strip(), str(body["email"]).strip(), str(body["message"])
        )
    except ConfigError:
        raise
    except Exception as e:
        logger.exception("Erreur contact email=%s", body.get("email"))
        raise HTTPException(status_code=500, detail=str(e) or "Internal server error")
    return {"success": True, "emailId": email_id}
