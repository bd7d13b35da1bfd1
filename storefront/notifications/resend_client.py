"""
Adaptateur Resend (API HTTP d'envoi d'e-mails transactionnels).
"""
from typing import Any, Dict, List, Optional, Union
import logging

import httpx

from storefront import config

logger = logging.getLogger(__name__)


class EmailDeliveryError(RuntimeError):
    """Resend a refusé l'envoi (réponse non 2xx) ou est injoignable."""


# module storefront.notifications.resend_client
def send_email(
    *,
    sender: str,
    to: Union[str, List[str]],
    subject: str,
    html: str,
    text: Optional[str] = None,
    reply_to: Optional[str] = None,
) -> Dict[str, Any]:
    """
    POST https://api.resend.com/emails (Authorization: Bearer RESEND_API_KEY).
    - ConfigError si RESEND_API_KEY est absent (aucun appel réseau)
    - EmailDeliveryError si la réponse n'est pas 2xx
    Retour: corps JSON de Resend (ex: {"id": "..."})
    """
    api_key = config.require_setting("RESEND_API_KEY")
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    payload: Dict[str, Any] = {
        "from": sender,
        "to": [to] if isinstance(to, str) else list(to),
        "subject": subject,
        "html": html,
    }
    if text:
        payload["text"] = text
    if reply_to:
        payload["reply_to"] = reply_to

    try:
        resp = httpx.post(config.RESEND_API_URL, json=payload, headers=headers, timeout=10)
    except httpx.HTTPError as e:
        logger.error("Resend injoignable: %s", e)
        raise EmailDeliveryError(f"Failed to send email: {e}") from e
    if not (200 <= resp.status_code < 300):
        logger.error("Resend API error: status=%s body=%s", resp.status_code, resp.text)
        raise EmailDeliveryError(f"Failed to send email: {resp.text}")
    try:
        return resp.json() or {}
    except ValueError:
        return {}
