# module storefront.admin.views

"""API JSON d'administration (require_admin sur chaque route).
- /admin/api/stats: compteurs du tableau de bord
- /admin/api/orders: commandes détaillées (lignes + adresse du client)
- /admin/api/orders/{id}/shipped: expédition / annulation, avis d'expédition en tâche de fond
"""
from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from storefront.admin import repository as admin_repository
from storefront.notifications import service as notifications_service
from storefront.orders import service as orders_service
from storefront.utils.security import require_admin

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["Admin"])


class ShippedUpdate(BaseModel):
    shipped: bool
    tracking_number: Optional[str] = None


@router.get("/api/stats")
def admin_stats(user: dict = Depends(require_admin)):
    return JSONResponse({
        "products_count": admin_repository.count_table_rows("products"),
        "orders_count": admin_repository.count_table_rows("orders"),
        "active_subscriptions_count": admin_repository.count_active_subscriptions(),
    })


@router.get("/api/orders")
def admin_list_orders(limit: int = 200, user: dict = Depends(require_admin)):
    data = orders_service.list_orders_with_details(limit=limit)
    return JSONResponse({"items": data or []})


@router.post("/api/orders/{order_id}/shipped")
def admin_set_shipped(
    order_id: str,
    payload: ShippedUpdate,
    background_tasks: BackgroundTasks,
    user: dict = Depends(require_admin),
) -> Dict[str, Any]:
    updated = orders_service.set_order_shipped(order_id, payload.shipped, payload.tracking_number)
    if not updated:
        raise HTTPException(status_code=404, detail="Order not found")
    if payload.shipped:
        background_tasks.add_task(
            notifications_service.dispatch_shipping_notification,
            order_id,
            updated.get("tracking_number"),
        )
    logger.info("admin.orders shipped=%s order=%s by=%s", payload.shipped, order_id, user.get("id"))
    return {"ok": True, "item": updated}
