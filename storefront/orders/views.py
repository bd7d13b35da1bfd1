from fastapi import APIRouter, Depends

from storefront.orders import service as orders_service
from storefront.utils.security import require_user

router = APIRouter(prefix="/api/v1/orders", tags=["Orders API"])


# module storefront.orders.views
@router.get("")
def my_orders(user: dict = Depends(require_user)):
    """Historique de commandes de l'utilisateur connecté (avec lignes), récentes d'abord."""
    return {"orders": orders_service.list_user_orders(user)}
