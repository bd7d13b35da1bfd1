"""
Registre central des routers (API v1, admin, health).
"""
from fastapi import FastAPI

from storefront.addresses.views import router as addresses_router
from storefront.admin.views import router as admin_router
from storefront.health.router import router as health_router
from storefront.notifications.views import router as emails_router
from storefront.orders.views import router as orders_router
from storefront.payments.views import router as payments_router


def register_routers(app: FastAPI) -> None:
    # API v1
    app.include_router(payments_router)
    app.include_router(emails_router)
    app.include_router(orders_router)
    app.include_router(addresses_router)
    # Admin
    app.include_router(admin_router)
    # Health & monitoring
    app.include_router(health_router)
