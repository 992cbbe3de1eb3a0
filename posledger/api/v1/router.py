# posledger/api/v1/router.py
from fastapi import APIRouter

from posledger.config.settings import settings
from posledger.modules.inventory import inventory_router
from posledger.modules.sales import sales_router
from posledger.modules.accounts import accounts_router
from posledger.modules.exchanges import exchanges_router
from posledger.modules.cash import cash_router

# Crear router principal de la API v1
api_router = APIRouter()

# ==================== MÓDULOS ====================

api_router.include_router(inventory_router)
api_router.include_router(sales_router)
api_router.include_router(accounts_router)
api_router.include_router(exchanges_router)
api_router.include_router(cash_router)

# ==================== ENDPOINTS RAÍZ ====================

@api_router.get("/")
async def api_root():
    """Root endpoint de la API"""
    return {
        "message": f"{settings.app_name} v1",
        "version": settings.version,
        "status": "active",
        "available_endpoints": {
            "inventory": "/api/v1/inventory",
            "sales": "/api/v1/sales",
            "accounts": "/api/v1/accounts",
            "exchanges": "/api/v1/exchanges",
            "cash": "/api/v1/cash"
        }
    }

@api_router.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.version
    }
