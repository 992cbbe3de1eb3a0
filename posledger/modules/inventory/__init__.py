# posledger/modules/inventory/__init__.py
"""
Módulo de Inventario - Ledger de Stock

El stock de un producto no se guarda: es la suma de sus movimientos firmados
(INITIAL, ADJUSTMENT, SALE_PHYSICAL, SALE_MERCADOLIBRE, EXCHANGE_IN, EXCHANGE_OUT).

- Alta de productos con stock inicial
- Ajustes manuales de stock
- Ventas entrantes de Mercado Libre (idempotentes por orden)

Arquitectura:
- router.py: Endpoints FastAPI
- service.py: Lógica de negocio
- repository.py: Acceso a datos (StockRepository es el ledger de stock)
- schemas.py: Modelos Pydantic de request/response
"""

from .router import router as inventory_router
from .service import InventoryService
from .repository import StockRepository

__all__ = [
    "inventory_router",
    "InventoryService",
    "StockRepository"
]
