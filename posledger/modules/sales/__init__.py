# posledger/modules/sales/__init__.py
"""
Módulo de Ventas

- Ventas con pago total, parcial o fiadas (deuda en cuenta corriente)
- Consumo automático del crédito a favor del cliente
- Anulación de ventas con reversa de stock, caja y cuenta
- Ventas condicionales: OPEN -> CONFIRMED | RETURNED

Arquitectura:
- router.py: Endpoints FastAPI
- service.py: Orquestación transaccional de los ledgers
- repository.py: Acceso a datos de ventas e items
- schemas.py: Modelos Pydantic de request/response
"""

from .router import router as sales_router
from .service import SalesService
from .repository import SalesRepository

__all__ = [
    "sales_router",
    "SalesService",
    "SalesRepository"
]
