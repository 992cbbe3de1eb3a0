# posledger/modules/cash/__init__.py
"""
Módulo de Caja - Ledger de Caja

Cada movimiento guarda un monto no negativo y una dirección (IN/OUT).
La posición de un día es la suma firmada de sus movimientos.
"""

from .router import router as cash_router
from .service import CashService
from .repository import CashRepository

__all__ = [
    "cash_router",
    "CashService",
    "CashRepository"
]
