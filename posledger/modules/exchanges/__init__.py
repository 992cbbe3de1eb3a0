# posledger/modules/exchanges/__init__.py
"""
Módulo de Cambios de prendas

Diferencia positiva: el cliente paga (ingreso a caja).
Diferencia negativa: se devuelve por caja y queda como crédito a favor
en la cuenta corriente del cliente.
"""

from .router import router as exchanges_router
from .service import ExchangesService
from .repository import ExchangeRepository

__all__ = [
    "exchanges_router",
    "ExchangesService",
    "ExchangeRepository"
]
