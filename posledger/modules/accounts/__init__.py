# posledger/modules/accounts/__init__.py
"""
Módulo de Cuentas Corrientes - Ledger de Cuentas

- Alta de clientes y ficha de cuenta
- Pagos de deuda (ingreso a caja)
- Anulación de pagos (conserva el historial)
- Deudas manuales

La cuenta se crea recién cuando se necesita (estado PROBANDO) y su estado
se recalcula después de cada movimiento: DEUDA si el saldo es positivo,
CANCELADO si no.
"""

from .router import router as accounts_router
from .service import AccountsService
from .repository import AccountRepository

__all__ = [
    "accounts_router",
    "AccountsService",
    "AccountRepository"
]
