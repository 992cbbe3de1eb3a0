class LedgerError(Exception):
    """Error de negocio o de persistencia en una operación del ledger"""

    code = "LEDGER_ERROR"

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class LedgerValidationError(LedgerError):
    """Datos inválidos; se detecta antes de escribir"""
    code = "VALIDATION"


class InsufficientStockError(LedgerValidationError):
    code = "INSUFFICIENT_STOCK"


class NotFoundError(LedgerError):
    """Producto, cliente, cuenta, venta o movimiento inexistente"""
    code = "NOT_FOUND"


class InvalidStateError(LedgerError):
    """La entidad existe pero su estado no admite la operación"""
    code = "INVALID_STATE"


class StoreError(LedgerError):
    """Falla de la base de datos durante la operación"""
    code = "STORE_ERROR"


class RollbackError(StoreError):
    """Falló la reversión de una operación fallida; puede haber registros huérfanos"""
    code = "ROLLBACK_FAILED"
