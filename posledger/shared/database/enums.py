from enum import Enum

# ===== VENTAS =====

class SaleChannel(str, Enum):
    PHYSICAL = "PHYSICAL"
    MERCADOLIBRE = "MERCADOLIBRE"

class SaleType(str, Enum):
    NORMAL = "NORMAL"
    CONDITIONAL = "CONDITIONAL"

class ConditionalStatus(str, Enum):
    OPEN = "OPEN"
    CONFIRMED = "CONFIRMED"
    RETURNED = "RETURNED"

class PaymentMethod(str, Enum):
    CASH = "CASH"
    TRANSFER = "TRANSFER"
    CARD = "CARD"
    OTHER = "OTHER"

# ===== STOCK =====

class StockChannel(str, Enum):
    LOCAL = "LOCAL"
    MERCADOLIBRE = "MERCADOLIBRE"

class StockMovementType(str, Enum):
    INITIAL = "INITIAL"
    ADJUSTMENT = "ADJUSTMENT"
    SALE_PHYSICAL = "SALE_PHYSICAL"
    SALE_MERCADOLIBRE = "SALE_MERCADOLIBRE"
    EXCHANGE_IN = "EXCHANGE_IN"
    EXCHANGE_OUT = "EXCHANGE_OUT"

# ===== CAJA =====

class CashMovementType(str, Enum):
    SALE = "SALE"
    ACCOUNT_PAYMENT = "ACCOUNT_PAYMENT"
    ADJUSTMENT = "ADJUSTMENT"

class CashDirection(str, Enum):
    IN = "IN"
    OUT = "OUT"

# ===== CUENTAS CORRIENTES =====

class AccountStatus(str, Enum):
    PROBANDO = "PROBANDO"
    DEUDA = "DEUDA"
    CANCELADO = "CANCELADO"

class AccountMovementType(str, Enum):
    DEBT = "DEBT"
    PAYMENT = "PAYMENT"
    CREDIT = "CREDIT"
    CONSUME_CREDIT = "CONSUME_CREDIT"

# ===== REFERENCIAS =====

class ReferenceType(str, Enum):
    """Entidad que originó un movimiento de stock, caja o cuenta"""
    SALE = "SALE"
    SALE_CANCELLATION = "SALE_CANCELLATION"
    CONDITIONAL_RETURN = "CONDITIONAL_RETURN"
    PAYMENT = "PAYMENT"
    PAYMENT_REVERSAL = "PAYMENT_REVERSAL"
    MANUAL = "MANUAL"
    EXCHANGE = "EXCHANGE"
    ADJUSTMENT = "ADJUSTMENT"
    INITIAL = "INITIAL"
    MERCADOLIBRE_ORDER = "MERCADOLIBRE_ORDER"

MERCADOLIBRE_PLATFORM = "mercadolibre"
