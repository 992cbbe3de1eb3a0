from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable, List, Optional

from posledger.config.settings import settings
from .errors import LedgerValidationError

ZERO = Decimal("0")

# Numeric(12, 2): hasta 10 dígitos enteros
MAX_AMOUNT = Decimal(10) ** 10
# Columna Integer de 32 bits; ninguna línea legítima se acerca
MAX_QUANTITY = 1_000_000


def to_money(value: Any) -> Decimal:
    """Normaliza un monto a Decimal con la escala de moneda configurada"""
    if value is None:
        return ZERO.quantize(Decimal(1).scaleb(-settings.currency_scale))
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(Decimal(1).scaleb(-settings.currency_scale), rounding=ROUND_HALF_UP)


def validate_amount(value: Any, message: str, allow_zero: bool = False, allow_negative: bool = False) -> Decimal:
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise LedgerValidationError(message)

    if not amount.is_finite() or abs(amount) >= MAX_AMOUNT:
        raise LedgerValidationError(message)
    if (amount < 0 and not allow_negative) or (amount == 0 and not allow_zero):
        raise LedgerValidationError(message)

    try:
        return to_money(amount)
    except InvalidOperation:
        raise LedgerValidationError(message)


def validate_quantity(value: Any, message: str, allow_negative: bool = False) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise LedgerValidationError(message)
    if value == 0 or (value < 0 and not allow_negative) or abs(value) > MAX_QUANTITY:
        raise LedgerValidationError(message)
    return value


def validate_items(items: Optional[Iterable[Any]], allow_empty: bool = False) -> List[Any]:
    items = list(items or [])
    if not items and not allow_empty:
        raise LedgerValidationError("La lista de items no puede estar vacía")

    for item in items:
        if not item.product_id:
            raise LedgerValidationError("Producto inválido")
        validate_quantity(item.quantity, "Cantidad inválida")
    return items


def validate_prices(items: Iterable[Any]) -> None:
    for item in items:
        validate_amount(item.unit_price, "Precio inválido", allow_zero=True)


def sum_total(items: Iterable[Any]) -> Decimal:
    total = to_money(sum((Decimal(item.quantity) * to_money(item.unit_price) for item in items), ZERO))
    if total >= MAX_AMOUNT:
        raise LedgerValidationError("Total inválido")
    return total


def unique_product_ids(*item_lists: Iterable[Any]) -> List[str]:
    """Ids de producto sin repetir, ordenados (orden determinístico de bloqueo)"""
    return sorted({item.product_id for items in item_lists for item in items})


def requested_quantities(items: Iterable[Any]) -> dict:
    """Cantidad total pedida por producto (un producto puede repetirse en varias líneas)"""
    totals = {}
    for item in items:
        totals[item.product_id] = totals.get(item.product_id, 0) + item.quantity
    return totals
