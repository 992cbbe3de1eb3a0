from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from posledger.shared.database.enums import PaymentMethod

# ==================== REQUEST SCHEMAS ====================

class ExchangeItemRequest(BaseModel):
    product_id: str = Field(..., description="Producto")
    quantity: int = Field(..., description="Cantidad")

class ExchangeCreateRequest(BaseModel):
    customer_id: Optional[str] = Field(None, description="Cliente; obligatorio si la diferencia queda a su favor")
    items_in: List[ExchangeItemRequest] = Field(default_factory=list, description="Prendas que devuelve el cliente")
    items_out: List[ExchangeItemRequest] = Field(default_factory=list, description="Prendas que se lleva el cliente")
    difference_amount: Decimal = Field(Decimal("0"), description="Valor que sale menos valor que entra")
    payment_method: PaymentMethod = Field(PaymentMethod.CASH, description="Método de pago de la diferencia")
    notes: Optional[str] = Field(None, description="Notas del cambio")
    exchange_date: Optional[datetime] = Field(None, description="Fecha del cambio (por defecto, ahora)")

# ==================== RESPONSE SCHEMAS ====================

class ExchangeCreatedData(BaseModel):
    exchange_id: str
    difference_amount: Decimal
    account_balance: Optional[Decimal] = None
