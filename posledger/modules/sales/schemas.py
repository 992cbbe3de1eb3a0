from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from posledger.shared.database.enums import SaleChannel, PaymentMethod

# ==================== CLASE BASE PARA RESPUESTAS (Pydantic v2) ====================

class SalesBaseModel(BaseModel):
    """
    Clase base para todos los esquemas de respuesta,
    con configuración de Pydantic v2.
    """
    model_config = ConfigDict(from_attributes=True)

# ==================== REQUEST SCHEMAS ====================

class SaleItemRequest(BaseModel):
    product_id: str = Field(..., description="Producto vendido")
    quantity: int = Field(..., description="Cantidad")
    unit_price: Decimal = Field(..., description="Precio unitario (lo define el vendedor)")

class SaleCreateRequest(BaseModel):
    customer_id: Optional[str] = Field(None, description="Cliente; obligatorio si queda saldo pendiente")
    channel: SaleChannel = Field(SaleChannel.PHYSICAL, description="Canal de venta")
    items: List[SaleItemRequest] = Field(default_factory=list, description="Items de la venta")
    paid_amount: Decimal = Field(Decimal("0"), description="Monto pagado en el momento")
    payment_method: PaymentMethod = Field(PaymentMethod.CASH, description="Método de pago")
    notes: Optional[str] = Field(None, description="Notas adicionales")
    sale_date: Optional[datetime] = Field(None, description="Fecha de venta (por defecto, ahora)")

class ConditionalSaleCreateRequest(BaseModel):
    customer_id: Optional[str] = Field(None, description="Cliente que se lleva la mercadería")
    channel: SaleChannel = Field(SaleChannel.PHYSICAL, description="Canal de venta")
    items: List[SaleItemRequest] = Field(default_factory=list, description="Items de la venta")
    notes: Optional[str] = Field(None, description="Notas adicionales")
    sale_date: Optional[datetime] = Field(None, description="Fecha de venta (por defecto, ahora)")

class ConditionalSaleConfirmRequest(BaseModel):
    paid_amount: Decimal = Field(Decimal("0"), description="Pago recibido al confirmar")
    payment_method: PaymentMethod = Field(PaymentMethod.CASH, description="Método de pago")
    notes: Optional[str] = Field(None, description="Notas del pago")

# ==================== RESPONSE SCHEMAS ====================

class SaleItemResponse(SalesBaseModel):
    id: str
    product_id: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal

class SaleResponse(SalesBaseModel):
    id: str
    sale_date: Optional[datetime]
    channel: str
    customer_id: Optional[str]
    total_amount: Decimal
    paid_amount: Decimal
    is_fiado: bool
    payment_method: Optional[str]
    notes: Optional[str]
    sale_type: str
    conditional_status: Optional[str]
    cancelled_at: Optional[datetime]
    items: List[SaleItemResponse]

class SaleCreatedData(BaseModel):
    sale_id: str
    total: Decimal
    pending: Decimal

class ConditionalSaleCreatedData(BaseModel):
    sale_id: str
    total: Decimal

class SaleReferenceData(BaseModel):
    sale_id: str
