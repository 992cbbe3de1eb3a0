from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from posledger.shared.database.enums import PaymentMethod

# ==================== CLASE BASE PARA RESPUESTAS (Pydantic v2) ====================

class AccountsBaseModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

# ==================== REQUEST SCHEMAS ====================

class CustomerCreateRequest(BaseModel):
    full_name: str = Field(..., description="Nombre y apellido")
    phone: Optional[str] = Field(None, description="Teléfono")
    email: Optional[str] = Field(None, description="Email")
    address: Optional[str] = Field(None, description="Dirección")

class PayAccountRequest(BaseModel):
    customer_id: str = Field(..., description="Cliente que paga")
    amount: Decimal = Field(..., description="Monto a cancelar de la deuda")
    payment_method: PaymentMethod = Field(PaymentMethod.CASH, description="Método de pago")
    notes: Optional[str] = Field(None, description="Notas")

class AddDebtRequest(BaseModel):
    customer_id: str = Field(..., description="Cliente")
    amount: Decimal = Field(..., description="Monto de la deuda")
    note: Optional[str] = Field(None, description="Motivo")

# ==================== RESPONSE SCHEMAS ====================

class CustomerResponse(AccountsBaseModel):
    id: str
    full_name: str
    phone: Optional[str]
    email: Optional[str]
    address: Optional[str]

class AccountMovementResponse(AccountsBaseModel):
    id: str
    account_id: str
    movement_type: str
    amount: Decimal
    reference_type: Optional[str]
    reference_id: Optional[str]
    note: Optional[str]
    created_at: Optional[datetime]

class CustomerBalanceData(BaseModel):
    customer_id: str
    account_id: Optional[str] = None
    status: Optional[str] = None
    balance: Decimal

class AccountBalanceData(BaseModel):
    account_id: str
    balance: Decimal
    status: str

class AccountStatementData(BaseModel):
    customer: CustomerResponse
    account_id: Optional[str] = None
    status: Optional[str] = None
    balance: Decimal
    movements: List[AccountMovementResponse] = []
