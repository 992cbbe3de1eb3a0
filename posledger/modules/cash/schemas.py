from pydantic import BaseModel, ConfigDict
from typing import Dict, List, Optional
from datetime import date, datetime
from decimal import Decimal

class CashBaseModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

class CashMovementResponse(CashBaseModel):
    id: str
    movement_type: str
    direction: str
    amount: Decimal
    reference_type: Optional[str]
    reference_id: Optional[str]
    payment_method: str
    note: Optional[str]
    created_at: Optional[datetime]

class PaymentMethodTotals(BaseModel):
    total_in: Decimal
    total_out: Decimal

class CashDaySummary(BaseModel):
    day: date
    total_in: Decimal
    total_out: Decimal
    position: Decimal
    cash_in_drawer: Decimal
    by_payment_method: Dict[str, PaymentMethodTotals]
    movements: List[CashMovementResponse]
