# posledger/modules/cash/router.py
from datetime import date
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from posledger.config.database import get_db
from posledger.core.results import raise_for_failure
from posledger.shared.ledger.results import ActionResult
from .service import CashService
from .schemas import CashDaySummary

router = APIRouter(prefix="/cash", tags=["Cash - Caja"])

@router.get("/days/{day}", response_model=ActionResult[CashDaySummary])
async def get_cash_day(day: date, db: Session = Depends(get_db)):
    """
    Posición de caja del día: ingresos, egresos y efectivo en caja
    """
    service = CashService(db)
    return raise_for_failure(service.get_day_summary(day))
