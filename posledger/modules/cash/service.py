# posledger/modules/cash/service.py
from datetime import date
from sqlalchemy.orm import Session

from posledger.shared.ledger.results import ActionResult, ledger_operation
from .repository import CashRepository
from .schemas import CashDaySummary, CashMovementResponse

class CashService:
    """
    Consulta de la posición de caja por día
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = CashRepository(db)

    @ledger_operation("get_day_summary")
    def get_day_summary(self, day: date) -> ActionResult:
        summary = self.repository.day_summary(day)
        summary["movements"] = [CashMovementResponse.model_validate(m) for m in summary["movements"]]
        return ActionResult.success(CashDaySummary(**summary))
