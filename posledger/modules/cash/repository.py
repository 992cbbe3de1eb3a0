# posledger/modules/cash/repository.py
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import List, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy import asc

from posledger.shared.database.enums import CashDirection
from posledger.shared.database.models import CashMovement
from posledger.shared.ledger.unit_of_work import LedgerUnitOfWork
from posledger.shared.ledger.validation import to_money

class CashRepository:
    """
    Ledger de caja: posición = suma de movimientos firmados por dirección
    """

    def __init__(self, db: Session):
        self.db = db

    def create_cash_movement(self, uow: LedgerUnitOfWork, movement_data: Dict[str, Any]) -> CashMovement:
        return uow.add(CashMovement(**movement_data))

    def get_cash_movements_by_reference(self, reference_type: str, reference_id: str) -> List[CashMovement]:
        return self.db.query(CashMovement).filter(
            CashMovement.reference_type == reference_type,
            CashMovement.reference_id == reference_id
        ).order_by(asc(CashMovement.created_at)).all()

    def net_cash_for_reference(self, reference_type: str, reference_id: str) -> Decimal:
        """
        Ingresos menos egresos de caja atribuibles a una entidad
        """
        net = Decimal("0")
        for movement in self.get_cash_movements_by_reference(reference_type, reference_id):
            net += _signed(movement)
        return to_money(net)

    def get_day_movements(self, day: date) -> List[CashMovement]:
        start = datetime.combine(day, time.min)
        return self.db.query(CashMovement).filter(
            CashMovement.created_at >= start,
            CashMovement.created_at < start + timedelta(days=1)
        ).order_by(asc(CashMovement.created_at)).all()

    def cash_position(self, day: date) -> Decimal:
        """
        Posición del día: +amount para IN, -amount para OUT
        """
        return to_money(sum((_signed(m) for m in self.get_day_movements(day)), Decimal("0")))

    def day_summary(self, day: date) -> Dict[str, Any]:
        """
        Totales del día por dirección y método de pago
        """
        movements = self.get_day_movements(day)

        total_in = Decimal("0")
        total_out = Decimal("0")
        by_method: Dict[str, Dict[str, Decimal]] = {}

        for movement in movements:
            amount = to_money(movement.amount)
            method = movement.payment_method or "CASH"
            bucket = by_method.setdefault(method, {"total_in": Decimal("0"), "total_out": Decimal("0")})

            if movement.direction == CashDirection.IN.value:
                total_in += amount
                bucket["total_in"] += amount
            else:
                total_out += amount
                bucket["total_out"] += amount

        cash_bucket = by_method.get("CASH", {"total_in": Decimal("0"), "total_out": Decimal("0")})

        return {
            "day": day,
            "total_in": to_money(total_in),
            "total_out": to_money(total_out),
            "position": to_money(total_in - total_out),
            "cash_in_drawer": to_money(cash_bucket["total_in"] - cash_bucket["total_out"]),
            "by_payment_method": {
                method: {key: to_money(value) for key, value in totals.items()}
                for method, totals in by_method.items()
            },
            "movements": movements
        }

def _signed(movement: CashMovement) -> Decimal:
    amount = to_money(movement.amount)
    return amount if movement.direction == CashDirection.IN.value else -amount
