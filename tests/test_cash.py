# tests/test_cash.py
from datetime import date, datetime, timezone, timedelta
from decimal import Decimal

from posledger.shared.database.enums import PaymentMethod
from posledger.shared.database.models import CashMovement
from posledger.modules.accounts.service import AccountsService
from posledger.modules.accounts.schemas import AddDebtRequest, PayAccountRequest
from posledger.modules.cash.repository import CashRepository
from posledger.modules.cash.service import CashService
from posledger.modules.sales.service import SalesService
from posledger.modules.sales.schemas import SaleCreateRequest, SaleItemRequest


def today():
    # CURRENT_TIMESTAMP de SQLite está en UTC
    return datetime.now(timezone.utc).date()


class TestCashDay:
    """Posición de caja por día y por método de pago"""

    def test_position_by_direction_and_method(self, db, create_product, create_customer):
        product_id = create_product()
        customer_id = create_customer()
        service = SalesService(db)
        sale_id = service.create_sale(SaleCreateRequest(
            items=[SaleItemRequest(product_id=product_id, quantity=2, unit_price=Decimal("100"))],
            paid_amount=Decimal("200")
        )).data.sale_id
        AccountsService(db).add_debt(AddDebtRequest(customer_id=customer_id, amount=Decimal("80")))
        AccountsService(db).pay_account(PayAccountRequest(
            customer_id=customer_id, amount=Decimal("50"), payment_method=PaymentMethod.TRANSFER
        ))
        service.cancel_sale(sale_id)

        result = CashService(db).get_day_summary(today())

        assert result.ok
        summary = result.data
        assert summary.total_in == Decimal("250")
        assert summary.total_out == Decimal("200")
        assert summary.position == Decimal("50")
        assert summary.cash_in_drawer == Decimal("0")
        assert summary.by_payment_method["TRANSFER"].total_in == Decimal("50")
        assert len(summary.movements) == 3
        assert CashRepository(db).cash_position(today()) == Decimal("50")

    def test_empty_day(self, db):
        result = CashService(db).get_day_summary(today() - timedelta(days=30))

        assert result.ok
        assert result.data.position == Decimal("0")
        assert result.data.movements == []

    def test_day_boundaries(self, db):
        def movement(created_at, amount):
            return CashMovement(
                movement_type="ADJUSTMENT", direction="IN", amount=Decimal(amount),
                payment_method="CASH", created_at=created_at
            )

        db.add_all([
            movement(datetime(2026, 3, 9, 23, 59, 59), "1"),
            movement(datetime(2026, 3, 10, 0, 0, 0), "10"),
            movement(datetime(2026, 3, 10, 23, 59, 59), "20"),
            movement(datetime(2026, 3, 11, 0, 0, 0), "100"),
        ])
        db.commit()

        repository = CashRepository(db)
        assert repository.cash_position(date(2026, 3, 10)) == Decimal("30")
        assert len(repository.get_day_movements(date(2026, 3, 10))) == 2
        assert repository.cash_position(date(2026, 3, 11)) == Decimal("100")
