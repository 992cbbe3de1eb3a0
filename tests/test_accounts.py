# tests/test_accounts.py
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError

from posledger.shared.database.enums import AccountStatus, PaymentMethod
from posledger.shared.database.models import AccountMovement, CashMovement
from posledger.modules.accounts.service import AccountsService
from posledger.modules.accounts.schemas import (
    CustomerCreateRequest, PayAccountRequest, AddDebtRequest
)
from posledger.modules.cash.repository import CashRepository


def add_debt(db, customer_id, amount="100"):
    result = AccountsService(db).add_debt(AddDebtRequest(customer_id=customer_id, amount=Decimal(amount)))
    assert result.ok, result.error
    return result.data


class TestCustomers:

    def test_create_customer_strips_fields(self, db):
        result = AccountsService(db).create_customer(CustomerCreateRequest(
            full_name="  Ana Pérez ", phone=" ", email="ana@example.com"
        ))

        assert result.ok
        assert result.data.full_name == "Ana Pérez"
        assert result.data.phone is None

    def test_name_is_required(self, db):
        result = AccountsService(db).create_customer(CustomerCreateRequest(full_name="   "))

        assert not result.ok
        assert result.error.code == "VALIDATION"

    def test_balance_without_account_is_zero(self, db, create_customer):
        customer_id = create_customer()

        result = AccountsService(db).get_customer_balance(customer_id)

        assert result.ok
        assert result.data.balance == Decimal("0")
        assert result.data.account_id is None

    def test_statement_lists_movements(self, db, create_customer):
        customer_id = create_customer()
        add_debt(db, customer_id, "100")
        add_debt(db, customer_id, "20")

        result = AccountsService(db).get_account_statement(customer_id)

        assert result.ok
        assert result.data.balance == Decimal("120")
        assert result.data.status == AccountStatus.DEUDA.value
        assert len(result.data.movements) == 2

    def test_statement_unknown_customer(self, db):
        result = AccountsService(db).get_account_statement("no-existe")

        assert not result.ok
        assert result.error.code == "NOT_FOUND"


class TestAddDebt:
    """Deuda manual: crea la cuenta si no existe y no mueve caja"""

    def test_creates_account_lazily(self, db, create_customer):
        customer_id = create_customer()

        data = add_debt(db, customer_id, "75.50")

        assert data.balance == Decimal("75.50")
        assert data.status == AccountStatus.DEUDA.value
        assert db.query(CashMovement).count() == 0

    def test_amount_must_be_positive(self, db, create_customer):
        customer_id = create_customer()

        result = AccountsService(db).add_debt(AddDebtRequest(customer_id=customer_id, amount=Decimal("0")))

        assert not result.ok
        assert result.error.message == "El monto debe ser mayor a cero"

    def test_unknown_customer(self, db):
        result = AccountsService(db).add_debt(AddDebtRequest(customer_id="no-existe", amount=Decimal("10")))

        assert not result.ok
        assert result.error.code == "NOT_FOUND"


class TestPayAccount:
    """Pagos de deuda"""

    def test_payment_reduces_balance_and_enters_cash(self, db, create_customer):
        customer_id = create_customer()
        add_debt(db, customer_id, "100")

        result = AccountsService(db).pay_account(PayAccountRequest(
            customer_id=customer_id, amount=Decimal("40"), payment_method=PaymentMethod.TRANSFER
        ))

        assert result.ok
        assert result.data.balance == Decimal("60")
        assert result.data.status == AccountStatus.DEUDA.value

        payment = db.query(AccountMovement).filter(AccountMovement.movement_type == "PAYMENT").one()
        cash = CashRepository(db).get_cash_movements_by_reference("PAYMENT", payment.id)
        assert len(cash) == 1
        assert cash[0].amount == Decimal("40")
        assert cash[0].payment_method == "TRANSFER"

    def test_full_payment_closes_account(self, db, create_customer):
        customer_id = create_customer()
        add_debt(db, customer_id, "100")

        result = AccountsService(db).pay_account(PayAccountRequest(customer_id=customer_id, amount=Decimal("100")))

        assert result.ok
        assert result.data.balance == Decimal("0")
        assert result.data.status == AccountStatus.CANCELADO.value

    def test_payment_above_balance(self, db, create_customer):
        customer_id = create_customer()
        add_debt(db, customer_id, "100")

        result = AccountsService(db).pay_account(PayAccountRequest(customer_id=customer_id, amount=Decimal("100.01")))

        assert not result.ok
        assert result.error.message == "Pago mayor al saldo"

    def test_account_without_debt(self, db, create_customer):
        customer_id = create_customer()
        add_debt(db, customer_id, "100")
        AccountsService(db).pay_account(PayAccountRequest(customer_id=customer_id, amount=Decimal("100")))

        result = AccountsService(db).pay_account(PayAccountRequest(customer_id=customer_id, amount=Decimal("1")))

        assert not result.ok
        assert result.error.message == "La cuenta no tiene deuda"

    def test_customer_without_account(self, db, create_customer):
        result = AccountsService(db).pay_account(PayAccountRequest(customer_id=create_customer(), amount=Decimal("1")))

        assert not result.ok
        assert result.error.message == "Cuenta corriente inexistente"

    def test_failed_cash_entry_discards_payment(self, db, create_customer, balance_of, monkeypatch):
        customer_id = create_customer()
        add_debt(db, customer_id, "100")

        def broken_cash(self, uow, data):
            raise SQLAlchemyError("database is locked")

        monkeypatch.setattr(CashRepository, "create_cash_movement", broken_cash)

        result = AccountsService(db).pay_account(PayAccountRequest(customer_id=customer_id, amount=Decimal("30")))

        assert not result.ok
        assert result.error.code == "STORE_ERROR"
        assert balance_of(customer_id) == Decimal("100")
        assert db.query(AccountMovement).filter(AccountMovement.movement_type == "PAYMENT").count() == 0


class TestReversePayment:
    """Anulación de pagos: conserva el historial y no se puede repetir"""

    def pay(self, db, customer_id, amount="40", method=PaymentMethod.CASH):
        result = AccountsService(db).pay_account(PayAccountRequest(
            customer_id=customer_id, amount=Decimal(amount), payment_method=method
        ))
        assert result.ok, result.error
        return db.query(AccountMovement).filter(AccountMovement.movement_type == "PAYMENT").one().id

    def test_reverse_restores_balance_and_cash(self, db, create_customer):
        customer_id = create_customer()
        add_debt(db, customer_id, "100")
        payment_id = self.pay(db, customer_id, method=PaymentMethod.CARD)

        result = AccountsService(db).reverse_payment(payment_id)

        assert result.ok
        assert result.data.balance == Decimal("100")
        assert result.data.status == AccountStatus.DEUDA.value

        # El pago original sigue en el historial
        assert db.query(AccountMovement).filter(AccountMovement.id == payment_id).count() == 1

        refund = CashRepository(db).get_cash_movements_by_reference("PAYMENT_REVERSAL", payment_id)
        assert len(refund) == 1
        assert refund[0].direction == "OUT"
        assert refund[0].amount == Decimal("40")
        assert refund[0].payment_method == "CARD"

    def test_cannot_reverse_twice(self, db, create_customer, balance_of):
        customer_id = create_customer()
        add_debt(db, customer_id, "100")
        payment_id = self.pay(db, customer_id)
        service = AccountsService(db)
        assert service.reverse_payment(payment_id).ok

        result = service.reverse_payment(payment_id)

        assert not result.ok
        assert result.error.code == "INVALID_STATE"
        assert balance_of(customer_id) == Decimal("100")

    def test_only_payments_can_be_reversed(self, db, create_customer):
        customer_id = create_customer()
        add_debt(db, customer_id, "100")
        debt_id = db.query(AccountMovement).filter(AccountMovement.movement_type == "DEBT").one().id

        result = AccountsService(db).reverse_payment(debt_id)

        assert not result.ok
        assert result.error.message == "Solo se puede anular un movimiento de tipo Pago"

    def test_unknown_movement(self, db):
        result = AccountsService(db).reverse_payment("no-existe")

        assert not result.ok
        assert result.error.code == "NOT_FOUND"
