# posledger/modules/accounts/service.py
import logging
from sqlalchemy.orm import Session

from posledger.config.settings import settings
from posledger.shared.database.enums import (
    AccountMovementType, CashMovementType, CashDirection, ReferenceType
)
from posledger.shared.ledger.errors import (
    LedgerValidationError, NotFoundError, InvalidStateError
)
from posledger.shared.ledger.results import ActionResult, ledger_operation
from posledger.shared.ledger.unit_of_work import LedgerUnitOfWork
from posledger.shared.ledger.validation import validate_amount, to_money
from posledger.modules.cash.repository import CashRepository
from .repository import AccountRepository
from .schemas import (
    CustomerCreateRequest, PayAccountRequest, AddDebtRequest,
    CustomerResponse, CustomerBalanceData, AccountBalanceData,
    AccountStatementData, AccountMovementResponse
)

logger = logging.getLogger(__name__)

class AccountsService:
    """
    Cuentas corrientes: clientes, pagos, anulación de pagos y deudas manuales
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = AccountRepository(db)
        self.cash_repository = CashRepository(db)

    # ==================== CLIENTES ====================

    @ledger_operation("create_customer")
    def create_customer(self, request: CustomerCreateRequest) -> ActionResult:
        full_name = (request.full_name or "").strip()
        if not full_name:
            raise LedgerValidationError("El nombre es obligatorio.")

        with LedgerUnitOfWork(self.db, "create_customer") as uow:
            customer = self.repository.create_customer(uow, {
                "full_name": full_name,
                "phone": (request.phone or "").strip() or None,
                "email": (request.email or "").strip() or None,
                "address": (request.address or "").strip() or None,
            })

        return ActionResult.success(CustomerResponse.model_validate(customer))

    @ledger_operation("get_customer_balance")
    def get_customer_balance(self, customer_id: str) -> ActionResult:
        """
        Saldo de la cuenta del cliente. Negativo = crédito a favor; 0 si no tiene cuenta.
        """
        account = self.repository.get_account_by_customer(customer_id)
        if not account:
            return ActionResult.success(CustomerBalanceData(customer_id=customer_id, balance=to_money(0)))

        return ActionResult.success(CustomerBalanceData(
            customer_id=customer_id,
            account_id=account.id,
            status=account.status,
            balance=self.repository.account_balance(account.id)
        ))

    @ledger_operation("get_account_statement")
    def get_account_statement(self, customer_id: str) -> ActionResult:
        customer = self.repository.get_customer(customer_id)
        if not customer:
            raise NotFoundError("Cliente inexistente")

        account = self.repository.get_account_by_customer(customer_id)
        if not account:
            return ActionResult.success(AccountStatementData(
                customer=CustomerResponse.model_validate(customer),
                balance=to_money(0)
            ))

        movements = self.repository.get_account_movements(account.id)
        return ActionResult.success(AccountStatementData(
            customer=CustomerResponse.model_validate(customer),
            account_id=account.id,
            status=account.status,
            balance=self.repository.account_balance(account.id),
            movements=[AccountMovementResponse.model_validate(m) for m in movements]
        ))

    # ==================== PAGOS ====================

    @ledger_operation("pay_account")
    def pay_account(self, request: PayAccountRequest) -> ActionResult:
        """
        Pago de deuda: PAYMENT negativo en la cuenta + ingreso en caja
        """
        if not request.customer_id:
            raise LedgerValidationError("Cliente inválido")
        amount = validate_amount(request.amount, "Monto inválido")

        with LedgerUnitOfWork(self.db, "pay_account") as uow:
            account = self.repository.get_account_by_customer(request.customer_id, lock=True)
            if not account:
                raise NotFoundError("Cuenta corriente inexistente")

            balance = self.repository.account_balance(account.id)
            if balance <= 0:
                raise InvalidStateError("La cuenta no tiene deuda")
            if amount > balance:
                raise LedgerValidationError("Pago mayor al saldo")

            payment = self.repository.create_account_movement(uow, {
                "account_id": account.id,
                "movement_type": AccountMovementType.PAYMENT.value,
                "amount": -amount,
                "reference_type": ReferenceType.PAYMENT.value,
                "note": request.notes,
            })

            self.cash_repository.create_cash_movement(uow, {
                "movement_type": CashMovementType.ACCOUNT_PAYMENT.value,
                "direction": CashDirection.IN.value,
                "amount": amount,
                "reference_type": ReferenceType.PAYMENT.value,
                "reference_id": payment.id,
                "payment_method": request.payment_method.value,
                "note": request.notes,
            })

            new_balance = self.repository.recompute_account_status(account)
            result = AccountBalanceData(account_id=account.id, balance=new_balance, status=account.status)

        return ActionResult.success(result)

    @ledger_operation("reverse_payment")
    def reverse_payment(self, movement_id: str) -> ActionResult:
        """
        Anular un pago: vuelve a sumar la deuda y saca el dinero de caja.
        El PAYMENT original se conserva.
        """
        with LedgerUnitOfWork(self.db, "reverse_payment") as uow:
            movement = self.repository.get_movement(movement_id)
            if not movement:
                raise NotFoundError("Movimiento inexistente")
            if movement.movement_type != AccountMovementType.PAYMENT.value:
                raise InvalidStateError("Solo se puede anular un movimiento de tipo Pago")
            if to_money(movement.amount) >= 0:
                raise InvalidStateError("Movimiento de pago inválido")
            if movement.reference_type != ReferenceType.PAYMENT.value:
                raise InvalidStateError("Solo se pueden anular pagos registrados en caja")

            account = self.repository.lock_account(movement.account_id)
            if not account:
                raise NotFoundError("Cuenta inexistente")

            if self.repository.reversal_exists(movement.id):
                raise InvalidStateError("El pago ya fue anulado")

            amount = abs(to_money(movement.amount))
            payment_method = self._original_payment_method(movement.id)

            self.repository.create_account_movement(uow, {
                "account_id": account.id,
                "movement_type": AccountMovementType.DEBT.value,
                "amount": amount,
                "reference_type": ReferenceType.PAYMENT_REVERSAL.value,
                "reference_id": movement.id,
            })

            self.cash_repository.create_cash_movement(uow, {
                "movement_type": CashMovementType.ACCOUNT_PAYMENT.value,
                "direction": CashDirection.OUT.value,
                "amount": amount,
                "reference_type": ReferenceType.PAYMENT_REVERSAL.value,
                "reference_id": movement.id,
                "payment_method": payment_method,
            })

            new_balance = self.repository.recompute_account_status(account)
            result = AccountBalanceData(account_id=account.id, balance=new_balance, status=account.status)

        return ActionResult.success(result)

    # ==================== DEUDAS MANUALES ====================

    @ledger_operation("add_debt")
    def add_debt(self, request: AddDebtRequest) -> ActionResult:
        """
        Deuda manual sin venta: no mueve caja
        """
        if not request.customer_id:
            raise LedgerValidationError("Cliente inválido")
        amount = validate_amount(request.amount, "El monto debe ser mayor a cero")

        with LedgerUnitOfWork(self.db, "add_debt") as uow:
            if not self.repository.get_customer(request.customer_id):
                raise NotFoundError("Cliente inexistente")

            account = self.repository.get_or_create_account(uow, request.customer_id)

            self.repository.create_account_movement(uow, {
                "account_id": account.id,
                "movement_type": AccountMovementType.DEBT.value,
                "amount": amount,
                "reference_type": ReferenceType.MANUAL.value,
                "note": request.note,
            })

            new_balance = self.repository.recompute_account_status(account)
            result = AccountBalanceData(account_id=account.id, balance=new_balance, status=account.status)

        return ActionResult.success(result)

    # ==================== UTILIDADES ====================

    def _original_payment_method(self, payment_movement_id: str) -> str:
        """
        Método de pago con el que ingresó el dinero; se devuelve por el mismo medio
        """
        for cash in self.cash_repository.get_cash_movements_by_reference(
            ReferenceType.PAYMENT.value, payment_movement_id
        ):
            if cash.direction == CashDirection.IN.value:
                return cash.payment_method
        return settings.default_payment_method
