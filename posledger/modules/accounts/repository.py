# posledger/modules/accounts/repository.py
from decimal import Decimal
from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy import func, desc

from posledger.shared.database.enums import AccountStatus, AccountMovementType, ReferenceType
from posledger.shared.database.models import Customer, CurrentAccount, AccountMovement
from posledger.shared.ledger.unit_of_work import LedgerUnitOfWork
from posledger.shared.ledger.validation import to_money

class AccountRepository:
    """
    Ledger de cuentas corrientes: saldo = suma de movimientos firmados.
    Saldo > 0 es deuda; saldo < 0 es crédito a favor del cliente.
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== CLIENTES ====================

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.id == customer_id).first()

    def create_customer(self, uow: LedgerUnitOfWork, customer_data: Dict[str, Any]) -> Customer:
        return uow.add(Customer(**customer_data))

    # ==================== CUENTAS ====================

    def get_account_by_customer(self, customer_id: str, lock: bool = False) -> Optional[CurrentAccount]:
        query = self.db.query(CurrentAccount).filter(CurrentAccount.customer_id == customer_id)
        if lock:
            query = query.with_for_update()
        return query.first()

    def lock_account(self, account_id: str) -> Optional[CurrentAccount]:
        """
        SELECT ... FOR UPDATE sobre la cuenta: una sola operación de
        escritura en curso por cuenta
        """
        return self.db.query(CurrentAccount).filter(
            CurrentAccount.id == account_id
        ).with_for_update().first()

    def get_or_create_account(self, uow: LedgerUnitOfWork, customer_id: str) -> CurrentAccount:
        """
        Cuenta existente (bloqueada) o una nueva en estado PROBANDO sin movimientos
        """
        account = self.get_account_by_customer(customer_id, lock=True)
        if account:
            return account

        return uow.add(CurrentAccount(
            customer_id=customer_id,
            status=AccountStatus.PROBANDO.value
        ))

    def account_balance(self, account_id: str) -> Decimal:
        total = self.db.query(func.sum(AccountMovement.amount)).filter(
            AccountMovement.account_id == account_id
        ).scalar()

        return to_money(total or 0)

    def update_account_status(self, account: CurrentAccount, balance: Decimal) -> CurrentAccount:
        account.status = AccountStatus.DEUDA.value if balance > 0 else AccountStatus.CANCELADO.value
        self.db.flush()
        return account

    def recompute_account_status(self, account: CurrentAccount) -> Decimal:
        """
        Recalcular saldo y actualizar estado; devuelve el saldo nuevo
        """
        balance = self.account_balance(account.id)
        self.update_account_status(account, balance)
        return balance

    # ==================== MOVIMIENTOS ====================

    def create_account_movement(self, uow: LedgerUnitOfWork, movement_data: Dict[str, Any]) -> AccountMovement:
        return uow.add(AccountMovement(**movement_data))

    def get_movement(self, movement_id: str) -> Optional[AccountMovement]:
        return self.db.query(AccountMovement).filter(AccountMovement.id == movement_id).first()

    def get_account_movements(self, account_id: str) -> List[AccountMovement]:
        return self.db.query(AccountMovement).filter(
            AccountMovement.account_id == account_id
        ).order_by(desc(AccountMovement.created_at)).all()

    def movements_by_reference(
        self,
        account_id: str,
        reference_type: str,
        reference_id: str
    ) -> List[AccountMovement]:
        return self.db.query(AccountMovement).filter(
            AccountMovement.account_id == account_id,
            AccountMovement.reference_type == reference_type,
            AccountMovement.reference_id == reference_id
        ).all()

    def reversal_exists(self, movement_id: str) -> bool:
        return self.db.query(AccountMovement.id).filter(
            AccountMovement.movement_type == AccountMovementType.DEBT.value,
            AccountMovement.reference_type == ReferenceType.PAYMENT_REVERSAL.value,
            AccountMovement.reference_id == movement_id
        ).first() is not None
