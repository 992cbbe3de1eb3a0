# posledger/modules/exchanges/service.py
import logging
from decimal import Decimal
from typing import Optional
from sqlalchemy.orm import Session

from posledger.shared.database.enums import (
    StockMovementType, StockChannel, CashMovementType, CashDirection,
    AccountMovementType, ReferenceType
)
from posledger.shared.ledger.errors import LedgerValidationError, NotFoundError
from posledger.shared.ledger.results import ActionResult, ledger_operation
from posledger.shared.ledger.unit_of_work import LedgerUnitOfWork
from posledger.shared.ledger.validation import (
    to_money, validate_amount, validate_items, unique_product_ids, requested_quantities
)
from posledger.shared.services.marketplace_notifier import (
    MarketplaceNotifier, publish_stock_changes
)
from posledger.modules.inventory.repository import StockRepository
from posledger.modules.accounts.repository import AccountRepository
from posledger.modules.cash.repository import CashRepository
from .repository import ExchangeRepository
from .schemas import ExchangeCreateRequest, ExchangeCreatedData

logger = logging.getLogger(__name__)

class ExchangesService:
    """
    Cambio de prendas: lo que entra suma stock, lo que sale descuenta.
    La diferencia se cobra, se devuelve por caja y, si queda a favor del
    cliente, se registra como crédito en su cuenta corriente.
    """

    def __init__(self, db: Session, notifier: Optional[MarketplaceNotifier] = None):
        self.db = db
        self.repository = ExchangeRepository(db)
        self.stock_repository = StockRepository(db)
        self.account_repository = AccountRepository(db)
        self.cash_repository = CashRepository(db)
        self.notifier = notifier

    @ledger_operation("create_exchange")
    def create_exchange(self, request: ExchangeCreateRequest) -> ActionResult:
        items_in = validate_items(request.items_in, allow_empty=True)
        items_out = validate_items(request.items_out, allow_empty=True)
        if not items_in and not items_out:
            raise LedgerValidationError("El cambio debe tener items")

        difference = self._validate_difference(request.difference_amount)
        if difference < 0 and not request.customer_id:
            raise LedgerValidationError("Cliente requerido cuando la diferencia queda a favor del cliente")

        product_ids = unique_product_ids(items_in, items_out)

        with LedgerUnitOfWork(self.db, "create_exchange") as uow:
            # Lo que entra no tiene tope; lo que sale no puede superar el stock
            self.stock_repository.ensure_products_exist(product_ids, lock=True)
            self.stock_repository.ensure_stock_available(
                requested_quantities(items_out), "Stock insuficiente para entregar"
            )

            if request.customer_id and not self.account_repository.get_customer(request.customer_id):
                raise NotFoundError("Cliente inexistente")

            exchange = self.repository.create_exchange(uow, {
                "exchange_date": request.exchange_date,
                "customer_id": request.customer_id,
                "difference_amount": difference,
                "note": request.notes,
            })

            if items_in:
                self.repository.create_items_in(uow, exchange.id, items_in)
                self.stock_repository.create_stock_movements(uow, [
                    {
                        "product_id": item.product_id,
                        "movement_type": StockMovementType.EXCHANGE_IN.value,
                        "quantity": item.quantity,
                        "reference_type": ReferenceType.EXCHANGE.value,
                        "reference_id": exchange.id,
                        "channel": StockChannel.LOCAL.value,
                    }
                    for item in items_in
                ])

            if items_out:
                self.repository.create_items_out(uow, exchange.id, items_out)
                self.stock_repository.create_stock_movements(uow, [
                    {
                        "product_id": item.product_id,
                        "movement_type": StockMovementType.EXCHANGE_OUT.value,
                        "quantity": -item.quantity,
                        "reference_type": ReferenceType.EXCHANGE.value,
                        "reference_id": exchange.id,
                        "channel": StockChannel.LOCAL.value,
                    }
                    for item in items_out
                ])

            account_balance = None
            if difference != 0:
                self.cash_repository.create_cash_movement(uow, {
                    "movement_type": CashMovementType.ADJUSTMENT.value,
                    "direction": CashDirection.IN.value if difference > 0 else CashDirection.OUT.value,
                    "amount": abs(difference),
                    "reference_type": ReferenceType.EXCHANGE.value,
                    "reference_id": exchange.id,
                    "payment_method": request.payment_method.value,
                    "note": request.notes,
                })

            if difference < 0:
                account = self.account_repository.get_or_create_account(uow, request.customer_id)
                self.account_repository.create_account_movement(uow, {
                    "account_id": account.id,
                    "movement_type": AccountMovementType.CREDIT.value,
                    "amount": difference,
                    "reference_type": ReferenceType.EXCHANGE.value,
                    "reference_id": exchange.id,
                    "note": request.notes,
                })
                account_balance = self.account_repository.recompute_account_status(account)

            result = ExchangeCreatedData(
                exchange_id=exchange.id,
                difference_amount=difference,
                account_balance=account_balance
            )

        publish_stock_changes(self.notifier, product_ids, self.stock_repository.current_stocks)

        logger.info(f"🔄 Cambio {result.exchange_id} registrado (diferencia {difference})")
        return ActionResult.success(result)

    @staticmethod
    def _validate_difference(value) -> Decimal:
        if value is None:
            return to_money(0)
        return validate_amount(value, "Diferencia inválida", allow_zero=True, allow_negative=True)
