# posledger/modules/sales/service.py
import logging
from typing import Optional, List
from sqlalchemy import func
from sqlalchemy.orm import Session

from posledger.config.settings import settings
from posledger.shared.database.enums import (
    SaleChannel, SaleType, ConditionalStatus, StockMovementType, StockChannel,
    CashMovementType, CashDirection, AccountMovementType, ReferenceType
)
from posledger.shared.database.models import Sale, SaleItem
from posledger.shared.ledger.errors import (
    LedgerValidationError, NotFoundError, InvalidStateError
)
from posledger.shared.ledger.results import ActionResult, ledger_operation
from posledger.shared.ledger.unit_of_work import LedgerUnitOfWork
from posledger.shared.ledger.validation import (
    ZERO, to_money, validate_amount, validate_items, validate_prices,
    sum_total, unique_product_ids, requested_quantities
)
from posledger.shared.services.marketplace_notifier import (
    MarketplaceNotifier, publish_stock_changes
)
from posledger.modules.inventory.repository import StockRepository
from posledger.modules.accounts.repository import AccountRepository
from posledger.modules.cash.repository import CashRepository
from .repository import SalesRepository
from .schemas import (
    SaleCreateRequest, ConditionalSaleCreateRequest, ConditionalSaleConfirmRequest,
    SaleCreatedData, ConditionalSaleCreatedData, SaleReferenceData, SaleResponse
)

logger = logging.getLogger(__name__)

class SalesService:
    """
    Ventas: alta, anulación y ciclo de vida de ventas condicionales.
    Cada operación escribe stock, caja y cuenta corriente en una sola transacción.
    """

    def __init__(self, db: Session, notifier: Optional[MarketplaceNotifier] = None):
        self.db = db
        self.repository = SalesRepository(db)
        self.stock_repository = StockRepository(db)
        self.account_repository = AccountRepository(db)
        self.cash_repository = CashRepository(db)
        self.notifier = notifier

    # ==================== VENTAS ====================

    @ledger_operation("create_sale")
    def create_sale(self, request: SaleCreateRequest) -> ActionResult:
        """
        Crear venta con descuento de stock, ingreso a caja y, si queda saldo,
        consumo de crédito a favor y deuda en la cuenta del cliente
        """
        items = validate_items(request.items)
        validate_prices(items)
        paid = validate_amount(request.paid_amount, "Pago inválido", allow_zero=True)
        product_ids = unique_product_ids(items)
        total = sum_total(items)

        with LedgerUnitOfWork(self.db, "create_sale") as uow:
            # 1. Bloquear productos y validar stock
            self.stock_repository.ensure_products_exist(product_ids, lock=True)
            self.stock_repository.ensure_stock_available(requested_quantities(items))

            # 2. Validar pago y cliente
            if paid > total:
                raise LedgerValidationError("Pago mayor al total")

            pending = total - paid
            if pending > 0 and not request.customer_id:
                raise LedgerValidationError("Cliente requerido para venta fiada o parcial")
            if request.customer_id and not self.account_repository.get_customer(request.customer_id):
                raise NotFoundError("Cliente inexistente")

            # 3. Crédito a favor del cliente
            account = None
            credit_applied = ZERO
            if pending > 0:
                account = self.account_repository.get_or_create_account(uow, request.customer_id)
                balance = self.account_repository.account_balance(account.id)
                if balance < 0:
                    credit_applied = min(-balance, pending)

            residual = pending - credit_applied

            # 4. Venta e items
            sale = self.repository.create_sale(uow, {
                "sale_date": request.sale_date,
                "channel": request.channel.value,
                "customer_id": request.customer_id,
                "total_amount": total,
                "paid_amount": paid + credit_applied,
                "is_fiado": residual > 0,
                "payment_method": request.payment_method.value,
                "notes": request.notes,
                "sale_type": SaleType.NORMAL.value,
            })
            self.repository.create_sale_items(uow, sale.id, items)

            # 5. Stock
            self.stock_repository.create_stock_movements(uow, self._sale_stock_movements(
                sale.id, request.channel, items
            ))

            # 6. Caja
            if paid > 0:
                self.cash_repository.create_cash_movement(uow, {
                    "movement_type": CashMovementType.SALE.value,
                    "direction": CashDirection.IN.value,
                    "amount": paid,
                    "reference_type": ReferenceType.SALE.value,
                    "reference_id": sale.id,
                    "payment_method": request.payment_method.value,
                    "note": request.notes,
                })

            # 7. Cuenta corriente
            if credit_applied > 0:
                self.account_repository.create_account_movement(uow, {
                    "account_id": account.id,
                    "movement_type": AccountMovementType.CONSUME_CREDIT.value,
                    "amount": credit_applied,
                    "reference_type": ReferenceType.SALE.value,
                    "reference_id": sale.id,
                })

            if residual > 0:
                self.account_repository.create_account_movement(uow, {
                    "account_id": account.id,
                    "movement_type": AccountMovementType.DEBT.value,
                    "amount": residual,
                    "reference_type": ReferenceType.SALE.value,
                    "reference_id": sale.id,
                })

            if account is not None:
                self.account_repository.recompute_account_status(account)

            result = SaleCreatedData(sale_id=sale.id, total=total, pending=to_money(residual))

        self._notify_stock(product_ids)

        logger.info(f"🧾 Venta {result.sale_id}: total {result.total}, pendiente {result.pending}")
        return ActionResult.success(result)

    @ledger_operation("cancel_sale")
    def cancel_sale(self, sale_id: str) -> ActionResult:
        """
        Anular venta: devuelve el stock, saca de caja lo cobrado y compensa
        los movimientos de cuenta que generó. La marca cancelled_at va al final.
        """
        with LedgerUnitOfWork(self.db, "cancel_sale") as uow:
            sale = self.repository.lock_sale(sale_id)
            if not sale:
                raise NotFoundError("Venta inexistente")
            if sale.cancelled_at is not None:
                raise InvalidStateError("La venta ya está anulada")
            if sale.sale_type == SaleType.CONDITIONAL.value:
                if sale.conditional_status == ConditionalStatus.OPEN.value:
                    raise InvalidStateError("Use devolución para ventas condicionales abiertas")
                if sale.conditional_status == ConditionalStatus.RETURNED.value:
                    raise InvalidStateError("La venta condicional ya fue devuelta")

            items = self.repository.get_sale_items(sale.id)
            if not items:
                raise InvalidStateError("La venta no tiene items")

            product_ids = unique_product_ids(items)
            self.stock_repository.lock_products(product_ids)

            # 1. Stock
            self.stock_repository.create_stock_movements(uow, self._return_stock_movements(
                items, ReferenceType.SALE_CANCELLATION, sale.id, sale.channel
            ))

            # 2. Caja: lo que la venta dejó en caja, neto
            refund = self.cash_repository.net_cash_for_reference(ReferenceType.SALE.value, sale.id)
            if refund > 0:
                self.cash_repository.create_cash_movement(uow, {
                    "movement_type": CashMovementType.SALE.value,
                    "direction": CashDirection.OUT.value,
                    "amount": refund,
                    "reference_type": ReferenceType.SALE_CANCELLATION.value,
                    "reference_id": sale.id,
                    "payment_method": sale.payment_method or settings.default_payment_method,
                    "note": "Anulación de venta",
                })

            # 3. Cuenta corriente
            if sale.customer_id:
                self._reverse_account_effect(uow, sale)

            # 4. Marca de anulación
            sale.cancelled_at = func.now()
            self.db.flush()

            result = SaleReferenceData(sale_id=sale.id)

        self._notify_stock(product_ids)

        logger.info(f"🚫 Venta {sale_id} anulada")
        return ActionResult.success(result)

    @ledger_operation("get_sale")
    def get_sale(self, sale_id: str) -> ActionResult:
        sale = self.repository.get_sale_by_id(sale_id)
        if not sale:
            raise NotFoundError("Venta inexistente")
        return ActionResult.success(SaleResponse.model_validate(sale))

    # ==================== VENTAS CONDICIONALES ====================

    @ledger_operation("create_conditional_sale")
    def create_conditional_sale(self, request: ConditionalSaleCreateRequest) -> ActionResult:
        """
        La mercadería sale del local sin pago; queda en estado OPEN
        """
        if not request.customer_id:
            raise LedgerValidationError("Cliente requerido para venta condicional")

        items = validate_items(request.items)
        validate_prices(items)
        total = sum_total(items)
        product_ids = unique_product_ids(items)

        with LedgerUnitOfWork(self.db, "create_conditional_sale") as uow:
            self.stock_repository.ensure_products_exist(product_ids, lock=True)
            self.stock_repository.ensure_stock_available(requested_quantities(items))

            if total <= 0:
                raise LedgerValidationError("Total inválido")
            if not self.account_repository.get_customer(request.customer_id):
                raise NotFoundError("Cliente inexistente")

            sale = self.repository.create_sale(uow, {
                "sale_date": request.sale_date,
                "channel": request.channel.value,
                "customer_id": request.customer_id,
                "total_amount": total,
                "paid_amount": ZERO,
                "is_fiado": False,
                "notes": request.notes,
                "sale_type": SaleType.CONDITIONAL.value,
                "conditional_status": ConditionalStatus.OPEN.value,
            })
            self.repository.create_sale_items(uow, sale.id, items)
            self.stock_repository.create_stock_movements(uow, self._sale_stock_movements(
                sale.id, request.channel, items
            ))

            result = ConditionalSaleCreatedData(sale_id=sale.id, total=total)

        self._notify_stock(product_ids)

        return ActionResult.success(result)

    @ledger_operation("confirm_conditional_sale")
    def confirm_conditional_sale(self, sale_id: str, request: ConditionalSaleConfirmRequest) -> ActionResult:
        """
        OPEN -> CONFIRMED: registra el pago recibido y deja el resto como deuda
        """
        payment = validate_amount(request.paid_amount, "Pago inválido", allow_zero=True)

        with LedgerUnitOfWork(self.db, "confirm_conditional_sale") as uow:
            sale = self._lock_open_conditional(sale_id, "La venta condicional no está abierta")
            if not sale.customer_id:
                raise InvalidStateError("La venta condicional debe tener cliente")

            total = to_money(sale.total_amount)
            new_paid_total = to_money(sale.paid_amount) + payment
            if new_paid_total > total:
                raise LedgerValidationError("Pago mayor al total")

            pending = total - new_paid_total

            if payment > 0:
                self.cash_repository.create_cash_movement(uow, {
                    "movement_type": CashMovementType.SALE.value,
                    "direction": CashDirection.IN.value,
                    "amount": payment,
                    "reference_type": ReferenceType.SALE.value,
                    "reference_id": sale.id,
                    "payment_method": request.payment_method.value,
                    "note": request.notes,
                })

            if pending > 0:
                account = self.account_repository.get_or_create_account(uow, sale.customer_id)
                self.account_repository.create_account_movement(uow, {
                    "account_id": account.id,
                    "movement_type": AccountMovementType.DEBT.value,
                    "amount": pending,
                    "reference_type": ReferenceType.SALE.value,
                    "reference_id": sale.id,
                })
                self.account_repository.recompute_account_status(account)

            sale.paid_amount = new_paid_total
            sale.is_fiado = pending > 0
            sale.payment_method = request.payment_method.value
            sale.conditional_status = ConditionalStatus.CONFIRMED.value
            self.db.flush()

            result = SaleCreatedData(sale_id=sale.id, total=total, pending=to_money(pending))

        return ActionResult.success(result)

    @ledger_operation("return_conditional_sale")
    def return_conditional_sale(self, sale_id: str) -> ActionResult:
        """
        OPEN -> RETURNED: vuelve todo el stock; no toca caja ni cuenta
        """
        with LedgerUnitOfWork(self.db, "return_conditional_sale") as uow:
            sale = self._lock_open_conditional(sale_id, "Solo se pueden devolver condicionales abiertas")

            items = self.repository.get_sale_items(sale.id)
            if not items:
                raise InvalidStateError("La venta no tiene items")

            product_ids = unique_product_ids(items)
            self.stock_repository.lock_products(product_ids)

            self.stock_repository.create_stock_movements(uow, self._return_stock_movements(
                items, ReferenceType.CONDITIONAL_RETURN, sale.id
            ))

            sale.conditional_status = ConditionalStatus.RETURNED.value
            self.db.flush()

            result = SaleReferenceData(sale_id=sale.id)

        self._notify_stock(product_ids)

        return ActionResult.success(result)

    # ==================== UTILIDADES ====================

    def _lock_open_conditional(self, sale_id: str, not_open_message: str) -> Sale:
        sale = self.repository.lock_sale(sale_id)
        if not sale:
            raise NotFoundError("Venta inexistente")
        if sale.cancelled_at is not None:
            raise InvalidStateError("La venta ya está anulada")
        if sale.sale_type != SaleType.CONDITIONAL.value:
            raise InvalidStateError("La venta no es condicional")
        if sale.conditional_status != ConditionalStatus.OPEN.value:
            raise InvalidStateError(not_open_message)
        return sale

    def _reverse_account_effect(self, uow: LedgerUnitOfWork, sale: Sale) -> None:
        """
        Compensar CONSUME_CREDIT con CREDIT y DEBT con PAYMENT para que el
        efecto neto de la venta sobre la cuenta quede en cero
        """
        account = self.account_repository.get_account_by_customer(sale.customer_id, lock=True)
        if not account:
            return

        movements = self.account_repository.movements_by_reference(
            account.id, ReferenceType.SALE.value, sale.id
        )
        consumed = sum(
            (to_money(m.amount) for m in movements
             if m.movement_type == AccountMovementType.CONSUME_CREDIT.value),
            ZERO
        )
        debt = sum(
            (to_money(m.amount) for m in movements
             if m.movement_type == AccountMovementType.DEBT.value),
            ZERO
        )

        if consumed == 0 and debt == 0:
            return

        if consumed != 0:
            self.account_repository.create_account_movement(uow, {
                "account_id": account.id,
                "movement_type": AccountMovementType.CREDIT.value,
                "amount": -consumed,
                "reference_type": ReferenceType.SALE_CANCELLATION.value,
                "reference_id": sale.id,
                "note": "Anulación de venta",
            })

        if debt != 0:
            self.account_repository.create_account_movement(uow, {
                "account_id": account.id,
                "movement_type": AccountMovementType.PAYMENT.value,
                "amount": -debt,
                "reference_type": ReferenceType.SALE_CANCELLATION.value,
                "reference_id": sale.id,
                "note": "Anulación de venta",
            })

        self.account_repository.recompute_account_status(account)

    @staticmethod
    def _sale_stock_movements(sale_id: str, channel: SaleChannel, items) -> List[dict]:
        if channel == SaleChannel.MERCADOLIBRE:
            movement_type, stock_channel = StockMovementType.SALE_MERCADOLIBRE, StockChannel.MERCADOLIBRE
        else:
            movement_type, stock_channel = StockMovementType.SALE_PHYSICAL, StockChannel.LOCAL

        return [
            {
                "product_id": item.product_id,
                "movement_type": movement_type.value,
                "quantity": -item.quantity,
                "reference_type": ReferenceType.SALE.value,
                "reference_id": sale_id,
                "channel": stock_channel.value,
            }
            for item in items
        ]

    @staticmethod
    def _return_stock_movements(
        items: List[SaleItem], reference_type: ReferenceType, sale_id: str,
        sale_channel: Optional[str] = None
    ) -> List[dict]:
        if sale_channel == SaleChannel.MERCADOLIBRE.value:
            stock_channel = StockChannel.MERCADOLIBRE
        else:
            stock_channel = StockChannel.LOCAL

        return [
            {
                "product_id": item.product_id,
                "movement_type": StockMovementType.ADJUSTMENT.value,
                "quantity": item.quantity,
                "reference_type": reference_type.value,
                "reference_id": sale_id,
                "channel": stock_channel.value,
            }
            for item in items
        ]

    def _notify_stock(self, product_ids) -> None:
        publish_stock_changes(self.notifier, product_ids, self.stock_repository.current_stocks)
