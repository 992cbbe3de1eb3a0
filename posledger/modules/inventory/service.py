# posledger/modules/inventory/service.py
import logging
from typing import Optional
from sqlalchemy.orm import Session

from posledger.shared.database.enums import (
    StockMovementType, StockChannel, ReferenceType, MERCADOLIBRE_PLATFORM
)
from posledger.shared.ledger.errors import (
    LedgerValidationError, InsufficientStockError, NotFoundError
)
from posledger.shared.ledger.results import ActionResult, ledger_operation
from posledger.shared.ledger.unit_of_work import LedgerUnitOfWork
from posledger.shared.ledger.validation import MAX_QUANTITY, validate_amount, validate_quantity
from posledger.shared.services.marketplace_notifier import (
    MarketplaceNotifier, publish_stock_changes
)
from .repository import StockRepository
from .schemas import (
    ProductCreateRequest, StockAdjustmentRequest, ExternalVariantCreateRequest,
    MarketplaceSaleRequest, ProductCreatedData, StockData, StockAdjustmentData,
    StockMovementResponse, ExternalVariantData, MarketplaceSaleData
)

logger = logging.getLogger(__name__)

class InventoryService:
    """
    Alta de productos, ajustes de stock y ventas entrantes de Mercado Libre
    """

    def __init__(self, db: Session, notifier: Optional[MarketplaceNotifier] = None):
        self.db = db
        self.repository = StockRepository(db)
        self.notifier = notifier

    # ==================== PRODUCTOS ====================

    @ledger_operation("create_product")
    def create_product(self, request: ProductCreateRequest) -> ActionResult:
        """
        Crear producto y, si corresponde, su movimiento de stock INITIAL
        """
        name = (request.name or "").strip()
        sku = (request.sku or "").strip()
        barcode = (request.barcode or "").strip()
        if not name or not sku or not barcode:
            raise LedgerValidationError("Nombre, SKU y código de barras son obligatorios.")

        price = validate_amount(request.price, "El precio es obligatorio y debe ser válido.", allow_zero=True)
        cost = None
        if request.cost is not None:
            cost = validate_amount(request.cost, "Costo inválido", allow_zero=True)

        if isinstance(request.initial_stock, bool) or not 0 <= request.initial_stock <= MAX_QUANTITY:
            raise LedgerValidationError("El stock inicial debe ser un número mayor o igual a 0.")

        with LedgerUnitOfWork(self.db, "create_product") as uow:
            if self.repository.find_product_by_sku_or_barcode(sku, barcode):
                raise LedgerValidationError("Ya existe un producto con ese SKU o código de barras")

            product = self.repository.create_product(uow, {
                "name": name,
                "sku": sku,
                "barcode": barcode,
                "price": price,
                "cost": cost,
                "size": (request.size or "").strip() or None,
                "color": (request.color or "").strip() or None,
                "brand": (request.brand or "").strip() or None,
            })

            if request.initial_stock > 0:
                self.repository.create_stock_movements(uow, [{
                    "product_id": product.id,
                    "movement_type": StockMovementType.INITIAL.value,
                    "quantity": request.initial_stock,
                    "reference_type": ReferenceType.INITIAL.value,
                    "reference_id": None,
                    "channel": StockChannel.LOCAL.value,
                }])

        self._notify_stock([product.id])

        return ActionResult.success(ProductCreatedData(
            product_id=product.id,
            initial_stock=request.initial_stock
        ))

    @ledger_operation("get_stock")
    def get_stock(self, product_id: str) -> ActionResult:
        if not self.repository.get_product(product_id):
            raise NotFoundError("Producto inexistente")

        movements = self.repository.movements_for_product(product_id)
        return ActionResult.success(StockData(
            product_id=product_id,
            stock=self.repository.current_stock(product_id),
            movements=[StockMovementResponse.model_validate(m) for m in movements]
        ))

    # ==================== AJUSTES ====================

    @ledger_operation("adjust_stock")
    def adjust_stock(self, product_id: str, request: StockAdjustmentRequest) -> ActionResult:
        """
        Ajuste manual firmado. Un ajuste negativo no puede dejar stock negativo.
        """
        validate_quantity(request.quantity, "Ingrese una cantidad válida (puede ser negativa).", allow_negative=True)

        with LedgerUnitOfWork(self.db, "adjust_stock") as uow:
            self.repository.ensure_products_exist([product_id], lock=True)

            stock_before = self.repository.current_stock(product_id)
            if stock_before + request.quantity < 0:
                raise InsufficientStockError(
                    f"Stock insuficiente. Disponible: {stock_before}, ajuste: {request.quantity}"
                )

            movements = self.repository.create_stock_movements(uow, [{
                "product_id": product_id,
                "movement_type": StockMovementType.ADJUSTMENT.value,
                "quantity": request.quantity,
                "reference_type": ReferenceType.ADJUSTMENT.value,
                "reference_id": None,
                "channel": StockChannel.LOCAL.value,
                "note": request.note,
            }])

        self._notify_stock([product_id])

        return ActionResult.success(StockAdjustmentData(
            product_id=product_id,
            movement_id=movements[0].id,
            stock_before=stock_before,
            stock_after=stock_before + request.quantity
        ))

    # ==================== MERCADO LIBRE ====================

    @ledger_operation("link_external_variant")
    def link_external_variant(self, request: ExternalVariantCreateRequest) -> ActionResult:
        variation_id = (request.external_variation_id or "").strip()
        if not variation_id:
            raise LedgerValidationError("Variante inválida")

        with LedgerUnitOfWork(self.db, "link_external_variant") as uow:
            self.repository.ensure_products_exist([request.product_id])

            if self.repository.get_external_variant(MERCADOLIBRE_PLATFORM, variation_id):
                raise LedgerValidationError("La variante ya está vinculada a un producto")

            variant = self.repository.create_external_variant(uow, {
                "platform": MERCADOLIBRE_PLATFORM,
                "external_variation_id": variation_id,
                "external_item_id": request.external_item_id,
                "product_id": request.product_id,
            })

        return ActionResult.success(ExternalVariantData.model_validate(variant))

    @ledger_operation("process_marketplace_sale")
    def process_marketplace_sale(self, request: MarketplaceSaleRequest) -> ActionResult:
        """
        Descontar stock por una venta de Mercado Libre.
        Idempotente por reference_id: un webhook repetido no descuenta dos veces.
        """
        variation_id = (request.external_variation_id or "").strip()
        reference_id = (request.reference_id or "").strip()
        if not variation_id:
            raise LedgerValidationError("Variante inválida")
        if not reference_id:
            raise LedgerValidationError("Referencia de orden inválida")
        validate_quantity(request.quantity, "Cantidad inválida")

        with LedgerUnitOfWork(self.db, "process_marketplace_sale") as uow:
            variant = self.repository.get_external_variant(MERCADOLIBRE_PLATFORM, variation_id)
            if not variant:
                raise NotFoundError("Variante no vinculada a ningún producto.")

            self.repository.lock_products([variant.product_id])

            if self.repository.movement_exists(ReferenceType.MERCADOLIBRE_ORDER.value, reference_id):
                logger.info(f"🔁 Orden {reference_id} ya procesada; se ignora")
                return ActionResult.success(MarketplaceSaleData(duplicate=True))

            stock_before = self.repository.current_stock(variant.product_id)
            if stock_before < request.quantity:
                raise InsufficientStockError(
                    f"Stock insuficiente. Disponible: {stock_before}, solicitado: {request.quantity}."
                )

            self.repository.create_stock_movements(uow, [{
                "product_id": variant.product_id,
                "movement_type": StockMovementType.SALE_MERCADOLIBRE.value,
                "quantity": -request.quantity,
                "reference_type": ReferenceType.MERCADOLIBRE_ORDER.value,
                "reference_id": reference_id,
                "channel": StockChannel.MERCADOLIBRE.value,
                "note": "Venta Mercado Libre",
            }])

        self._notify_stock([variant.product_id])

        return ActionResult.success(MarketplaceSaleData(
            duplicate=False,
            product_id=variant.product_id,
            quantity_sold=request.quantity,
            stock_before=stock_before,
            stock_after=stock_before - request.quantity
        ))

    # ==================== UTILIDADES ====================

    def _notify_stock(self, product_ids) -> None:
        publish_stock_changes(self.notifier, product_ids, self.repository.current_stocks)
