# posledger/modules/inventory/repository.py
from typing import List, Optional, Dict, Any, Iterable
from sqlalchemy.orm import Session
from sqlalchemy import func, or_, desc

from posledger.shared.database.models import Product, StockMovement, ExternalVariant
from posledger.shared.ledger.errors import NotFoundError, InsufficientStockError
from posledger.shared.ledger.unit_of_work import LedgerUnitOfWork

class StockRepository:
    """
    Ledger de stock: el stock de un producto es la suma de sus movimientos
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== PRODUCTOS ====================

    def get_product(self, product_id: str) -> Optional[Product]:
        return self.db.query(Product).filter(Product.id == product_id).first()

    def find_products(self, product_ids: Iterable[str]) -> List[Product]:
        product_ids = list(product_ids)
        if not product_ids:
            return []
        return self.db.query(Product).filter(Product.id.in_(product_ids)).all()

    def lock_products(self, product_ids: Iterable[str]) -> List[Product]:
        """
        Bloquear las filas de producto (SELECT ... FOR UPDATE) en orden de id.
        Serializa las operaciones concurrentes sobre el stock del mismo producto.
        """
        product_ids = sorted(set(product_ids))
        if not product_ids:
            return []
        return self.db.query(Product).filter(
            Product.id.in_(product_ids)
        ).order_by(Product.id).with_for_update().all()

    def ensure_products_exist(self, product_ids: Iterable[str], lock: bool = False) -> List[Product]:
        product_ids = list(product_ids)
        products = self.lock_products(product_ids) if lock else self.find_products(product_ids)
        found = {product.id for product in products}
        for product_id in product_ids:
            if product_id not in found:
                raise NotFoundError("Producto inexistente")
        return products

    def find_product_by_sku_or_barcode(self, sku: str, barcode: str) -> Optional[Product]:
        return self.db.query(Product).filter(
            or_(Product.sku == sku, Product.barcode == barcode)
        ).first()

    def create_product(self, uow: LedgerUnitOfWork, product_data: Dict[str, Any]) -> Product:
        return uow.add(Product(**product_data))

    # ==================== STOCK ====================

    def current_stock(self, product_id: str) -> int:
        """
        Stock actual = suma de cantidades firmadas (0 si no hay movimientos)
        """
        total = self.db.query(func.sum(StockMovement.quantity)).filter(
            StockMovement.product_id == product_id
        ).scalar()

        return int(total or 0)

    def current_stocks(self, product_ids: Iterable[str]) -> Dict[str, int]:
        """
        Variante por lote; todo id pedido aparece en el resultado
        """
        stocks = {product_id: 0 for product_id in product_ids}
        if not stocks:
            return stocks

        rows = self.db.query(
            StockMovement.product_id, func.sum(StockMovement.quantity)
        ).filter(
            StockMovement.product_id.in_(list(stocks))
        ).group_by(StockMovement.product_id).all()

        for product_id, total in rows:
            stocks[product_id] = int(total or 0)

        return stocks

    def ensure_stock_available(
        self,
        requested: Dict[str, int],
        message: str = "Stock insuficiente"
    ) -> Dict[str, int]:
        """
        Validar que cada producto tenga al menos la cantidad pedida.
        Llamar con los productos ya bloqueados.
        """
        stocks = self.current_stocks(requested)
        for product_id, quantity in requested.items():
            if stocks[product_id] < quantity:
                raise InsufficientStockError(message)
        return stocks

    def movements_for_product(self, product_id: str, limit: int = 50) -> List[StockMovement]:
        return self.db.query(StockMovement).filter(
            StockMovement.product_id == product_id
        ).order_by(desc(StockMovement.created_at)).limit(limit).all()

    def movement_exists(self, reference_type: str, reference_id: str) -> bool:
        """
        Control de duplicados por referencia externa (ej. orden de Mercado Libre)
        """
        return self.db.query(StockMovement.id).filter(
            StockMovement.reference_type == reference_type,
            StockMovement.reference_id == reference_id
        ).first() is not None

    def create_stock_movements(
        self,
        uow: LedgerUnitOfWork,
        movements: List[Dict[str, Any]]
    ) -> List[StockMovement]:
        return uow.add_all(StockMovement(**data) for data in movements)

    # ==================== VARIANTES EXTERNAS ====================

    def get_external_variant(self, platform: str, external_variation_id: str) -> Optional[ExternalVariant]:
        return self.db.query(ExternalVariant).filter(
            ExternalVariant.platform == platform,
            ExternalVariant.external_variation_id == external_variation_id
        ).first()

    def create_external_variant(self, uow: LedgerUnitOfWork, variant_data: Dict[str, Any]) -> ExternalVariant:
        return uow.add(ExternalVariant(**variant_data))
