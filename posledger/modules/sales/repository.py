# posledger/modules/sales/repository.py
from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session

from posledger.shared.database.models import Sale, SaleItem
from posledger.shared.ledger.unit_of_work import LedgerUnitOfWork
from posledger.shared.ledger.validation import to_money

class SalesRepository:
    """
    Repositorio para las operaciones de datos de ventas e items
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== VENTAS ====================

    def create_sale(self, uow: LedgerUnitOfWork, sale_data: Dict[str, Any]) -> Sale:
        """
        Crear venta (sin commit; la unidad de trabajo confirma al final)
        """
        sale_data = {key: value for key, value in sale_data.items() if value is not None}
        return uow.add(Sale(**sale_data))

    def create_sale_items(self, uow: LedgerUnitOfWork, sale_id: str, items: List[Any]) -> List[SaleItem]:
        """
        Crear items de venta; total_price = quantity * unit_price
        """
        return uow.add_all(
            SaleItem(
                sale_id=sale_id,
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=to_money(item.unit_price),
                total_price=to_money(item.quantity * to_money(item.unit_price))
            )
            for item in items
        )

    def get_sale_by_id(self, sale_id: str) -> Optional[Sale]:
        return self.db.query(Sale).filter(Sale.id == sale_id).first()

    def lock_sale(self, sale_id: str) -> Optional[Sale]:
        """
        Obtener venta con SELECT ... FOR UPDATE: evita dos anulaciones o
        confirmaciones simultáneas de la misma venta
        """
        return self.db.query(Sale).filter(Sale.id == sale_id).with_for_update().first()

    def get_sale_items(self, sale_id: str) -> List[SaleItem]:
        return self.db.query(SaleItem).filter(SaleItem.sale_id == sale_id).all()
