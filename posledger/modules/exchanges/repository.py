# posledger/modules/exchanges/repository.py
from typing import List, Dict, Any
from sqlalchemy.orm import Session

from posledger.shared.database.models import Exchange, ExchangeItemIn, ExchangeItemOut
from posledger.shared.ledger.unit_of_work import LedgerUnitOfWork

class ExchangeRepository:
    """
    Repositorio de cambios de prendas y sus items (entran / salen)
    """

    def __init__(self, db: Session):
        self.db = db

    def create_exchange(self, uow: LedgerUnitOfWork, exchange_data: Dict[str, Any]) -> Exchange:
        exchange_data = {key: value for key, value in exchange_data.items() if value is not None}
        return uow.add(Exchange(**exchange_data))

    def create_items_in(self, uow: LedgerUnitOfWork, exchange_id: str, items: List[Any]) -> List[ExchangeItemIn]:
        return uow.add_all(
            ExchangeItemIn(exchange_id=exchange_id, product_id=item.product_id, quantity=item.quantity)
            for item in items
        )

    def create_items_out(self, uow: LedgerUnitOfWork, exchange_id: str, items: List[Any]) -> List[ExchangeItemOut]:
        return uow.add_all(
            ExchangeItemOut(exchange_id=exchange_id, product_id=item.product_id, quantity=item.quantity)
            for item in items
        )

