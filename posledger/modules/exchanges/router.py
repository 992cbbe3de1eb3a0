# posledger/modules/exchanges/router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from posledger.config.database import get_db
from posledger.core.results import raise_for_failure
from posledger.shared.ledger.results import ActionResult
from posledger.shared.services.marketplace_notifier import MarketplaceNotifier, get_marketplace_notifier
from .service import ExchangesService
from .schemas import ExchangeCreateRequest, ExchangeCreatedData

router = APIRouter(prefix="/exchanges", tags=["Exchanges - Cambios"])

@router.post("", response_model=ActionResult[ExchangeCreatedData])
async def create_exchange(
    request: ExchangeCreateRequest,
    db: Session = Depends(get_db),
    notifier: MarketplaceNotifier = Depends(get_marketplace_notifier)
):
    """
    Registrar cambio de prendas con su diferencia de dinero
    """
    service = ExchangesService(db, notifier)
    return raise_for_failure(service.create_exchange(request))
