# posledger/modules/sales/router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from posledger.config.database import get_db
from posledger.core.results import raise_for_failure
from posledger.shared.ledger.results import ActionResult
from posledger.shared.services.marketplace_notifier import MarketplaceNotifier, get_marketplace_notifier
from .service import SalesService
from .schemas import (
    SaleCreateRequest, ConditionalSaleCreateRequest, ConditionalSaleConfirmRequest,
    SaleCreatedData, ConditionalSaleCreatedData, SaleReferenceData, SaleResponse
)

router = APIRouter(prefix="/sales", tags=["Sales - Ventas"])

# ==================== VENTAS ====================

@router.post("", response_model=ActionResult[SaleCreatedData])
async def create_sale(
    request: SaleCreateRequest,
    db: Session = Depends(get_db),
    notifier: MarketplaceNotifier = Depends(get_marketplace_notifier)
):
    """
    Registrar venta con pago total, parcial o fiada
    """
    service = SalesService(db, notifier)
    return raise_for_failure(service.create_sale(request))

@router.post("/conditional", response_model=ActionResult[ConditionalSaleCreatedData])
async def create_conditional_sale(
    request: ConditionalSaleCreateRequest,
    db: Session = Depends(get_db),
    notifier: MarketplaceNotifier = Depends(get_marketplace_notifier)
):
    """
    Venta condicional: el cliente se lleva la mercadería sin pagar
    """
    service = SalesService(db, notifier)
    return raise_for_failure(service.create_conditional_sale(request))

@router.get("/{sale_id}", response_model=ActionResult[SaleResponse])
async def get_sale(sale_id: str, db: Session = Depends(get_db)):
    service = SalesService(db)
    return raise_for_failure(service.get_sale(sale_id))

@router.post("/{sale_id}/cancel", response_model=ActionResult[SaleReferenceData])
async def cancel_sale(
    sale_id: str,
    db: Session = Depends(get_db),
    notifier: MarketplaceNotifier = Depends(get_marketplace_notifier)
):
    """
    Anular venta (devuelve stock, caja y cuenta corriente)
    """
    service = SalesService(db, notifier)
    return raise_for_failure(service.cancel_sale(sale_id))

# ==================== CONDICIONALES ====================

@router.post("/{sale_id}/confirm", response_model=ActionResult[SaleCreatedData])
async def confirm_conditional_sale(
    sale_id: str,
    request: ConditionalSaleConfirmRequest,
    db: Session = Depends(get_db)
):
    """
    Confirmar venta condicional con el pago recibido
    """
    service = SalesService(db)
    return raise_for_failure(service.confirm_conditional_sale(sale_id, request))

@router.post("/{sale_id}/return", response_model=ActionResult[SaleReferenceData])
async def return_conditional_sale(
    sale_id: str,
    db: Session = Depends(get_db),
    notifier: MarketplaceNotifier = Depends(get_marketplace_notifier)
):
    """
    Devolución completa de una venta condicional abierta
    """
    service = SalesService(db, notifier)
    return raise_for_failure(service.return_conditional_sale(sale_id))
