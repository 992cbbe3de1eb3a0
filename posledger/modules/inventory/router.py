# posledger/modules/inventory/router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from posledger.config.database import get_db
from posledger.core.results import raise_for_failure
from posledger.shared.ledger.results import ActionResult
from posledger.shared.services.marketplace_notifier import MarketplaceNotifier, get_marketplace_notifier
from .service import InventoryService
from .schemas import (
    ProductCreateRequest, StockAdjustmentRequest, ExternalVariantCreateRequest,
    MarketplaceSaleRequest, ProductCreatedData, StockData, StockAdjustmentData,
    ExternalVariantData, MarketplaceSaleData
)

router = APIRouter(prefix="/inventory", tags=["Inventory - Stock"])

# ==================== PRODUCTOS ====================

@router.post("/products", response_model=ActionResult[ProductCreatedData])
async def create_product(
    request: ProductCreateRequest,
    db: Session = Depends(get_db),
    notifier: MarketplaceNotifier = Depends(get_marketplace_notifier)
):
    """
    Crear producto con stock inicial opcional
    """
    service = InventoryService(db, notifier)
    return raise_for_failure(service.create_product(request))

@router.get("/products/{product_id}/stock", response_model=ActionResult[StockData])
async def get_product_stock(product_id: str, db: Session = Depends(get_db)):
    """
    Stock actual derivado de los movimientos, con historial reciente
    """
    service = InventoryService(db)
    return raise_for_failure(service.get_stock(product_id))

@router.post("/products/{product_id}/adjustments", response_model=ActionResult[StockAdjustmentData])
async def adjust_product_stock(
    product_id: str,
    request: StockAdjustmentRequest,
    db: Session = Depends(get_db),
    notifier: MarketplaceNotifier = Depends(get_marketplace_notifier)
):
    """
    Ajuste manual de inventario (cantidad positiva o negativa)
    """
    service = InventoryService(db, notifier)
    return raise_for_failure(service.adjust_stock(product_id, request))

# ==================== MERCADO LIBRE ====================

@router.post("/external-variants", response_model=ActionResult[ExternalVariantData])
async def link_external_variant(request: ExternalVariantCreateRequest, db: Session = Depends(get_db)):
    """
    Vincular una variante de Mercado Libre con un producto local
    """
    service = InventoryService(db)
    return raise_for_failure(service.link_external_variant(request))

@router.post("/marketplace/sales", response_model=ActionResult[MarketplaceSaleData])
async def process_marketplace_sale(
    request: MarketplaceSaleRequest,
    db: Session = Depends(get_db),
    notifier: MarketplaceNotifier = Depends(get_marketplace_notifier)
):
    """
    Venta de Mercado Libre: descuenta stock una sola vez por orden
    """
    service = InventoryService(db, notifier)
    return raise_for_failure(service.process_marketplace_sale(request))
