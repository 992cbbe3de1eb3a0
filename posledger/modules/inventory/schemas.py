from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

# ==================== CLASE BASE PARA RESPUESTAS (Pydantic v2) ====================

class InventoryBaseModel(BaseModel):
    """
    Clase base para los esquemas de respuesta de inventario
    """
    model_config = ConfigDict(from_attributes=True)

# ==================== REQUEST SCHEMAS ====================

class ProductCreateRequest(BaseModel):
    name: str = Field(..., description="Nombre del producto")
    sku: str = Field(..., description="SKU interno")
    barcode: str = Field(..., description="Código de barras")
    price: Decimal = Field(..., description="Precio de venta")
    cost: Optional[Decimal] = Field(None, description="Costo")
    size: Optional[str] = Field(None, description="Talle")
    color: Optional[str] = Field(None, description="Color")
    brand: Optional[str] = Field(None, description="Marca")
    initial_stock: int = Field(0, description="Stock inicial (movimiento INITIAL)")

class StockAdjustmentRequest(BaseModel):
    quantity: int = Field(..., description="Cantidad firmada: positiva ingresa, negativa descuenta")
    note: Optional[str] = Field(None, description="Motivo del ajuste")

class ExternalVariantCreateRequest(BaseModel):
    product_id: str = Field(..., description="Producto local")
    external_variation_id: str = Field(..., description="ID de variante en Mercado Libre")
    external_item_id: Optional[str] = Field(None, description="ID de publicación en Mercado Libre")

class MarketplaceSaleRequest(BaseModel):
    external_variation_id: str = Field(..., description="ID de variante vendida")
    quantity: int = Field(1, description="Unidades vendidas")
    reference_id: str = Field(..., description="ID de la orden; evita descontar dos veces")

# ==================== RESPONSE SCHEMAS ====================

class StockMovementResponse(InventoryBaseModel):
    id: str
    product_id: str
    movement_type: str
    quantity: int
    reference_type: Optional[str]
    reference_id: Optional[str]
    channel: str
    note: Optional[str]
    created_at: Optional[datetime]

class ProductCreatedData(BaseModel):
    product_id: str
    initial_stock: int

class StockData(BaseModel):
    product_id: str
    stock: int
    movements: List[StockMovementResponse] = []

class StockAdjustmentData(BaseModel):
    product_id: str
    movement_id: str
    stock_before: int
    stock_after: int

class ExternalVariantData(InventoryBaseModel):
    id: str
    platform: str
    product_id: str
    external_variation_id: str
    external_item_id: Optional[str]

class MarketplaceSaleData(BaseModel):
    duplicate: bool = False
    product_id: Optional[str] = None
    quantity_sold: Optional[int] = None
    stock_before: Optional[int] = None
    stock_after: Optional[int] = None
