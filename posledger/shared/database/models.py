import uuid

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text, ForeignKey, Numeric,
    UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from posledger.config.database import Base

def generate_id() -> str:
    """Identificador opaco para todas las entidades"""
    return str(uuid.uuid4())

Money = Numeric(12, 2)

# ===== CATÁLOGO =====

class Product(Base):
    """Producto - el stock NO se guarda acá, se deriva de stock_movements"""
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    sku = Column(String(100), nullable=False, unique=True)
    barcode = Column(String(100), nullable=False, unique=True)
    price = Column(Money, nullable=False, default=0)
    cost = Column(Money)
    size = Column(String(50))
    color = Column(String(100))
    brand = Column(String(255))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.current_timestamp())

    # Relationships
    stock_movements = relationship("StockMovement", back_populates="product")
    external_variants = relationship("ExternalVariant", back_populates="product")

class Customer(Base):
    """Cliente"""
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=generate_id)
    full_name = Column(String(255), nullable=False)
    phone = Column(String(50))
    email = Column(String(255))
    address = Column(Text)
    created_at = Column(DateTime, server_default=func.current_timestamp())

    # Relationships
    account = relationship("CurrentAccount", back_populates="customer", uselist=False)

# ===== STOCK =====

class StockMovement(Base):
    """Movimiento de stock firmado (positivo = ingreso, negativo = egreso)"""
    __tablename__ = "stock_movements"

    id = Column(String(36), primary_key=True, default=generate_id)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False, index=True)
    movement_type = Column(String(50), nullable=False)
    quantity = Column(Integer, nullable=False)
    reference_type = Column(String(50), index=True)
    reference_id = Column(String(100), index=True)
    channel = Column(String(50), nullable=False, default="LOCAL")
    note = Column(Text)
    created_at = Column(DateTime, server_default=func.current_timestamp())

    # Relationships
    product = relationship("Product", back_populates="stock_movements")

class ExternalVariant(Base):
    """Vínculo entre una variante publicada en Mercado Libre y un producto local"""
    __tablename__ = "external_variants"

    id = Column(String(36), primary_key=True, default=generate_id)
    platform = Column(String(50), nullable=False, default="mercadolibre")
    external_item_id = Column(String(100))
    external_variation_id = Column(String(100), nullable=False)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False)
    created_at = Column(DateTime, server_default=func.current_timestamp())

    __table_args__ = (
        UniqueConstraint('platform', 'external_variation_id', name='external_variants_platform_variation_key'),
    )

    # Relationships
    product = relationship("Product", back_populates="external_variants")

# ===== VENTAS =====

class Sale(Base):
    """Venta. cancelled_at presente = venta anulada (inmutable)"""
    __tablename__ = "sales"

    id = Column(String(36), primary_key=True, default=generate_id)
    sale_date = Column(DateTime, server_default=func.current_timestamp())
    channel = Column(String(50), nullable=False, default="PHYSICAL")
    customer_id = Column(String(36), ForeignKey("customers.id"), index=True)
    total_amount = Column(Money, nullable=False)
    paid_amount = Column(Money, nullable=False, default=0)
    is_fiado = Column(Boolean, nullable=False, default=False)
    payment_method = Column(String(50))
    notes = Column(Text)
    sale_type = Column(String(50), nullable=False, default="NORMAL")
    conditional_status = Column(String(50))
    cancelled_at = Column(DateTime)
    created_at = Column(DateTime, server_default=func.current_timestamp())

    __table_args__ = (
        CheckConstraint('paid_amount >= 0', name='sales_paid_amount_non_negative'),
        CheckConstraint('paid_amount <= total_amount', name='sales_paid_not_above_total'),
    )

    # Relationships
    customer = relationship("Customer")
    items = relationship("SaleItem", back_populates="sale")

class SaleItem(Base):
    """Item de venta (total_price = quantity * unit_price)"""
    __tablename__ = "sale_items"

    id = Column(String(36), primary_key=True, default=generate_id)
    sale_id = Column(String(36), ForeignKey("sales.id"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Money, nullable=False)
    total_price = Column(Money, nullable=False)

    # Relationships
    sale = relationship("Sale", back_populates="items")
    product = relationship("Product")

# ===== CAJA =====

class CashMovement(Base):
    """Movimiento de caja. amount es siempre magnitud; el signo lo da direction"""
    __tablename__ = "cash_movements"

    id = Column(String(36), primary_key=True, default=generate_id)
    movement_type = Column(String(50), nullable=False)
    direction = Column(String(10), nullable=False)
    amount = Column(Money, nullable=False)
    reference_type = Column(String(50), index=True)
    reference_id = Column(String(100), index=True)
    payment_method = Column(String(50), nullable=False, default="CASH")
    note = Column(Text)
    created_at = Column(DateTime, server_default=func.current_timestamp(), index=True)

    __table_args__ = (
        CheckConstraint('amount >= 0', name='cash_movements_amount_non_negative'),
    )

# ===== CUENTAS CORRIENTES =====

class CurrentAccount(Base):
    """Cuenta corriente del cliente (una por cliente)"""
    __tablename__ = "current_accounts"

    id = Column(String(36), primary_key=True, default=generate_id)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, unique=True)
    status = Column(String(50), nullable=False, default="PROBANDO")
    created_at = Column(DateTime, server_default=func.current_timestamp())

    # Relationships
    customer = relationship("Customer", back_populates="account")
    movements = relationship("AccountMovement", back_populates="account")

class AccountMovement(Base):
    """Movimiento de cuenta firmado. Saldo > 0 = deuda, saldo < 0 = crédito a favor"""
    __tablename__ = "account_movements"

    id = Column(String(36), primary_key=True, default=generate_id)
    account_id = Column(String(36), ForeignKey("current_accounts.id"), nullable=False, index=True)
    movement_type = Column(String(50), nullable=False)
    amount = Column(Money, nullable=False)
    reference_type = Column(String(50), index=True)
    reference_id = Column(String(100), index=True)
    note = Column(Text)
    created_at = Column(DateTime, server_default=func.current_timestamp())

    # Relationships
    account = relationship("CurrentAccount", back_populates="movements")

# ===== CAMBIOS =====

class Exchange(Base):
    """Cambio de prendas. difference_amount > 0 = el cliente paga, < 0 = queda a favor"""
    __tablename__ = "exchanges"

    id = Column(String(36), primary_key=True, default=generate_id)
    exchange_date = Column(DateTime, server_default=func.current_timestamp())
    customer_id = Column(String(36), ForeignKey("customers.id"))
    difference_amount = Column(Money, nullable=False, default=0)
    note = Column(Text)
    created_at = Column(DateTime, server_default=func.current_timestamp())

    # Relationships
    customer = relationship("Customer")
    items_in = relationship("ExchangeItemIn", back_populates="exchange")
    items_out = relationship("ExchangeItemOut", back_populates="exchange")

class ExchangeItemIn(Base):
    """Prenda que devuelve el cliente"""
    __tablename__ = "exchange_items_in"

    id = Column(String(36), primary_key=True, default=generate_id)
    exchange_id = Column(String(36), ForeignKey("exchanges.id"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)

    # Relationships
    exchange = relationship("Exchange", back_populates="items_in")

class ExchangeItemOut(Base):
    """Prenda que se lleva el cliente"""
    __tablename__ = "exchange_items_out"

    id = Column(String(36), primary_key=True, default=generate_id)
    exchange_id = Column(String(36), ForeignKey("exchanges.id"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)

    # Relationships
    exchange = relationship("Exchange", back_populates="items_out")
