# tests/conftest.py
"""Fixtures compartidas: SQLite en memoria por test, servicios y TestClient."""
import itertools
import os
from decimal import Decimal

# La app no debe tocar el archivo SQLite local durante los tests
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from posledger.config.database import Base, get_db
from posledger.shared.database import models  # noqa: F401
from posledger.shared.services.marketplace_notifier import (
    MarketplaceNotifier, get_marketplace_notifier
)
from posledger.modules.inventory.repository import StockRepository
from posledger.modules.inventory.service import InventoryService
from posledger.modules.inventory.schemas import ProductCreateRequest
from posledger.modules.accounts.repository import AccountRepository
from posledger.modules.accounts.service import AccountsService
from posledger.modules.accounts.schemas import CustomerCreateRequest
from posledger.main import app


class RecordingNotifier(MarketplaceNotifier):
    """Guarda las notificaciones en memoria"""

    def __init__(self):
        self.calls = []

    def notify_stock(self, product_id: str, new_stock: int) -> None:
        self.calls.append((product_id, new_stock))


class FailingNotifier(MarketplaceNotifier):
    def notify_stock(self, product_id: str, new_stock: int) -> None:
        raise ConnectionError("Mercado Libre no responde")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(db, notifier):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_marketplace_notifier] = lambda: notifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def create_product(db):
    """Fábrica de productos con stock inicial"""
    counter = itertools.count(1)

    def _create(initial_stock: int = 10, price: str = "100"):
        n = next(counter)
        result = InventoryService(db).create_product(ProductCreateRequest(
            name=f"Remera {n}",
            sku=f"REM-{n:03d}",
            barcode=f"7790000{n:05d}",
            price=Decimal(price),
            initial_stock=initial_stock
        ))
        assert result.ok, result.error
        return result.data.product_id

    return _create


@pytest.fixture
def create_customer(db):
    counter = itertools.count(1)

    def _create(full_name: str = None):
        n = next(counter)
        result = AccountsService(db).create_customer(CustomerCreateRequest(
            full_name=full_name or f"Cliente {n}",
            phone=f"11-5555-{n:04d}"
        ))
        assert result.ok, result.error
        return result.data.id

    return _create


@pytest.fixture
def failing_notifier():
    return FailingNotifier()


@pytest.fixture
def stock_of(db):
    """Stock actual derivado de los movimientos"""
    def _stock(product_id: str) -> int:
        return StockRepository(db).current_stock(product_id)

    return _stock


@pytest.fixture
def balance_of(db):
    """Saldo de la cuenta corriente del cliente (0 si no tiene cuenta)"""
    def _balance(customer_id: str) -> Decimal:
        repository = AccountRepository(db)
        account = repository.get_account_by_customer(customer_id)
        if not account:
            return Decimal("0")
        return repository.account_balance(account.id)

    return _balance
