# tests/test_unit_of_work.py
import logging

import pytest
from sqlalchemy.exc import SQLAlchemyError

from posledger.shared.database.models import Customer
from posledger.shared.ledger.errors import (
    LedgerValidationError, StoreError, RollbackError
)
from posledger.shared.ledger.results import ActionResult, ledger_operation
from posledger.shared.ledger.unit_of_work import LedgerUnitOfWork


class TestLedgerUnitOfWork:
    """Una transacción por operación"""

    def test_commit_on_success(self, db):
        with LedgerUnitOfWork(db, "test") as uow:
            customer = uow.add(Customer(full_name="Ana"))
            assert customer.id is not None

        db.rollback()
        assert db.query(Customer).count() == 1

    def test_business_error_discards_rows(self, db):
        with pytest.raises(LedgerValidationError):
            with LedgerUnitOfWork(db, "test") as uow:
                uow.add_all([Customer(full_name="Ana"), Customer(full_name="Luis")])
                raise LedgerValidationError("Datos inválidos")

        assert db.query(Customer).count() == 0

    def test_database_error_becomes_store_error(self, db):
        with pytest.raises(StoreError):
            with LedgerUnitOfWork(db, "test") as uow:
                uow.add(Customer(full_name="Ana"))
                raise SQLAlchemyError("disk full")

        assert db.query(Customer).count() == 0

    def test_rollback_failure_is_surfaced(self, db, monkeypatch, caplog):
        def broken_rollback():
            raise SQLAlchemyError("connection lost")

        monkeypatch.setattr(db, "rollback", broken_rollback)

        with caplog.at_level(logging.CRITICAL):
            with pytest.raises(RollbackError):
                with LedgerUnitOfWork(db, "test") as uow:
                    uow.add(Customer(full_name="Ana"))
                    raise LedgerValidationError("Datos inválidos")

        assert any(record.levelno == logging.CRITICAL for record in caplog.records)


class Operations:
    def __init__(self, db):
        self.db = db

    @ledger_operation("ok")
    def succeed(self):
        return ActionResult.success({"value": 1})

    @ledger_operation("rejected")
    def reject(self):
        raise LedgerValidationError("Cantidad inválida")

    @ledger_operation("store")
    def store_failure(self):
        raise StoreError("Error de base de datos en store")

    @ledger_operation("boom")
    def crash(self):
        raise RuntimeError("boom")


class TestLedgerOperation:
    """Ninguna excepción cruza la frontera del servicio"""

    def test_success(self, db):
        result = Operations(db).succeed()

        assert result.ok
        assert result.data == {"value": 1}

    def test_business_error(self, db):
        result = Operations(db).reject()

        assert not result.ok
        assert result.error.message == "Cantidad inválida"
        assert result.error.code == "VALIDATION"

    def test_store_error(self, db):
        result = Operations(db).store_failure()

        assert result.error.code == "STORE_ERROR"

    def test_unexpected_error(self, db):
        result = Operations(db).crash()

        assert not result.ok
        assert result.error.code == "INTERNAL"
