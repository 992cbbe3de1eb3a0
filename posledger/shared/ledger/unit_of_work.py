import logging
from typing import Any, Iterable, List

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from .errors import StoreError, RollbackError

logger = logging.getLogger(__name__)


class LedgerUnitOfWork:
    """
    Una transacción por operación del ledger.

    Las filas se insertan con flush (tienen id pero no se confirman). Al salir
    sin errores se hace commit; ante cualquier excepción se hace rollback, lo
    que descarta todo lo insertado o modificado por esta operación y nada más.
    """

    def __init__(self, db: Session, operation: str):
        self.db = db
        self.operation = operation
        self.inserted: List[Any] = []

    def __enter__(self) -> "LedgerUnitOfWork":
        return self

    def add(self, row: Any) -> Any:
        self.db.add(row)
        self.db.flush()
        self.inserted.append(row)
        return row

    def add_all(self, rows: Iterable[Any]) -> List[Any]:
        rows = list(rows)
        if not rows:
            return rows
        self.db.add_all(rows)
        self.db.flush()
        self.inserted.extend(rows)
        return rows

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            try:
                self.db.commit()
            except SQLAlchemyError as e:
                self._rollback(e)
                raise StoreError(f"No se pudo confirmar la operación {self.operation}") from e
            return False

        self._rollback(exc)
        if isinstance(exc, SQLAlchemyError):
            raise StoreError(f"Error de base de datos en {self.operation}") from exc
        return False

    def _rollback(self, cause: BaseException) -> None:
        discarded = [f"{row.__tablename__}:{row.id}" for row in reversed(self.inserted)]
        try:
            self.db.rollback()
        except SQLAlchemyError as e:
            logger.critical(
                f"🚨 {self.operation}: falló el rollback tras '{cause}'. "
                f"Registros posiblemente huérfanos: {discarded}"
            )
            raise RollbackError(
                f"La operación {self.operation} falló y no pudo revertirse"
            ) from e

        if discarded:
            logger.warning(f"↩️ {self.operation}: revertidos {len(discarded)} registros {discarded}")
