import logging
from functools import wraps
from typing import Any, Callable, Generic, Optional, TypeVar

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from .errors import LedgerError, StoreError

logger = logging.getLogger(__name__)

DataT = TypeVar("DataT")


class ActionError(BaseModel):
    message: str
    code: Optional[str] = None


class ActionResult(BaseModel, Generic[DataT]):
    """
    Resultado etiquetado de toda operación del ledger:
    {ok: true, data: ...} o {ok: false, error: {message, code}}
    """
    ok: bool
    data: Optional[DataT] = None
    error: Optional[ActionError] = None

    @classmethod
    def success(cls, data: Any = None) -> "ActionResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, message: str, code: Optional[str] = None) -> "ActionResult":
        return cls(ok=False, error=ActionError(message=message, code=code))


def ledger_operation(name: str) -> Callable:
    """
    Frontera de cada operación: ninguna excepción sale del servicio,
    todas se convierten en un ActionResult fallido.
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(self, *args, **kwargs) -> ActionResult:
            try:
                result = func(self, *args, **kwargs)
            except StoreError as e:
                logger.error(f"❌ {name} [{e.code}]: {e.message}", exc_info=True)
                return ActionResult.failure(e.message, e.code)
            except LedgerError as e:
                logger.warning(f"⚠️ {name} rechazada [{e.code}]: {e.message}")
                return ActionResult.failure(e.message, e.code)
            except SQLAlchemyError:
                # Falla de lectura fuera de una unidad de trabajo
                logger.exception(f"❌ {name}: error de base de datos")
                self.db.rollback()
                return ActionResult.failure("Error de base de datos", StoreError.code)
            except Exception:
                logger.exception(f"❌ {name}: error inesperado")
                return ActionResult.failure("Error inesperado", "INTERNAL")

            logger.info(f"✅ {name} completada")
            return result
        return wrapper
    return decorator
