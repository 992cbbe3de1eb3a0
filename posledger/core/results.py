from fastapi import HTTPException, status

from posledger.shared.ledger.results import ActionResult

# Código de error del ledger → status HTTP
_STATUS_BY_CODE = {
    "VALIDATION": status.HTTP_400_BAD_REQUEST,
    "INSUFFICIENT_STOCK": status.HTTP_400_BAD_REQUEST,
    "INVALID_STATE": status.HTTP_400_BAD_REQUEST,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
}

def raise_for_failure(result: ActionResult) -> ActionResult:
    """Devuelve el resultado exitoso o lo traduce a HTTPException"""
    if result.ok:
        return result

    raise HTTPException(
        status_code=_STATUS_BY_CODE.get(result.error.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=result.error.model_dump()
    )
