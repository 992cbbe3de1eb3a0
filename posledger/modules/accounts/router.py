# posledger/modules/accounts/router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from posledger.config.database import get_db
from posledger.core.results import raise_for_failure
from posledger.shared.ledger.results import ActionResult
from .service import AccountsService
from .schemas import (
    CustomerCreateRequest, PayAccountRequest, AddDebtRequest,
    CustomerResponse, CustomerBalanceData, AccountBalanceData, AccountStatementData
)

router = APIRouter(prefix="/accounts", tags=["Accounts - Cuentas corrientes"])

# ==================== CLIENTES ====================

@router.post("/customers", response_model=ActionResult[CustomerResponse])
async def create_customer(request: CustomerCreateRequest, db: Session = Depends(get_db)):
    """
    Alta de cliente
    """
    service = AccountsService(db)
    return raise_for_failure(service.create_customer(request))

@router.get("/customers/{customer_id}/balance", response_model=ActionResult[CustomerBalanceData])
async def get_customer_balance(customer_id: str, db: Session = Depends(get_db)):
    """
    Saldo del cliente (negativo = crédito a favor)
    """
    service = AccountsService(db)
    return raise_for_failure(service.get_customer_balance(customer_id))

@router.get("/customers/{customer_id}/statement", response_model=ActionResult[AccountStatementData])
async def get_account_statement(customer_id: str, db: Session = Depends(get_db)):
    """
    Ficha de cuenta corriente con todos sus movimientos
    """
    service = AccountsService(db)
    return raise_for_failure(service.get_account_statement(customer_id))

# ==================== MOVIMIENTOS ====================

@router.post("/payments", response_model=ActionResult[AccountBalanceData])
async def pay_account(request: PayAccountRequest, db: Session = Depends(get_db)):
    """
    Registrar pago de deuda (ingresa a caja)
    """
    service = AccountsService(db)
    return raise_for_failure(service.pay_account(request))

@router.post("/movements/{movement_id}/reverse", response_model=ActionResult[AccountBalanceData])
async def reverse_payment(movement_id: str, db: Session = Depends(get_db)):
    """
    Anular un pago registrado
    """
    service = AccountsService(db)
    return raise_for_failure(service.reverse_payment(movement_id))

@router.post("/debts", response_model=ActionResult[AccountBalanceData])
async def add_debt(request: AddDebtRequest, db: Session = Depends(get_db)):
    """
    Agregar deuda manual (sin venta)
    """
    service = AccountsService(db)
    return raise_for_failure(service.add_debt(request))
