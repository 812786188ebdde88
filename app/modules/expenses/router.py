from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from datetime import date

from app.database.database import get_db
from app.common.schemas import SuccessResponse
from app.modules.auth.dependencies import require_permission
from app.modules.auth.schemas import AuthContext
from app.modules.expenses.service import ExpenseService
from app.modules.expenses.schemas import ExpenseCreate, ExpenseUpdate, ExpenseOut

router = APIRouter(prefix="/expenses", tags=["Expenses"])


@router.get("/", response_model=List[ExpenseOut])
def list_expenses(
    project_id: Optional[UUID] = Query(None, alias="projectId"),
    cost_center_id: Optional[UUID] = Query(None, alias="costCenterId"),
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("expenses", "read"))
):
    return ExpenseService(db).list_expenses(
        auth_context.tenant_id, project_id, cost_center_id, date_from, date_to
    )


@router.post("/", response_model=ExpenseOut, status_code=status.HTTP_201_CREATED)
def create_expense(
    data: ExpenseCreate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("expenses", "create"))
):
    return ExpenseService(db).create_expense(data, auth_context.tenant_id)


@router.put("/{expense_id}", response_model=ExpenseOut)
def update_expense(
    expense_id: UUID,
    data: ExpenseUpdate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("expenses", "update"))
):
    return ExpenseService(db).update_expense(expense_id, data, auth_context.tenant_id)


@router.delete("/{expense_id}", response_model=SuccessResponse)
def delete_expense(
    expense_id: UUID,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("expenses", "delete"))
):
    ExpenseService(db).delete_expense(expense_id, auth_context.tenant_id)
    return SuccessResponse()
