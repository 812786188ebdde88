from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from datetime import date

from app.common.exceptions import NotFoundError
from app.modules.expenses.models import Expense
from app.modules.expenses.schemas import ExpenseCreate, ExpenseUpdate
from app.modules.projects.models import Project
from app.modules.cost_centers.models import CostCenter


class ExpenseService:
    def __init__(self, db: Session):
        self.db = db

    def _check_links(self, tenant_id: UUID, project_id: Optional[UUID], cost_center_id: Optional[UUID]) -> None:
        if project_id and not self.db.query(Project.id).filter(
            Project.id == project_id, Project.tenant_id == tenant_id
        ).first():
            raise NotFoundError("Proyecto no encontrado")
        if cost_center_id and not self.db.query(CostCenter.id).filter(
            CostCenter.id == cost_center_id, CostCenter.tenant_id == tenant_id
        ).first():
            raise NotFoundError("Centro de costo no encontrado")

    def list_expenses(
        self,
        tenant_id: UUID,
        project_id: Optional[UUID] = None,
        cost_center_id: Optional[UUID] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None
    ) -> List[Expense]:
        query = self.db.query(Expense).filter(Expense.tenant_id == tenant_id)
        if project_id:
            query = query.filter(Expense.project_id == project_id)
        if cost_center_id:
            query = query.filter(Expense.cost_center_id == cost_center_id)
        if date_from:
            query = query.filter(Expense.date >= date_from)
        if date_to:
            query = query.filter(Expense.date <= date_to)
        return query.order_by(Expense.date.desc()).all()

    def get_expense(self, expense_id: UUID, tenant_id: UUID) -> Expense:
        expense = self.db.query(Expense).filter(
            Expense.id == expense_id,
            Expense.tenant_id == tenant_id
        ).first()
        if not expense:
            raise NotFoundError("Gasto no encontrado")
        return expense

    def create_expense(self, data: ExpenseCreate, tenant_id: UUID) -> Expense:
        self._check_links(tenant_id, data.project_id, data.cost_center_id)
        expense = Expense(tenant_id=tenant_id, **data.model_dump())
        self.db.add(expense)
        self.db.commit()
        self.db.refresh(expense)
        return expense

    def update_expense(self, expense_id: UUID, data: ExpenseUpdate, tenant_id: UUID) -> Expense:
        expense = self.get_expense(expense_id, tenant_id)
        changes = data.model_dump(exclude_unset=True)
        self._check_links(tenant_id, changes.get("project_id"), changes.get("cost_center_id"))

        for field, value in changes.items():
            if field in ("description", "amount", "date") and value is None:
                continue
            setattr(expense, field, value)
        self.db.commit()
        self.db.refresh(expense)
        return expense

    def delete_expense(self, expense_id: UUID, tenant_id: UUID) -> None:
        expense = self.get_expense(expense_id, tenant_id)
        self.db.delete(expense)
        self.db.commit()
