from enum import Enum
from typing import List, Optional
from pydantic import Field
from uuid import UUID
import datetime

from app.common.schemas import CamelModel, Money


class TopEntityKind(str, Enum):
    CLIENTS = "CLIENTS"
    SUPPLIERS = "SUPPLIERS"


class ProjectStats(CamelModel):
    id: UUID
    name: str
    budget: Money
    sales: Money
    purchases: Money
    margin: Money
    execution: float


class CostCenterStats(CamelModel):
    id: UUID
    code: str
    name: str
    sales: Money
    purchases: Money
    margin: Money


class SummaryReport(CamelModel):
    date_from: Optional[datetime.date] = None
    date_to: Optional[datetime.date] = None
    sales: Money
    debit_notes: Money
    credit_notes: Money
    net_sales: Money
    purchases: Money
    margin: Money
    receivables: Money
    collected: Money
    by_project: List[ProjectStats] = []
    by_cost_center: List[CostCenterStats] = []


class AgingReport(CamelModel):
    """Saldos por cobrar agrupados por días de atraso"""
    current: Money
    days30: Money
    days60: Money
    days60plus: Money = Field(serialization_alias="days60plus")
    total: Money
    invoice_count: int


class CashFlowMonth(CamelModel):
    month: int
    income: Money
    expense: Money
    net: Money


class CashFlowReport(CamelModel):
    year: int
    months: List[CashFlowMonth]


class TopEntity(CamelModel):
    id: UUID
    name: str
    invoice_count: int
    total: Money
