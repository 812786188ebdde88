"""
Reportes financieros

Consultas de solo lectura sobre invoices/payments. Las facturas CANCELLED
no cuentan en ningún total.
"""

import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import and_, desc, extract, func
from sqlalchemy.orm import Session

from app.modules.clients.models import Client
from app.modules.cost_centers.models import CostCenter
from app.modules.invoices.models import Invoice, InvoiceStatus, InvoiceType, Payment
from app.modules.projects.models import Project


SALES_TYPES = (InvoiceType.VENTA, InvoiceType.NOTA_DEBITO)
ZERO = Decimal("0")


def _dec(value) -> Decimal:
    if value is None:
        return ZERO
    return value if isinstance(value, Decimal) else Decimal(str(value))


def aging_bucket(days_overdue: int) -> str:
    if days_overdue <= 0:
        return "current"
    if days_overdue <= 30:
        return "days30"
    if days_overdue <= 60:
        return "days60"
    return "days60plus"


class ReportService:
    """Servicio base para reportes, siempre filtrado por empresa"""

    def __init__(self, db: Session, tenant_id: UUID):
        self.db = db
        self.tenant_id = tenant_id

    def _active_invoices(self):
        return self.db.query(Invoice).filter(
            Invoice.tenant_id == self.tenant_id,
            Invoice.status != InvoiceStatus.CANCELLED,
        )

    def _apply_date_filter(self, query, date_field, date_from: Optional[datetime.date], date_to: Optional[datetime.date]):
        if date_from:
            query = query.filter(date_field >= date_from)
        if date_to:
            query = query.filter(date_field <= date_to)
        return query

    def _totals_by_type(self, date_from=None, date_to=None) -> Dict[InvoiceType, Decimal]:
        query = self._apply_date_filter(
            self._active_invoices(), Invoice.date, date_from, date_to
        )
        rows = query.with_entities(
            Invoice.type, func.coalesce(func.sum(Invoice.total_amount), 0)
        ).group_by(Invoice.type).all()
        totals = {invoice_type: ZERO for invoice_type in InvoiceType}
        for invoice_type, total in rows:
            totals[InvoiceType(invoice_type)] = _dec(total)
        return totals

    def _paid_subquery(self):
        return self.db.query(
            Payment.invoice_id.label("invoice_id"),
            func.coalesce(func.sum(Payment.amount), 0).label("paid"),
        ).filter(
            Payment.tenant_id == self.tenant_id
        ).group_by(Payment.invoice_id).subquery()

    def _outstanding_sales(self):
        """Ventas no pagadas con su saldo (total - pagos)."""
        paid = self._paid_subquery()
        rows = self._active_invoices().outerjoin(
            paid, paid.c.invoice_id == Invoice.id
        ).filter(
            Invoice.type == InvoiceType.VENTA,
            Invoice.is_paid.is_(False),
        ).with_entities(
            Invoice.id, Invoice.date, Invoice.due_date,
            Invoice.total_amount, func.coalesce(paid.c.paid, 0),
        ).all()

        result = []
        for invoice_id, date, due_date, total, paid_amount in rows:
            balance = _dec(total) - _dec(paid_amount)
            if balance > 0:
                result.append((invoice_id, due_date or date, balance))
        return result

    def _breakdown(self, column, date_from, date_to) -> Dict[UUID, Dict[str, Decimal]]:
        query = self._apply_date_filter(
            self._active_invoices(), Invoice.date, date_from, date_to
        ).filter(column.isnot(None))
        rows = query.with_entities(
            column, Invoice.type, func.coalesce(func.sum(Invoice.total_amount), 0)
        ).group_by(column, Invoice.type).all()

        stats: Dict[UUID, Dict[str, Decimal]] = {}
        for key, invoice_type, total in rows:
            entry = stats.setdefault(key, {"sales": ZERO, "purchases": ZERO})
            invoice_type = InvoiceType(invoice_type)
            if invoice_type in SALES_TYPES:
                entry["sales"] += _dec(total)
            elif invoice_type == InvoiceType.NOTA_CREDITO:
                entry["sales"] -= _dec(total)
            else:
                entry["purchases"] += _dec(total)
        return stats

    def get_summary(self, date_from: Optional[datetime.date] = None, date_to: Optional[datetime.date] = None) -> Dict:
        """
        Resumen del periodo: ventas, compras, notas, cuentas por cobrar y recaudado.

        Ventas = VENTA + NOTA_DEBITO; venta neta = ventas - notas de crédito.
        Las cuentas por cobrar son el saldo vigente, sin filtro de fechas.
        """
        totals = self._totals_by_type(date_from, date_to)
        sales = totals[InvoiceType.VENTA] + totals[InvoiceType.NOTA_DEBITO]
        credit_notes = totals[InvoiceType.NOTA_CREDITO]
        purchases = totals[InvoiceType.COMPRA]

        collected_query = self.db.query(
            func.coalesce(func.sum(Payment.amount), 0)
        ).join(Invoice, Invoice.id == Payment.invoice_id).filter(
            Payment.tenant_id == self.tenant_id,
            Invoice.type.in_(SALES_TYPES),
            Invoice.status != InvoiceStatus.CANCELLED,
        )
        collected = _dec(self._apply_date_filter(
            collected_query, Payment.date, date_from, date_to
        ).scalar())

        receivables = sum((balance for _, _, balance in self._outstanding_sales()), ZERO)

        projects = {
            p.id: p for p in self.db.query(Project).filter(Project.tenant_id == self.tenant_id)
        }
        by_project = []
        for project_id, entry in self._breakdown(Invoice.project_id, date_from, date_to).items():
            project = projects.get(project_id)
            if not project:
                continue
            budget = _dec(project.budget)
            by_project.append({
                "id": project.id,
                "name": project.name,
                "budget": budget,
                "sales": entry["sales"],
                "purchases": entry["purchases"],
                "margin": entry["sales"] - entry["purchases"],
                "execution": round(float(entry["sales"] / budget * 100), 2) if budget > 0 else 0.0,
            })

        centers = {
            c.id: c for c in self.db.query(CostCenter).filter(CostCenter.tenant_id == self.tenant_id)
        }
        by_cost_center = []
        for center_id, entry in self._breakdown(Invoice.cost_center_id, date_from, date_to).items():
            center = centers.get(center_id)
            if not center:
                continue
            by_cost_center.append({
                "id": center.id,
                "code": center.code,
                "name": center.name,
                "sales": entry["sales"],
                "purchases": entry["purchases"],
                "margin": entry["sales"] - entry["purchases"],
            })

        return {
            "date_from": date_from,
            "date_to": date_to,
            "sales": sales,
            "debit_notes": totals[InvoiceType.NOTA_DEBITO],
            "credit_notes": credit_notes,
            "net_sales": sales - credit_notes,
            "purchases": purchases,
            "margin": sales - credit_notes - purchases,
            "receivables": receivables,
            "collected": collected,
            "by_project": sorted(by_project, key=lambda p: p["name"]),
            "by_cost_center": sorted(by_cost_center, key=lambda c: c["code"]),
        }

    def get_aging(self, today: Optional[datetime.date] = None) -> Dict:
        """Saldos de ventas impagas por días de atraso (dueDate, o date si no hay vencimiento)."""
        today = today or datetime.date.today()
        buckets = {"current": ZERO, "days30": ZERO, "days60": ZERO, "days60plus": ZERO}
        count = 0
        for _, reference_date, balance in self._outstanding_sales():
            buckets[aging_bucket((today - reference_date).days)] += balance
            count += 1
        return {
            **buckets,
            "total": sum(buckets.values(), ZERO),
            "invoice_count": count,
        }

    def get_cash_flow(self, year: int) -> List[Dict]:
        """Ingresos (VENTA + NOTA_DEBITO) y egresos (COMPRA) por mes del año."""
        month = extract("month", Invoice.date)
        rows = self._active_invoices().filter(
            extract("year", Invoice.date) == year,
            Invoice.type.in_(SALES_TYPES + (InvoiceType.COMPRA,)),
        ).with_entities(
            month, Invoice.type, func.coalesce(func.sum(Invoice.total_amount), 0)
        ).group_by(month, Invoice.type).all()

        months = {m: {"month": m, "income": ZERO, "expense": ZERO} for m in range(1, 13)}
        for month_number, invoice_type, total in rows:
            entry = months[int(month_number)]
            if InvoiceType(invoice_type) == InvoiceType.COMPRA:
                entry["expense"] += _dec(total)
            else:
                entry["income"] += _dec(total)

        for entry in months.values():
            entry["net"] = entry["income"] - entry["expense"]
        return [months[m] for m in range(1, 13)]

    def get_top_entities(self, kind: str, limit: int = 5) -> List[Dict]:
        """Top clientes por ventas (CLIENTS) o proveedores por compras (SUPPLIERS)."""
        invoice_type = InvoiceType.VENTA if kind == "CLIENTS" else InvoiceType.COMPRA
        total = func.coalesce(func.sum(Invoice.total_amount), 0).label("total")
        rows = self._active_invoices().join(
            Client, and_(Client.id == Invoice.client_id, Client.tenant_id == self.tenant_id)
        ).filter(
            Invoice.type == invoice_type
        ).with_entities(
            Client.id, Client.name, func.count(Invoice.id), total
        ).group_by(Client.id, Client.name).order_by(desc(total)).limit(limit).all()

        return [
            {"id": client_id, "name": name, "invoice_count": count, "total": _dec(amount)}
            for client_id, name, count, amount in rows
        ]
