"""
Tests para reportes financieros
"""

import datetime
import pytest
from decimal import Decimal
from uuid import uuid4

from app.modules.reports.schemas import AgingReport
from app.modules.reports.service import ReportService, aging_bucket
from conftest import create_member, headers_for


@pytest.fixture
def parties(client, auth_headers):
    customer = client.post("/clients/", headers=auth_headers, json={"rut": "12345678-5", "name": "Mandante Uno"}).json()
    other = client.post("/clients/", headers=auth_headers, json={"rut": "20000003-K", "name": "Mandante Dos"}).json()
    supplier = client.post("/clients/", headers=auth_headers, json={"rut": "11111111-1", "name": "Áridos SpA"}).json()
    return {"customer": customer, "other": other, "supplier": supplier}


@pytest.fixture
def new_invoice(client, auth_headers):
    def _create(number, total, **fields):
        payload = {"number": number, "total": total, "date": "2024-03-15"}
        payload.update(fields)
        response = client.post("/invoices/", headers=auth_headers, json=payload)
        assert response.status_code == 201, response.text
        return response.json()
    return _create


@pytest.mark.parametrize("days,bucket", [
    (-5, "current"), (0, "current"), (1, "days30"), (30, "days30"),
    (31, "days60"), (60, "days60"), (61, "days60plus"),
])
def test_aging_bucket(days, bucket):
    assert aging_bucket(days) == bucket


def test_summary(client, auth_headers, parties, new_invoice):
    project = client.post("/projects/", headers=auth_headers, json={"name": "Torre A", "budget": 1000000}).json()
    center = client.post("/cost-centers/", headers=auth_headers, json={"code": "CC-1", "name": "Obra"}).json()

    sale = new_invoice("1", 500000, clientId=parties["customer"]["id"], projectId=project["id"], costCenterId=center["id"])
    new_invoice("2", 200000, type="NOTA_DEBITO")
    new_invoice("3", 300000, type="COMPRA", clientId=parties["supplier"]["id"], projectId=project["id"])
    cancelled = new_invoice("4", 900000)
    new_invoice("NC-1", 900000, type="NOTA_CREDITO", relatedInvoiceId=cancelled["id"])
    new_invoice("NC-2", 50000, type="NOTA_CREDITO", projectId=project["id"])
    # Fuera del periodo
    new_invoice("5", 700000, date="2023-12-31")

    client.post(f"/invoices/{sale['id']}/payments", headers=auth_headers, json={"amount": 100000, "date": "2024-03-20"})

    response = client.get("/reports/summary", headers=auth_headers, params={
        "dateFrom": "2024-01-01", "dateTo": "2024-12-31"
    })
    assert response.status_code == 200
    data = response.json()
    assert data["sales"] == 700000
    assert data["debitNotes"] == 200000
    assert data["creditNotes"] == 950000
    assert data["netSales"] == -250000
    assert data["purchases"] == 300000
    assert data["collected"] == 100000
    # Saldo vigente de ventas: 400000 de la venta 1 + 700000 de la venta 5
    assert data["receivables"] == 1100000

    (project_stats,) = data["byProject"]
    assert project_stats["sales"] == 450000
    assert project_stats["purchases"] == 300000
    assert project_stats["margin"] == 150000
    assert project_stats["execution"] == 45.0

    (center_stats,) = data["byCostCenter"]
    assert center_stats["code"] == "CC-1"
    assert center_stats["sales"] == 500000


def test_summary_invalid_range(client, auth_headers):
    response = client.get("/reports/summary", headers=auth_headers, params={
        "dateFrom": "2024-02-01", "dateTo": "2024-01-01"
    })
    assert response.status_code == 422


def test_aging(client, auth_headers, db, company, new_invoice):
    today = datetime.date.today()
    new_invoice("1", 100000, date=str(today))
    new_invoice("2", 200000, date=str(today - datetime.timedelta(days=40)))
    overdue = new_invoice("3", 300000, date=str(today - datetime.timedelta(days=90)))
    paid = new_invoice("4", 50000, date=str(today - datetime.timedelta(days=90)))
    new_invoice("5", 70000, date=str(today - datetime.timedelta(days=10)), dueDate=str(today + datetime.timedelta(days=20)))

    client.post(f"/invoices/{overdue['id']}/payments", headers=auth_headers, json={"amount": 100000})
    client.patch(f"/invoices/{paid['id']}/payment", headers=auth_headers, json={"isPaid": True})

    data = client.get("/reports/aging", headers=auth_headers).json()
    assert data["current"] == 170000
    assert data["days30"] == 0
    assert data["days60"] == 200000
    assert data["days60plus"] == 200000
    assert data["total"] == 570000
    assert data["invoiceCount"] == 4


def test_cash_flow(client, auth_headers, parties, new_invoice):
    new_invoice("1", 100000, date="2024-01-05")
    new_invoice("2", 50000, date="2024-01-20", type="NOTA_DEBITO")
    new_invoice("3", 80000, date="2024-03-01", type="COMPRA", clientId=parties["supplier"]["id"])
    new_invoice("4", 999999, date="2023-01-05")

    response = client.get("/reports/cash-flow", headers=auth_headers, params={"year": 2024})
    assert response.status_code == 200
    data = response.json()
    assert data["year"] == 2024
    months = data["months"]
    assert len(months) == 12
    assert months[0] == {"month": 1, "income": 150000, "expense": 0, "net": 150000}
    assert months[2]["expense"] == 80000
    assert months[2]["net"] == -80000


def test_cash_flow_csv(client, auth_headers, new_invoice):
    new_invoice("1", 100000, date="2024-01-05")
    response = client.get("/reports/cash-flow", headers=auth_headers, params={"year": 2024, "export": "csv"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.strip().splitlines()
    assert lines[0] == "Mes,Ingresos,Egresos,Neto"
    assert lines[1] == "1,100000,0,100000"
    assert len(lines) == 13


def test_top_entities(client, auth_headers, parties, new_invoice):
    new_invoice("1", 100000, clientId=parties["customer"]["id"])
    new_invoice("2", 300000, clientId=parties["other"]["id"])
    new_invoice("3", 250000, clientId=parties["customer"]["id"])
    new_invoice("4", 80000, type="COMPRA", clientId=parties["supplier"]["id"])

    clients_top = client.get("/reports/top-entities", headers=auth_headers, params={"kind": "CLIENTS"}).json()
    assert [(e["name"], e["total"], e["invoiceCount"]) for e in clients_top] == [
        ("Mandante Uno", 350000, 2), ("Mandante Dos", 300000, 1)
    ]

    limited = client.get("/reports/top-entities", headers=auth_headers, params={"kind": "CLIENTS", "limit": 1}).json()
    assert len(limited) == 1

    suppliers = client.get("/reports/top-entities", headers=auth_headers, params={"kind": "SUPPLIERS"}).json()
    assert [e["name"] for e in suppliers] == ["Áridos SpA"]


def test_reports_are_tenant_scoped(db, company, new_invoice):
    new_invoice("1", 100000)
    other_tenant = ReportService(db, tenant_id=uuid4())
    assert other_tenant.get_summary()["sales"] == Decimal("0")


def test_reports_permission(client, db, company):
    user = create_member(db, company, "bodega@obras.cl", allowed_sections=["inventory:*"])
    assert client.get("/reports/summary", headers=headers_for(user, company)).status_code == 403
    reader = create_member(db, company, "gerencia@obras.cl", allowed_sections=["reports:read"])
    assert client.get("/reports/aging", headers=headers_for(reader, company)).status_code == 200


def test_aging_report_keys():
    report = AgingReport(current=1, days30=2, days60=3, days60plus=4, total=10, invoice_count=4)
    assert list(report.model_dump(by_alias=True)) == [
        "current", "days30", "days60", "days60plus", "total", "invoiceCount"
    ]
