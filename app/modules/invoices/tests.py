"""
Tests para el módulo de Facturación

Cubren:
- Cálculo de montos (neto, IVA, total) y alias del frontend
- Unicidad de folio por tipo y por proveedor
- Pagos parciales/totales y estado de pago derivado
- Notas de crédito que anulan y restauran la factura referenciada
- Aislamiento por empresa
"""

import pytest
from decimal import Decimal
from uuid import uuid4
from sqlalchemy.orm import Session

from app.modules.company.models import Company
from app.modules.invoices.models import PaymentStatus
from app.modules.invoices.schemas import normalize_invoice_input, resolve_amounts
from app.modules.invoices.service import InvoiceService, derive_payment_status
from conftest import create_member, headers_for


# ===== FIXTURES =====

@pytest.fixture
def customer(client, auth_headers):
    return client.post("/clients/", headers=auth_headers, json={
        "rut": "12.345.678-5", "razonSocial": "Inmobiliaria Costa Ltda."
    }).json()


@pytest.fixture
def supplier(client, auth_headers):
    return client.post("/clients/", headers=auth_headers, json={
        "rut": "11.111.111-1", "razonSocial": "Hormigones del Valle SpA"
    }).json()


@pytest.fixture
def create_invoice(client, auth_headers):
    def _create(**fields):
        payload = {"number": "1001", "type": "VENTA", "date": "2024-05-02", "total": 100000}
        payload.update(fields)
        return client.post("/invoices/", headers=auth_headers, json=payload)
    return _create


def pay(client, headers, invoice_id, amount, **extra):
    return client.post(f"/invoices/{invoice_id}/payments", headers=headers, json={"amount": amount, **extra})


def get_invoice(client, headers, invoice_id):
    return client.get(f"/invoices/{invoice_id}", headers=headers).json()


# ===== CÁLCULOS =====

class TestAmountResolution:

    def test_net_only_adds_iva(self):
        assert resolve_amounts(Decimal("100000"), None, None) == (
            Decimal("100000"), Decimal("19000"), Decimal("119000")
        )

    def test_total_only_splits_iva(self):
        net, tax, total = resolve_amounts(None, None, Decimal("119000"))
        assert (net, tax, total) == (Decimal("100000"), Decimal("19000"), Decimal("119000"))

    def test_total_with_net(self):
        assert resolve_amounts(Decimal("90000"), None, Decimal("100000"))[1] == Decimal("10000")

    def test_items_give_net(self):
        net, tax, total = resolve_amounts(None, None, None, items_net=Decimal("50000"))
        assert (net, tax, total) == (Decimal("50000"), Decimal("9500"), Decimal("59500"))

    def test_iva_rounds_to_whole_pesos(self):
        _, tax, total = resolve_amounts(Decimal("1005"), None, None)
        assert tax == Decimal("191")
        assert total == Decimal("1196")

    def test_nothing_informed(self):
        assert resolve_amounts(None, None, None) == (None, None, None)

    def test_aliases_merge(self):
        data = normalize_invoice_input({"net": 10, "netAmount": "10", "iva": 2, "clientId": "none"})
        assert data["netAmount"] == 10
        assert data["taxAmount"] == 2
        assert data["clientId"] is None
        assert "net" not in data

    def test_conflicting_aliases(self):
        with pytest.raises(ValueError):
            normalize_invoice_input({"total": 100, "totalAmount": 200})

    @pytest.mark.parametrize("paid,total,expected", [
        ("0", "100", PaymentStatus.PENDING),
        ("40", "100", PaymentStatus.PARTIAL),
        ("100", "100", PaymentStatus.PAID),
        ("150", "100", PaymentStatus.PAID),
        ("0", "0", PaymentStatus.PAID),
    ])
    def test_derive_payment_status(self, paid, total, expected):
        assert derive_payment_status(Decimal(paid), Decimal(total)) == expected


# ===== CREACIÓN =====

class TestCreateInvoice:

    def test_create_with_items(self, client, auth_headers, customer):
        response = client.post("/invoices/", headers=auth_headers, json={
            "number": "2001",
            "clientId": customer["id"],
            "dueDate": "2024-06-01",
            "date": "2024-05-02",
            "items": [
                {"description": "Estados de pago N°1", "quantity": 1, "unitPrice": 80000},
                {"description": "Adicional", "quantity": 2, "unitPrice": 10000},
            ],
        })
        assert response.status_code == 201
        data = response.json()
        assert data["netAmount"] == 100000
        assert data["taxAmount"] == 19000
        assert data["totalAmount"] == 119000
        assert data["status"] == "ISSUED"
        assert data["emissionType"] == "MANUAL"
        assert data["paymentStatus"] == "PENDING"
        assert data["isPaid"] is False
        assert data["clientName"] == "Inmobiliaria Costa Ltda."
        assert [i["position"] for i in data["items"]] == [0, 1]
        assert data["items"][1]["total"] == 20000

    def test_short_aliases(self, create_invoice):
        response = create_invoice(total=None, net=84034, iva=15966)
        assert response.status_code == 201
        assert response.json()["totalAmount"] == 100000

    def test_conflicting_amounts_rejected(self, create_invoice):
        response = create_invoice(totalAmount=120000)
        assert response.status_code == 422

    def test_missing_amounts_rejected(self, create_invoice):
        response = create_invoice(total=None)
        assert response.status_code == 422

    def test_due_date_before_date(self, create_invoice):
        assert create_invoice(dueDate="2024-05-01").status_code == 422

    def test_blank_references_are_ignored(self, create_invoice):
        response = create_invoice(clientId="", projectId="none", costCenterId="")
        assert response.status_code == 201
        assert response.json()["clientId"] is None

    def test_unknown_client(self, create_invoice):
        assert create_invoice(clientId=str(uuid4())).status_code == 404

    def test_zero_total_is_paid(self, create_invoice):
        data = create_invoice(total=0).json()
        assert data["paymentStatus"] == "PAID"
        assert data["isPaid"] is True


# ===== FOLIOS =====

class TestFolio:

    def test_duplicate_sale_folio(self, create_invoice):
        assert create_invoice().status_code == 201
        response = create_invoice()
        assert response.status_code == 409
        assert response.json()["detail"] == "Ya existe un documento VENTA con folio 1001"

    def test_same_number_different_type(self, create_invoice):
        assert create_invoice().status_code == 201
        assert create_invoice(type="NOTA_DEBITO").status_code == 201

    def test_purchase_requires_supplier(self, create_invoice):
        response = create_invoice(type="COMPRA")
        assert response.status_code == 400

    def test_purchase_folio_per_supplier(self, create_invoice, customer, supplier):
        assert create_invoice(type="COMPRA", clientId=supplier["id"]).status_code == 201
        assert create_invoice(type="COMPRA", clientId=customer["id"]).status_code == 201

        response = create_invoice(type="COMPRA", clientId=supplier["id"])
        assert response.status_code == 409
        assert response.json()["detail"].endswith("para este proveedor")

    def test_cancelled_folio_not_reused(self, create_invoice):
        invoice = create_invoice().json()
        create_invoice(number="NC-1", type="NOTA_CREDITO", relatedInvoiceId=invoice["id"])
        assert create_invoice().status_code == 409

    def test_update_to_taken_folio(self, client, auth_headers, create_invoice):
        create_invoice()
        other = create_invoice(number="1002").json()
        response = client.put(f"/invoices/{other['id']}", headers=auth_headers, json={"number": "1001"})
        assert response.status_code == 409

    def test_folio_is_per_company(self, client, db, create_invoice):
        create_invoice()
        other = Company(name="Constructora Sur", rut="20000003-K")
        db.add(other)
        db.commit()
        user = create_member(db, other, "sur@obras.cl", allowed_sections=["invoices:*"])
        response = client.post("/invoices/", headers=headers_for(user, other), json={
            "number": "1001", "total": 5000
        })
        assert response.status_code == 201

    def test_database_rejects_duplicate_folio(self, create_invoice, monkeypatch):
        create_invoice()
        # Dos requests concurrentes pasan ambos la validación previa
        monkeypatch.setattr(InvoiceService, "check_folio", lambda self, *args, **kwargs: None)
        response = create_invoice()
        assert response.status_code == 409
        assert "1001" in response.json()["detail"]

    def test_database_rejects_duplicate_purchase_folio(self, create_invoice, customer, supplier, monkeypatch):
        assert create_invoice(type="COMPRA", clientId=supplier["id"]).status_code == 201
        monkeypatch.setattr(InvoiceService, "check_folio", lambda self, *args, **kwargs: None)
        assert create_invoice(type="COMPRA", clientId=supplier["id"]).status_code == 409
        assert create_invoice(type="COMPRA", clientId=customer["id"]).status_code == 201

    def test_database_rejects_update_to_taken_folio(self, client, auth_headers, create_invoice, monkeypatch):
        create_invoice()
        other = create_invoice(number="1002").json()
        monkeypatch.setattr(InvoiceService, "check_folio", lambda self, *args, **kwargs: None)
        response = client.put(f"/invoices/{other['id']}", headers=auth_headers, json={"number": "1001"})
        assert response.status_code == 409
        assert get_invoice(client, auth_headers, other["id"])["number"] == "1002"


# ===== PAGOS =====

class TestPayments:

    def test_partial_then_full_payment(self, client, auth_headers, create_invoice):
        invoice = create_invoice().json()

        first = pay(client, auth_headers, invoice["id"], 40000, method="CASH")
        assert first.status_code == 201
        detail = get_invoice(client, auth_headers, invoice["id"])
        assert detail["paymentStatus"] == "PARTIAL"
        assert detail["isPaid"] is False
        assert detail["paidAmount"] == 40000
        assert detail["balanceDue"] == 60000

        second = pay(client, auth_headers, invoice["id"], 60000, reference="TRF-889")
        detail = get_invoice(client, auth_headers, invoice["id"])
        assert detail["paymentStatus"] == "PAID"
        assert detail["isPaid"] is True
        assert len(detail["payments"]) == 2

        # Eliminar el segundo pago devuelve la factura a PARTIAL
        assert client.delete(f"/payments/{second.json()['id']}", headers=auth_headers).status_code == 200
        detail = get_invoice(client, auth_headers, invoice["id"])
        assert detail["paymentStatus"] == "PARTIAL"
        assert detail["isPaid"] is False

    def test_payment_must_be_positive(self, client, auth_headers, create_invoice):
        invoice = create_invoice().json()
        assert pay(client, auth_headers, invoice["id"], 0).status_code == 422
        assert pay(client, auth_headers, invoice["id"], -10).status_code == 422

    def test_overpayment_marks_paid(self, client, auth_headers, create_invoice):
        invoice = create_invoice().json()
        pay(client, auth_headers, invoice["id"], 150000)
        detail = get_invoice(client, auth_headers, invoice["id"])
        assert detail["paymentStatus"] == "PAID"
        assert detail["balanceDue"] == -50000

    def test_list_payments(self, client, auth_headers, create_invoice):
        invoice = create_invoice().json()
        pay(client, auth_headers, invoice["id"], 10000, date="2024-05-10")
        pay(client, auth_headers, invoice["id"], 20000, date="2024-05-03")
        payments = client.get(f"/invoices/{invoice['id']}/payments", headers=auth_headers).json()
        assert [p["amount"] for p in payments] == [20000, 10000]
        assert payments[0]["method"] == "TRANSFER"

    def test_payment_on_unknown_invoice(self, client, auth_headers):
        assert pay(client, auth_headers, str(uuid4()), 1000).status_code == 404

    def test_delete_unknown_payment(self, client, auth_headers):
        response = client.delete(f"/payments/{uuid4()}", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Pago no encontrado"

    def test_mark_paid_and_unpaid(self, client, auth_headers, create_invoice):
        invoice = create_invoice().json()
        pay(client, auth_headers, invoice["id"], 30000)

        response = client.patch(f"/invoices/{invoice['id']}/payment", headers=auth_headers, json={
            "isPaid": True, "method": "CHECK"
        })
        assert response.status_code == 200
        assert response.json()["paymentStatus"] == "PAID"

        payments = client.get(f"/invoices/{invoice['id']}/payments", headers=auth_headers).json()
        assert sorted(p["amount"] for p in payments) == [30000, 70000]

        response = client.patch(f"/invoices/{invoice['id']}/payment", headers=auth_headers, json={"isPaid": False})
        assert response.json()["paymentStatus"] == "PENDING"
        assert response.json()["isPaid"] is False
        assert client.get(f"/invoices/{invoice['id']}/payments", headers=auth_headers).json() == []

    def test_total_change_recomputes_status(self, client, auth_headers, create_invoice):
        invoice = create_invoice().json()
        pay(client, auth_headers, invoice["id"], 100000)

        response = client.put(f"/invoices/{invoice['id']}", headers=auth_headers, json={"total": 150000})
        assert response.status_code == 200
        data = response.json()
        assert data["totalAmount"] == 150000
        assert data["paymentStatus"] == "PARTIAL"

    def test_failed_payment_rolls_back(self, client, auth_headers, create_invoice, monkeypatch):
        invoice = create_invoice().json()

        def broken_recalculation(self, invoice):
            raise RuntimeError("conexión perdida")

        monkeypatch.setattr(InvoiceService, "_recalculate_payment_status", broken_recalculation)
        response = pay(client, auth_headers, invoice["id"], 40000)
        assert response.status_code == 500
        monkeypatch.undo()

        assert client.get(f"/invoices/{invoice['id']}/payments", headers=auth_headers).json() == []
        assert get_invoice(client, auth_headers, invoice["id"])["paymentStatus"] == "PENDING"

    def test_other_company_cannot_delete_payment(self, client, db, auth_headers, create_invoice):
        invoice = create_invoice().json()
        payment = pay(client, auth_headers, invoice["id"], 40000).json()

        other = Company(name="Constructora Norte", rut="20000003-K")
        db.add(other)
        db.commit()
        user = create_member(db, other, "norte@obras.cl", allowed_sections=["invoices:*"])
        response = client.delete(f"/payments/{payment['id']}", headers=headers_for(user, other))
        assert response.status_code == 404

        detail = get_invoice(client, auth_headers, invoice["id"])
        assert [p["id"] for p in detail["payments"]] == [payment["id"]]
        assert detail["paymentStatus"] == "PARTIAL"


# ===== NOTAS DE CRÉDITO / DÉBITO =====

class TestNotes:

    def test_credit_note_cancels_and_restores(self, client, auth_headers, create_invoice):
        invoice = create_invoice().json()
        note = create_invoice(number="NC-10", type="NOTA_CREDITO", relatedInvoiceId=invoice["id"])
        assert note.status_code == 201
        assert note.json()["relatedInvoiceId"] == invoice["id"]
        assert get_invoice(client, auth_headers, invoice["id"])["status"] == "CANCELLED"

        assert client.delete(f"/invoices/{note.json()['id']}", headers=auth_headers).status_code == 200
        assert get_invoice(client, auth_headers, invoice["id"])["status"] == "PENDING"

    def test_credit_note_without_annul(self, client, auth_headers, create_invoice):
        invoice = create_invoice().json()
        create_invoice(number="NC-11", type="NOTA_CREDITO", relatedInvoiceId=invoice["id"], annulInvoice=False)
        assert get_invoice(client, auth_headers, invoice["id"])["status"] == "ISSUED"

    def test_debit_note_does_not_cancel(self, client, auth_headers, create_invoice):
        invoice = create_invoice().json()
        assert create_invoice(number="ND-1", type="NOTA_DEBITO", relatedInvoiceId=invoice["id"]).status_code == 201
        assert get_invoice(client, auth_headers, invoice["id"])["status"] == "ISSUED"

    def test_only_notes_reference_invoices(self, create_invoice):
        invoice = create_invoice().json()
        response = create_invoice(number="1002", relatedInvoiceId=invoice["id"])
        assert response.status_code == 400

    def test_note_cannot_reference_note(self, create_invoice):
        invoice = create_invoice().json()
        note = create_invoice(number="ND-2", type="NOTA_DEBITO", relatedInvoiceId=invoice["id"]).json()
        response = create_invoice(number="NC-12", type="NOTA_CREDITO", relatedInvoiceId=note["id"])
        assert response.status_code == 400

    def test_unknown_related_invoice(self, create_invoice):
        response = create_invoice(number="NC-13", type="NOTA_CREDITO", relatedInvoiceId=str(uuid4()))
        assert response.status_code == 404

    def test_failed_note_leaves_invoice_untouched(self, client, auth_headers, create_invoice):
        invoice = create_invoice().json()
        create_invoice(number="NC-14", type="NOTA_CREDITO", relatedInvoiceId=invoice["id"], annulInvoice=False)
        # Folio repetido: la transacción completa se revierte
        response = create_invoice(number="NC-14", type="NOTA_CREDITO", relatedInvoiceId=invoice["id"])
        assert response.status_code == 409
        assert get_invoice(client, auth_headers, invoice["id"])["status"] == "ISSUED"

    def test_deleting_invoice_detaches_notes(self, client, auth_headers, create_invoice):
        invoice = create_invoice().json()
        note = create_invoice(number="ND-3", type="NOTA_DEBITO", relatedInvoiceId=invoice["id"]).json()
        assert client.delete(f"/invoices/{invoice['id']}", headers=auth_headers).status_code == 200
        assert get_invoice(client, auth_headers, note["id"])["relatedInvoiceId"] is None

    def test_deleting_note_keeps_reopened_invoice(self, client, auth_headers, create_invoice):
        invoice = create_invoice().json()
        note = create_invoice(number="NC-15", type="NOTA_CREDITO", relatedInvoiceId=invoice["id"]).json()
        response = client.put(f"/invoices/{invoice['id']}", headers=auth_headers, json={"status": "ISSUED"})
        assert response.status_code == 200

        assert client.delete(f"/invoices/{note['id']}", headers=auth_headers).status_code == 200
        assert get_invoice(client, auth_headers, invoice["id"])["status"] == "ISSUED"

    def test_failed_note_delete_rolls_back(self, client, auth_headers, create_invoice, monkeypatch):
        invoice = create_invoice().json()
        note = create_invoice(number="NC-16", type="NOTA_CREDITO", relatedInvoiceId=invoice["id"]).json()

        def broken_delete(self, instance):
            raise RuntimeError("disco lleno")

        monkeypatch.setattr(Session, "delete", broken_delete)
        response = client.delete(f"/invoices/{note['id']}", headers=auth_headers)
        assert response.status_code == 500
        monkeypatch.undo()

        assert get_invoice(client, auth_headers, invoice["id"])["status"] == "CANCELLED"
        assert client.get(f"/invoices/{note['id']}", headers=auth_headers).status_code == 200

    def test_debit_note_changed_to_credit_note(self, client, auth_headers, create_invoice):
        invoice = create_invoice().json()
        note = create_invoice(number="N-1", type="NOTA_DEBITO", relatedInvoiceId=invoice["id"]).json()

        response = client.put(f"/invoices/{note['id']}", headers=auth_headers, json={"type": "NOTA_CREDITO"})
        assert response.status_code == 200
        assert get_invoice(client, auth_headers, invoice["id"])["status"] == "CANCELLED"

        response = client.put(f"/invoices/{note['id']}", headers=auth_headers, json={"type": "NOTA_DEBITO"})
        assert response.status_code == 200
        assert get_invoice(client, auth_headers, invoice["id"])["status"] == "PENDING"

    def test_credit_note_moved_to_other_invoice(self, client, auth_headers, create_invoice):
        first = create_invoice().json()
        second = create_invoice(number="1002").json()
        note = create_invoice(number="NC-17", type="NOTA_CREDITO", relatedInvoiceId=first["id"]).json()

        response = client.put(f"/invoices/{note['id']}", headers=auth_headers, json={"relatedInvoiceId": second["id"]})
        assert response.status_code == 200
        assert get_invoice(client, auth_headers, first["id"])["status"] == "PENDING"
        assert get_invoice(client, auth_headers, second["id"])["status"] == "CANCELLED"


# ===== LISTADO Y AISLAMIENTO =====

class TestListing:

    def test_filters(self, client, auth_headers, create_invoice, customer):
        paid = create_invoice(number="1", clientId=customer["id"], date="2024-01-10").json()
        pay(client, auth_headers, paid["id"], 100000)
        create_invoice(number="2", date="2024-02-10", notes="Retención garantía")
        create_invoice(number="3", date="2024-03-10")

        all_numbers = [i["number"] for i in client.get("/invoices/", headers=auth_headers).json()]
        assert all_numbers == ["3", "2", "1"]

        def numbers(**params):
            return [i["number"] for i in client.get("/invoices/", headers=auth_headers, params=params).json()]

        assert numbers(paymentStatus="PAID") == ["1"]
        assert numbers(clientId=customer["id"]) == ["1"]
        assert numbers(dateFrom="2024-02-01", dateTo="2024-02-28") == ["2"]
        assert numbers(search="garantía") == ["2"]
        assert numbers(limit=1, offset=1) == ["2"]

    def test_other_company_cannot_see_invoice(self, client, db, create_invoice):
        invoice = create_invoice().json()
        other = Company(name="Ajena", rut="20000003-K")
        db.add(other)
        db.commit()
        user = create_member(db, other, "ajeno@obras.cl", allowed_sections=["invoices:*"])
        response = client.get(f"/invoices/{invoice['id']}", headers=headers_for(user, other))
        assert response.status_code == 404

    def test_permission_required(self, client, db, company, create_invoice):
        user = create_member(db, company, "lector@obras.cl", allowed_sections=["invoices:read"])
        headers = headers_for(user, company)
        assert client.get("/invoices/", headers=headers).status_code == 200
        response = client.post("/invoices/", headers=headers, json={"number": "9", "total": 1})
        assert response.status_code == 403
