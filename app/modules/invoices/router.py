from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from datetime import date

from app.core.config import settings
from app.database.database import get_db
from app.common.schemas import SuccessResponse
from app.modules.auth.dependencies import AuthDependencies
from app.modules.auth.schemas import AuthContext
from app.modules.invoices.models import InvoiceType, InvoiceStatus, PaymentStatus
from app.modules.invoices.service import InvoiceService
from app.modules.invoices.schemas import (
    InvoiceCreate, InvoiceUpdate, InvoiceOut, InvoiceDetail, InvoiceFilters,
    PaymentCreate, PaymentOut, PaymentStateUpdate
)

# Router principal del módulo de facturas
router = APIRouter(prefix="/invoices", tags=["Invoices"])
# Pagos por ID (DELETE /payments/{id})
payments_router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/", response_model=InvoiceOut, status_code=status.HTTP_201_CREATED)
def create_invoice(
    invoice_data: InvoiceCreate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(AuthDependencies.require_permission("invoices", "create"))
):
    """
    Crear un documento (VENTA, COMPRA, NOTA_CREDITO, NOTA_DEBITO).

    - Acepta `net`/`netAmount`, `iva`/`taxAmount`, `total`/`totalAmount`.
    - Si no se informan montos se calculan desde los items (IVA 19%).
    - Una nota de crédito con `relatedInvoiceId` anula esa factura,
      salvo que `annulInvoice` sea false.
    """
    service = InvoiceService(db)
    return service.create_invoice(invoice_data, auth_context.tenant_id)


@router.get("/", response_model=List[InvoiceOut])
def list_invoices(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    type: Optional[InvoiceType] = Query(None, description="Tipo de documento"),
    status: Optional[InvoiceStatus] = Query(None, description="Estado del documento"),
    payment_status: Optional[PaymentStatus] = Query(None, alias="paymentStatus"),
    client_id: Optional[UUID] = Query(None, alias="clientId"),
    project_id: Optional[UUID] = Query(None, alias="projectId"),
    cost_center_id: Optional[UUID] = Query(None, alias="costCenterId"),
    date_from: Optional[date] = Query(None, alias="dateFrom", description="Fecha inicial (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, alias="dateTo", description="Fecha final (YYYY-MM-DD)"),
    search: Optional[str] = Query(None, description="Buscar por folio o notas"),
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(AuthDependencies.require_permission("invoices", "read"))
):
    """
    Listar documentos con filtros, ordenados por fecha descendente.
    """
    filters = InvoiceFilters(
        type=type,
        status=status,
        payment_status=payment_status,
        client_id=client_id,
        project_id=project_id,
        cost_center_id=cost_center_id,
        date_from=date_from,
        date_to=date_to,
        search=search
    )
    return InvoiceService(db).get_invoices(auth_context.tenant_id, filters, limit, offset)


@router.get("/{invoice_id}", response_model=InvoiceDetail)
def get_invoice(
    invoice_id: UUID,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(AuthDependencies.require_permission("invoices", "read"))
):
    """Detalle de la factura con items y pagos"""
    return InvoiceService(db).get_invoice_by_id(invoice_id, auth_context.tenant_id)


@router.put("/{invoice_id}", response_model=InvoiceOut)
def update_invoice(
    invoice_id: UUID,
    invoice_update: InvoiceUpdate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(AuthDependencies.require_permission("invoices", "update"))
):
    """
    Actualizar una factura. Si cambia el folio se vuelve a validar su unicidad;
    si cambia el total se recalcula el estado de pago.
    """
    return InvoiceService(db).update_invoice(invoice_id, invoice_update, auth_context.tenant_id)


@router.delete("/{invoice_id}", response_model=SuccessResponse)
def delete_invoice(
    invoice_id: UUID,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(AuthDependencies.require_permission("invoices", "delete"))
):
    """
    Eliminar una factura (items y pagos incluidos).
    Si es una nota de crédito, la factura anulada vuelve a PENDING.
    """
    InvoiceService(db).delete_invoice(invoice_id, auth_context.tenant_id)
    return SuccessResponse()


@router.get("/{invoice_id}/payments", response_model=List[PaymentOut])
def list_invoice_payments(
    invoice_id: UUID,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(AuthDependencies.require_permission("invoices", "read"))
):
    return InvoiceService(db).get_invoice_payments(invoice_id, auth_context.tenant_id)


@router.post("/{invoice_id}/payments", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
def add_payment(
    invoice_id: UUID,
    payment_data: PaymentCreate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(AuthDependencies.require_permission("invoices", "update"))
):
    """
    Registrar un pago (parcial o total). El estado de pago de la factura
    se recalcula con la suma de todos sus pagos.
    """
    return InvoiceService(db).add_payment(
        invoice_id, payment_data, auth_context.tenant_id, auth_context.user_id
    )


@router.patch("/{invoice_id}/payment", response_model=InvoiceOut)
def set_payment_state(
    invoice_id: UUID,
    state: PaymentStateUpdate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(AuthDependencies.require_permission("invoices", "update"))
):
    """Marcar como pagada (paga el saldo) o como no pagada (elimina los pagos)"""
    return InvoiceService(db).set_payment_state(
        invoice_id, state, auth_context.tenant_id, auth_context.user_id
    )


@payments_router.delete("/{payment_id}", response_model=SuccessResponse)
def delete_payment(
    payment_id: UUID,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(AuthDependencies.require_permission("invoices", "update"))
):
    InvoiceService(db).delete_payment(payment_id, auth_context.tenant_id)
    return SuccessResponse()
