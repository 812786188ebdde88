from pydantic import Field, field_validator, model_validator
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, List, Tuple
from uuid import UUID
import datetime

from app.core.config import settings
from app.common.schemas import CamelModel, Money
from app.modules.invoices.models import InvoiceType, InvoiceStatus, PaymentStatus, PaymentMethod


# (alias corto, nombre canónico, snake_case)
AMOUNT_ALIASES = (
    ("net", "netAmount", "net_amount"),
    ("iva", "taxAmount", "tax_amount"),
    ("total", "totalAmount", "total_amount"),
)

# Referencias que el frontend puede enviar como "" o "none"
OPTIONAL_ID_KEYS = (
    ("clientId", "client_id"),
    ("projectId", "project_id"),
    ("costCenterId", "cost_center_id"),
    ("relatedInvoiceId", "related_invoice_id"),
)


def _to_decimal(value) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f"Monto inválido: {value}")


def normalize_invoice_input(data):
    """
    Unifica los alias de montos (net/netAmount, iva/taxAmount, total/totalAmount)
    y limpia referencias vacías. Dos alias con valores distintos es un error.
    """
    if not isinstance(data, dict):
        return data

    data = dict(data)
    for short, canonical, snake in AMOUNT_ALIASES:
        present = [(key, data.pop(key)) for key in (short, canonical, snake) if key in data]
        values = [(key, value) for key, value in present if value is not None]
        if not values:
            continue
        if len({_to_decimal(value) for _, value in values}) > 1:
            keys = " y ".join(key for key, _ in values)
            raise ValueError(f"Montos en conflicto: {keys} tienen valores distintos")
        data[canonical] = values[0][1]

    for camel, snake in OPTIONAL_ID_KEYS:
        for key in (camel, snake):
            value = data.get(key)
            if isinstance(value, str) and value.strip().lower() in ("", "none"):
                data[key] = None

    return data


def round_clp(value: Decimal) -> Decimal:
    return value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def resolve_amounts(
    net: Optional[Decimal],
    tax: Optional[Decimal],
    total: Optional[Decimal],
    items_net: Optional[Decimal] = None,
) -> Tuple[Optional[Decimal], Optional[Decimal], Optional[Decimal]]:
    """
    Completa neto, IVA y total a partir de lo que venga informado.

    - Sin montos y con items: neto = suma de items, IVA = neto * IVA_RATE.
    - Neto + IVA: total = neto + IVA.
    - Solo total: se desglosa el IVA incluido.
    """
    rate = Decimal(str(settings.IVA_RATE))

    if net is None and tax is None and total is None and items_net is not None:
        net = items_net

    if net is not None and tax is None and total is None:
        tax = round_clp(net * rate)
    if net is not None and tax is not None and total is None:
        total = net + tax
    elif total is not None:
        if net is None and tax is None:
            net = round_clp(total / (1 + rate))
            tax = total - net
        elif net is None:
            net = total - tax
        elif tax is None:
            tax = total - net

    return net, tax, total


# Items
class InvoiceItemCreate(CamelModel):
    description: str = Field(..., min_length=1, max_length=500)
    quantity: Decimal = Field(..., gt=0, description="Cantidad debe ser mayor a 0")
    unit_price: Decimal = Field(..., ge=0, description="Precio unitario neto")
    total: Optional[Decimal] = Field(None, ge=0)

    @model_validator(mode="after")
    def compute_total(self):
        if self.total is None:
            self.total = round_clp(self.quantity * self.unit_price)
        return self


class InvoiceItemOut(CamelModel):
    id: UUID
    position: int
    description: str
    quantity: Money
    unit_price: Money
    total: Money


# Invoices
class InvoiceCreate(CamelModel):
    number: str = Field(..., min_length=1, max_length=50, description="Folio")
    type: InvoiceType = InvoiceType.VENTA
    status: InvoiceStatus = InvoiceStatus.ISSUED
    date: datetime.date = Field(default_factory=datetime.date.today)
    due_date: Optional[datetime.date] = None

    net_amount: Optional[Decimal] = Field(None, ge=0)
    tax_amount: Optional[Decimal] = Field(None, ge=0)
    total_amount: Optional[Decimal] = Field(None, ge=0)

    client_id: Optional[UUID] = None
    project_id: Optional[UUID] = None
    cost_center_id: Optional[UUID] = None
    related_invoice_id: Optional[UUID] = None
    annul_invoice: bool = Field(True, description="Una nota de crédito anula la factura referenciada")

    purchase_order_number: Optional[str] = Field(None, max_length=50)
    dispatch_guide_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None
    items: List[InvoiceItemCreate] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def normalize_aliases(cls, data):
        return normalize_invoice_input(data)

    @field_validator("number")
    @classmethod
    def strip_number(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("El folio es obligatorio")
        return v

    @model_validator(mode="after")
    def complete_amounts(self):
        items_net = sum((item.total for item in self.items), Decimal("0")) if self.items else None
        net, tax, total = resolve_amounts(self.net_amount, self.tax_amount, self.total_amount, items_net)
        if total is None:
            raise ValueError("Debe informar el total o los montos/items para calcularlo")
        self.net_amount, self.tax_amount, self.total_amount = net, tax, total

        if self.due_date and self.due_date < self.date:
            raise ValueError("La fecha de vencimiento no puede ser anterior a la fecha de emisión")
        return self


class InvoiceUpdate(CamelModel):
    """Actualización parcial: solo se modifican los campos enviados."""
    number: Optional[str] = Field(None, min_length=1, max_length=50)
    type: Optional[InvoiceType] = None
    status: Optional[InvoiceStatus] = None
    date: Optional[datetime.date] = None
    due_date: Optional[datetime.date] = None

    net_amount: Optional[Decimal] = Field(None, ge=0)
    tax_amount: Optional[Decimal] = Field(None, ge=0)
    total_amount: Optional[Decimal] = Field(None, ge=0)

    client_id: Optional[UUID] = None
    project_id: Optional[UUID] = None
    cost_center_id: Optional[UUID] = None
    related_invoice_id: Optional[UUID] = None

    purchase_order_number: Optional[str] = Field(None, max_length=50)
    dispatch_guide_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None
    items: Optional[List[InvoiceItemCreate]] = None

    @model_validator(mode="before")
    @classmethod
    def normalize_aliases(cls, data):
        return normalize_invoice_input(data)

    @model_validator(mode="after")
    def complete_amounts(self):
        amounts_sent = {"net_amount", "tax_amount", "total_amount"} & self.model_fields_set
        if not amounts_sent and not self.items:
            return self

        items_net = sum((item.total for item in self.items), Decimal("0")) if self.items else None
        net, tax, total = resolve_amounts(self.net_amount, self.tax_amount, self.total_amount, items_net)
        if net is not None:
            self.net_amount = net
        if tax is not None:
            self.tax_amount = tax
        if total is not None:
            self.total_amount = total
        return self


class PaymentOut(CamelModel):
    id: UUID
    invoice_id: UUID
    amount: Money
    date: datetime.date
    method: PaymentMethod
    reference: Optional[str] = None
    comment: Optional[str] = None
    created_at: Optional[datetime.datetime] = None


class InvoiceOut(CamelModel):
    id: UUID
    number: str
    type: InvoiceType
    status: InvoiceStatus
    emission_type: str
    date: datetime.date
    due_date: Optional[datetime.date] = None

    net_amount: Money
    tax_amount: Money
    total_amount: Money
    payment_status: PaymentStatus
    is_paid: bool

    client_id: Optional[UUID] = None
    client_name: Optional[str] = None
    project_id: Optional[UUID] = None
    cost_center_id: Optional[UUID] = None
    related_invoice_id: Optional[UUID] = None
    purchase_order_number: Optional[str] = None
    dispatch_guide_number: Optional[str] = None
    notes: Optional[str] = None
    items: List[InvoiceItemOut] = []
    created_at: Optional[datetime.datetime] = None


class InvoiceDetail(InvoiceOut):
    payments: List[PaymentOut] = []
    paid_amount: Money
    balance_due: Money


# Payments
class PaymentCreate(CamelModel):
    amount: Decimal = Field(..., gt=0, description="Monto del pago (mayor a 0)")
    date: datetime.date = Field(default_factory=datetime.date.today)
    method: PaymentMethod = PaymentMethod.TRANSFER
    reference: Optional[str] = Field(None, max_length=100)
    comment: Optional[str] = None


class PaymentStateUpdate(CamelModel):
    """Marcar una factura como pagada / no pagada desde la tabla de facturas."""
    is_paid: bool
    date: Optional[datetime.date] = None
    method: Optional[PaymentMethod] = None
    reference: Optional[str] = Field(None, max_length=100)


class InvoiceFilters(CamelModel):
    type: Optional[InvoiceType] = None
    status: Optional[InvoiceStatus] = None
    payment_status: Optional[PaymentStatus] = None
    client_id: Optional[UUID] = None
    project_id: Optional[UUID] = None
    cost_center_id: Optional[UUID] = None
    date_from: Optional[datetime.date] = None
    date_to: Optional[datetime.date] = None
    search: Optional[str] = None
