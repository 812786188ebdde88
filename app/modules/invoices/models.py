from app.database.database import Base
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Numeric, Enum, Date, Text, Index, text
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import UUID
import datetime
from uuid import uuid4
from app.common.mixins import TenantMixin, TimestampMixin
import enum


class InvoiceType(str, enum.Enum):
    VENTA = "VENTA"                  # Factura de venta
    COMPRA = "COMPRA"                # Factura de proveedor
    NOTA_CREDITO = "NOTA_CREDITO"
    NOTA_DEBITO = "NOTA_DEBITO"


class InvoiceStatus(str, enum.Enum):
    ISSUED = "ISSUED"
    PENDING = "PENDING"
    CANCELLED = "CANCELLED"          # Anulada (ej. por nota de crédito)
    DRAFT = "DRAFT"


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"


class PaymentMethod(str, enum.Enum):
    TRANSFER = "TRANSFER"
    CASH = "CASH"
    CHECK = "CHECK"
    CARD = "CARD"
    OTHER = "OTHER"


class Invoice(Base, TenantMixin, TimestampMixin):
    __tablename__ = "invoices"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)

    # Folio
    number = Column(String(50), nullable=False)
    type = Column(Enum(InvoiceType, name="invoice_type"), nullable=False, default=InvoiceType.VENTA)
    status = Column(Enum(InvoiceStatus, name="invoice_status"), nullable=False, default=InvoiceStatus.ISSUED)
    emission_type = Column(String(20), nullable=False, default="MANUAL")

    # Dates
    date = Column(Date, nullable=False, default=datetime.date.today)
    due_date = Column(Date, nullable=True)

    # Totals (CLP)
    net_amount = Column(Numeric(15, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(15, 2), nullable=False, default=0)
    total_amount = Column(Numeric(15, 2), nullable=False, default=0)

    # Derived from payments, never written directly by the API
    payment_status = Column(Enum(PaymentStatus, name="payment_status"), nullable=False, default=PaymentStatus.PENDING)
    is_paid = Column(Boolean, nullable=False, default=False)

    # References
    client_id = Column(UUID(as_uuid=True), ForeignKey("clients.id", ondelete="SET NULL"), nullable=True, index=True)
    project_id = Column(UUID(as_uuid=True), ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True)
    cost_center_id = Column(UUID(as_uuid=True), ForeignKey("cost_centers.id", ondelete="SET NULL"), nullable=True, index=True)
    related_invoice_id = Column(UUID(as_uuid=True), ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True)
    purchase_order_number = Column(String(50), nullable=True)
    dispatch_guide_number = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)

    # Relationships
    client = relationship("Client")
    related_invoice = relationship("Invoice", remote_side=[id])
    items = relationship(
        "InvoiceItem", back_populates="invoice",
        cascade="all, delete-orphan", order_by="InvoiceItem.position"
    )
    payments = relationship(
        "Payment", back_populates="invoice",
        cascade="all, delete-orphan", order_by="Payment.date"
    )

    # Folio único por (empresa, número, tipo); en COMPRA por proveedor
    __table_args__ = (
        Index(
            "uq_invoice_tenant_number_type", "tenant_id", "number", "type",
            unique=True,
            postgresql_where=text("type <> 'COMPRA'"),
            sqlite_where=text("type <> 'COMPRA'"),
        ),
        Index(
            "uq_invoice_tenant_supplier_number", "tenant_id", "client_id", "number",
            unique=True,
            postgresql_where=text("type = 'COMPRA'"),
            sqlite_where=text("type = 'COMPRA'"),
        ),
    )

    @property
    def client_name(self):
        return self.client.name if self.client else None

    @property
    def paid_amount(self):
        """Calcular monto pagado"""
        return sum((p.amount for p in self.payments), 0)

    @property
    def balance_due(self):
        """Calcular saldo pendiente"""
        return self.total_amount - self.paid_amount


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    invoice_id = Column(UUID(as_uuid=True), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    description = Column(String(500), nullable=False)
    quantity = Column(Numeric(12, 3), nullable=False)
    unit_price = Column(Numeric(15, 2), nullable=False)
    total = Column(Numeric(15, 2), nullable=False)  # quantity * unit_price

    invoice = relationship("Invoice", back_populates="items")


class Payment(Base, TenantMixin, TimestampMixin):
    __tablename__ = "payments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    invoice_id = Column(UUID(as_uuid=True), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)

    amount = Column(Numeric(15, 2), nullable=False)
    date = Column(Date, nullable=False, default=datetime.date.today)
    method = Column(Enum(PaymentMethod, name="payment_method"), nullable=False, default=PaymentMethod.TRANSFER)
    reference = Column(String(100), nullable=True)
    comment = Column(Text, nullable=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    invoice = relationship("Invoice", back_populates="payments")
