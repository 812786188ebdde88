from sqlalchemy.orm import Session, selectinload, joinedload
from sqlalchemy import func, or_, desc
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
import logging

from app.common.exceptions import ConflictError, NotFoundError, TransactionFailure, ValidationError
from app.modules.invoices.models import (
    Invoice, InvoiceItem, Payment,
    InvoiceType, InvoiceStatus, PaymentStatus
)
from app.modules.invoices.schemas import (
    InvoiceCreate, InvoiceUpdate, InvoiceFilters, PaymentCreate, PaymentStateUpdate, InvoiceItemCreate
)
from app.modules.clients.models import Client
from app.modules.projects.models import Project
from app.modules.cost_centers.models import CostCenter

logger = logging.getLogger(__name__)

NOTE_TYPES = (InvoiceType.NOTA_CREDITO, InvoiceType.NOTA_DEBITO)


def derive_payment_status(total_paid: Decimal, total: Decimal) -> PaymentStatus:
    """
    Estado de pago derivado de la suma de pagos.
    PAID se evalúa primero: un documento con total 0 queda pagado.
    """
    if total_paid >= total:
        return PaymentStatus.PAID
    if total_paid > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.PENDING


class InvoiceService:
    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Lecturas
    # ------------------------------------------------------------------

    def _get_invoice(self, invoice_id: UUID, tenant_id: UUID, lock: bool = False) -> Invoice:
        query = self.db.query(Invoice).filter(
            Invoice.id == invoice_id,
            Invoice.tenant_id == tenant_id
        )
        if lock:
            query = query.with_for_update()
        invoice = query.first()
        if not invoice:
            raise NotFoundError("Factura no encontrada")
        return invoice

    def get_invoice_by_id(self, invoice_id: UUID, tenant_id: UUID) -> Invoice:
        """Obtener factura por ID con items y pagos"""
        invoice = self.db.query(Invoice).options(
            joinedload(Invoice.client),
            selectinload(Invoice.items),
            selectinload(Invoice.payments)
        ).filter(
            Invoice.id == invoice_id,
            Invoice.tenant_id == tenant_id
        ).first()

        if not invoice:
            raise NotFoundError("Factura no encontrada")
        return invoice

    def get_invoices(self, tenant_id: UUID, filters: InvoiceFilters, limit: int = 100, offset: int = 0) -> List[Invoice]:
        """Obtener lista de facturas con filtros"""
        query = self.db.query(Invoice).options(
            joinedload(Invoice.client),
            selectinload(Invoice.items)
        ).filter(Invoice.tenant_id == tenant_id)

        if filters.type:
            query = query.filter(Invoice.type == filters.type)
        if filters.status:
            query = query.filter(Invoice.status == filters.status)
        if filters.payment_status:
            query = query.filter(Invoice.payment_status == filters.payment_status)
        if filters.client_id:
            query = query.filter(Invoice.client_id == filters.client_id)
        if filters.project_id:
            query = query.filter(Invoice.project_id == filters.project_id)
        if filters.cost_center_id:
            query = query.filter(Invoice.cost_center_id == filters.cost_center_id)
        if filters.date_from:
            query = query.filter(Invoice.date >= filters.date_from)
        if filters.date_to:
            query = query.filter(Invoice.date <= filters.date_to)
        if filters.search:
            query = query.filter(or_(
                Invoice.number.ilike(f"%{filters.search}%"),
                Invoice.notes.ilike(f"%{filters.search}%")
            ))

        return query.order_by(desc(Invoice.date), desc(Invoice.created_at)).offset(offset).limit(limit).all()

    # ------------------------------------------------------------------
    # Validaciones
    # ------------------------------------------------------------------

    def check_folio(
        self,
        number: str,
        invoice_type: InvoiceType,
        tenant_id: UUID,
        client_id: Optional[UUID] = None,
        exclude_id: Optional[UUID] = None
    ) -> None:
        """
        Un folio es único por (número, tipo, empresa); en COMPRA además por proveedor.
        Los folios de documentos anulados tampoco se reutilizan.
        """
        if invoice_type == InvoiceType.COMPRA and not client_id:
            raise ValidationError("Las facturas de compra requieren un proveedor (clientId)")

        query = self.db.query(Invoice.id).filter(
            Invoice.tenant_id == tenant_id,
            Invoice.number == number,
            Invoice.type == invoice_type
        )
        if invoice_type == InvoiceType.COMPRA:
            query = query.filter(Invoice.client_id == client_id)
        if exclude_id:
            query = query.filter(Invoice.id != exclude_id)

        if query.first():
            if invoice_type == InvoiceType.COMPRA:
                raise ConflictError(
                    f"Ya existe un documento {invoice_type.value} con folio {number} para este proveedor"
                )
            raise ConflictError(f"Ya existe un documento {invoice_type.value} con folio {number}")

    def _check_references(self, tenant_id: UUID, client_id=None, project_id=None, cost_center_id=None) -> None:
        """Las referencias deben pertenecer a la misma empresa"""
        checks = (
            (client_id, Client, "Cliente no encontrado"),
            (project_id, Project, "Proyecto no encontrado"),
            (cost_center_id, CostCenter, "Centro de costo no encontrado"),
        )
        for ref_id, model, message in checks:
            if ref_id is None:
                continue
            exists = self.db.query(model.id).filter(
                model.id == ref_id,
                model.tenant_id == tenant_id
            ).first()
            if not exists:
                raise NotFoundError(message)

    def _get_related_invoice(
        self,
        related_invoice_id: UUID,
        invoice_type: InvoiceType,
        tenant_id: UUID,
        invoice_id: Optional[UUID] = None
    ) -> Invoice:
        """Validar la factura referenciada por una nota de crédito/débito"""
        if invoice_type not in NOTE_TYPES:
            raise ValidationError("Solo las notas de crédito o débito pueden referenciar otra factura")
        if invoice_id and related_invoice_id == invoice_id:
            raise ValidationError("Un documento no puede referenciarse a sí mismo")

        related = self.db.query(Invoice).filter(
            Invoice.id == related_invoice_id,
            Invoice.tenant_id == tenant_id
        ).with_for_update().first()
        if not related:
            raise NotFoundError("Factura referenciada no encontrada")
        if related.type in NOTE_TYPES:
            raise ValidationError("Una nota no puede referenciar a otra nota")
        return related

    def _sync_credit_note_annulment(
        self,
        invoice: Invoice,
        old_type: InvoiceType,
        old_related_id: Optional[UUID],
        related: Optional[Invoice],
        tenant_id: UUID
    ) -> None:
        """
        La anulación sigue a la nota de crédito cuando cambia su tipo o su referencia:
        la factura que deja de estar referenciada vuelve a PENDING si seguía
        CANCELLED, y la nueva referencia queda CANCELLED.
        """
        is_credit_note = invoice.type == InvoiceType.NOTA_CREDITO

        if old_type == InvoiceType.NOTA_CREDITO and old_related_id:
            previous = self.db.query(Invoice).filter(
                Invoice.id == old_related_id,
                Invoice.tenant_id == tenant_id
            ).with_for_update().first()
            still_annulled = is_credit_note and previous is related
            if previous is not None and previous.status == InvoiceStatus.CANCELLED and not still_annulled:
                logger.info(f"Restoring invoice {previous.number} after updating credit note {invoice.number}")
                previous.status = InvoiceStatus.PENDING

        if is_credit_note and related is not None and related.status != InvoiceStatus.CANCELLED:
            logger.info(f"Credit note {invoice.number} cancels invoice {related.number}")
            related.status = InvoiceStatus.CANCELLED

    def _recalculate_payment_status(self, invoice: Invoice) -> None:
        """Recalcula paymentStatus / isPaid desde la suma de pagos en la base."""
        self.db.flush()
        total_paid = self.db.query(
            func.coalesce(func.sum(Payment.amount), 0)
        ).filter(Payment.invoice_id == invoice.id).scalar()

        new_status = derive_payment_status(Decimal(str(total_paid or 0)), Decimal(str(invoice.total_amount)))
        invoice.payment_status = new_status
        invoice.is_paid = new_status == PaymentStatus.PAID

    @staticmethod
    def _build_items(items: List[InvoiceItemCreate]) -> List[InvoiceItem]:
        return [
            InvoiceItem(
                position=position,
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total=item.total
            )
            for position, item in enumerate(items)
        ]

    # ------------------------------------------------------------------
    # Facturas
    # ------------------------------------------------------------------

    def create_invoice(self, invoice_data: InvoiceCreate, tenant_id: UUID) -> Invoice:
        """
        Crear documento tributario.

        Una NOTA_CREDITO con factura referenciada la anula en la misma
        transacción, salvo que annulInvoice sea false.
        """
        try:
            self.check_folio(invoice_data.number, invoice_data.type, tenant_id, invoice_data.client_id)
            self._check_references(
                tenant_id, invoice_data.client_id, invoice_data.project_id, invoice_data.cost_center_id
            )

            related = None
            if invoice_data.related_invoice_id:
                related = self._get_related_invoice(invoice_data.related_invoice_id, invoice_data.type, tenant_id)

            initial_status = derive_payment_status(Decimal("0"), invoice_data.total_amount)
            invoice = Invoice(
                tenant_id=tenant_id,
                number=invoice_data.number,
                type=invoice_data.type,
                status=invoice_data.status,
                date=invoice_data.date,
                due_date=invoice_data.due_date,
                net_amount=invoice_data.net_amount,
                tax_amount=invoice_data.tax_amount,
                total_amount=invoice_data.total_amount,
                payment_status=initial_status,
                is_paid=initial_status == PaymentStatus.PAID,
                client_id=invoice_data.client_id,
                project_id=invoice_data.project_id,
                cost_center_id=invoice_data.cost_center_id,
                related_invoice_id=invoice_data.related_invoice_id,
                purchase_order_number=invoice_data.purchase_order_number,
                dispatch_guide_number=invoice_data.dispatch_guide_number,
                notes=invoice_data.notes,
                items=self._build_items(invoice_data.items)
            )
            self.db.add(invoice)

            if related is not None and invoice_data.type == InvoiceType.NOTA_CREDITO and invoice_data.annul_invoice:
                logger.info(f"Credit note {invoice_data.number} cancels invoice {related.number}")
                related.status = InvoiceStatus.CANCELLED

            self.db.commit()
            self.db.refresh(invoice)
            return invoice

        except HTTPException:
            self.db.rollback()
            raise
        except IntegrityError:
            # Otra transacción tomó el folio entre la validación y el commit
            self.db.rollback()
            raise ConflictError(f"Ya existe un documento {invoice_data.type.value} con folio {invoice_data.number}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating invoice {invoice_data.number}: {e}", exc_info=True)
            raise TransactionFailure("Error creando la factura")

    def update_invoice(self, invoice_id: UUID, invoice_update: InvoiceUpdate, tenant_id: UUID) -> Invoice:
        """Actualizar campos editables; re-valida folio y recalcula el estado de pago si cambia el total"""
        try:
            invoice = self._get_invoice(invoice_id, tenant_id, lock=True)
            data = invoice_update.model_dump(exclude_unset=True, exclude={"items"})

            number = data.get("number", invoice.number)
            invoice_type = data.get("type") or invoice.type
            client_id = data.get("client_id", invoice.client_id)
            if (number, invoice_type, client_id) != (invoice.number, invoice.type, invoice.client_id):
                self.check_folio(number, invoice_type, tenant_id, client_id, exclude_id=invoice.id)

            self._check_references(
                tenant_id, data.get("client_id"), data.get("project_id"), data.get("cost_center_id")
            )

            related = None
            related_id = data.get("related_invoice_id", invoice.related_invoice_id)
            if related_id and ("related_invoice_id" in data or "type" in data):
                related = self._get_related_invoice(related_id, invoice_type, tenant_id, invoice_id=invoice.id)

            old_type, old_related_id = invoice.type, invoice.related_invoice_id
            old_total = invoice.total_amount
            for field, value in data.items():
                if field in ("number", "type", "status", "date", "net_amount", "tax_amount", "total_amount") and value is None:
                    continue
                setattr(invoice, field, value)

            if (invoice.type, invoice.related_invoice_id) != (old_type, old_related_id):
                self._sync_credit_note_annulment(invoice, old_type, old_related_id, related, tenant_id)

            if invoice_update.items is not None:
                invoice.items.clear()
                self.db.flush()
                invoice.items.extend(self._build_items(invoice_update.items))

            if Decimal(str(invoice.total_amount)) != Decimal(str(old_total)):
                self._recalculate_payment_status(invoice)

            self.db.commit()
            self.db.refresh(invoice)
            return invoice

        except HTTPException:
            self.db.rollback()
            raise
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("El folio ya está registrado para este tipo de documento")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating invoice {invoice_id}: {e}", exc_info=True)
            raise TransactionFailure("Error actualizando la factura")

    def delete_invoice(self, invoice_id: UUID, tenant_id: UUID) -> None:
        """
        Eliminar factura con items y pagos.
        Si es una nota de crédito y la factura referenciada sigue CANCELLED,
        esa factura vuelve a PENDING.
        """
        try:
            invoice = self._get_invoice(invoice_id, tenant_id, lock=True)

            if invoice.type == InvoiceType.NOTA_CREDITO and invoice.related_invoice_id:
                related = self.db.query(Invoice).filter(
                    Invoice.id == invoice.related_invoice_id,
                    Invoice.tenant_id == tenant_id
                ).with_for_update().first()
                if related is not None and related.status == InvoiceStatus.CANCELLED:
                    logger.info(f"Restoring invoice {related.number} after deleting credit note {invoice.number}")
                    related.status = InvoiceStatus.PENDING

            # Notas que apuntaban a este documento quedan sin referencia
            self.db.query(Invoice).filter(
                Invoice.related_invoice_id == invoice.id
            ).update({Invoice.related_invoice_id: None}, synchronize_session=False)

            self.db.delete(invoice)
            self.db.commit()

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting invoice {invoice_id}: {e}", exc_info=True)
            raise TransactionFailure("Error eliminando la factura")

    # ------------------------------------------------------------------
    # Pagos
    # ------------------------------------------------------------------

    def get_invoice_payments(self, invoice_id: UUID, tenant_id: UUID) -> List[Payment]:
        self._get_invoice(invoice_id, tenant_id)
        return self.db.query(Payment).filter(
            Payment.invoice_id == invoice_id,
            Payment.tenant_id == tenant_id
        ).order_by(Payment.date, Payment.created_at).all()

    def add_payment(self, invoice_id: UUID, payment_data: PaymentCreate, tenant_id: UUID, user_id: UUID) -> Payment:
        """Registrar un pago y recalcular el estado de pago de la factura"""
        try:
            invoice = self._get_invoice(invoice_id, tenant_id, lock=True)

            payment = Payment(
                invoice_id=invoice.id,
                tenant_id=tenant_id,
                created_by=user_id,
                **payment_data.model_dump()
            )
            self.db.add(payment)
            self._recalculate_payment_status(invoice)

            self.db.commit()
            self.db.refresh(payment)
            logger.info(f"Payment of {payment.amount} recorded for invoice {invoice.number} ({invoice.payment_status.value})")
            return payment

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error adding payment to invoice {invoice_id}: {e}", exc_info=True)
            raise TransactionFailure("Error registrando el pago")

    def delete_payment(self, payment_id: UUID, tenant_id: UUID) -> None:
        try:
            payment = self.db.query(Payment).filter(
                Payment.id == payment_id,
                Payment.tenant_id == tenant_id
            ).first()
            if not payment:
                raise NotFoundError("Pago no encontrado")

            invoice = self._get_invoice(payment.invoice_id, tenant_id, lock=True)
            self.db.delete(payment)
            self._recalculate_payment_status(invoice)
            self.db.commit()

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting payment {payment_id}: {e}", exc_info=True)
            raise TransactionFailure("Error eliminando el pago")

    def set_payment_state(
        self,
        invoice_id: UUID,
        state: PaymentStateUpdate,
        tenant_id: UUID,
        user_id: UUID
    ) -> Invoice:
        """
        Marcar como pagada registra un pago por el saldo pendiente;
        marcar como no pagada elimina todos los pagos. El estado se recalcula
        siempre desde los pagos.
        """
        try:
            invoice = self._get_invoice(invoice_id, tenant_id, lock=True)

            if state.is_paid:
                total_paid = self.db.query(
                    func.coalesce(func.sum(Payment.amount), 0)
                ).filter(Payment.invoice_id == invoice.id).scalar()
                balance = Decimal(str(invoice.total_amount)) - Decimal(str(total_paid or 0))
                if balance > 0:
                    payment_fields = {"reference": state.reference}
                    if state.date:
                        payment_fields["date"] = state.date
                    if state.method:
                        payment_fields["method"] = state.method
                    self.db.add(Payment(
                        invoice_id=invoice.id,
                        tenant_id=tenant_id,
                        created_by=user_id,
                        amount=balance,
                        comment="Pago registrado al marcar la factura como pagada",
                        **payment_fields
                    ))
            else:
                self.db.query(Payment).filter(
                    Payment.invoice_id == invoice.id
                ).delete(synchronize_session=False)

            self._recalculate_payment_status(invoice)
            self.db.commit()
            self.db.refresh(invoice)
            return invoice

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error setting payment state for invoice {invoice_id}: {e}", exc_info=True)
            raise TransactionFailure("Error actualizando el estado de pago")
