"""
Módulo de Facturación (Invoices) - Obras360

- Documentos tributarios: VENTA, COMPRA, NOTA_CREDITO, NOTA_DEBITO
- Pagos parciales y totales; paymentStatus / isPaid derivados de la suma de pagos
- Notas de crédito que anulan la factura referenciada (y la restauran al eliminarse)
- Folio único por (número, tipo, empresa) y por proveedor en compras

Tablas principales:
- invoices: Documentos
- invoice_items: Ítems (ordenados por posición)
- payments: Pagos
"""
