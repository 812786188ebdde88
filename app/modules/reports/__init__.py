"""
Módulo de Reportes - Obras360

No crea tablas: agrega sobre invoices y payments de la empresa activa.

- Resumen del periodo (ventas, compras, notas, por cobrar, recaudado)
- Antigüedad de saldos por cobrar
- Flujo de caja mensual
- Top clientes / proveedores
- Exportación CSV del flujo de caja y del top
"""
