"""
Exportación CSV de reportes
"""

import csv
import io
from decimal import Decimal
from typing import Any, Dict, List

from fastapi import Response


def format_csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Decimal):
        # CLP sin decimales
        return str(value.quantize(Decimal("1")))
    return str(value)


def create_csv_response(data: List[Dict[str, Any]], filename: str, headers: Dict[str, str]) -> Response:
    """
    Construye una respuesta text/csv.

    `headers` mapea la clave de cada fila al título de la columna; las claves
    que no estén en el mapeo se omiten.
    """
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(headers.values())
    for row in data:
        writer.writerow([format_csv_value(row.get(key)) for key in headers])

    return Response(
        content=output.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


CSV_HEADERS = {
    "cash_flow": {
        "month": "Mes",
        "income": "Ingresos",
        "expense": "Egresos",
        "net": "Neto",
    },
    "top_entities": {
        "name": "Nombre",
        "invoice_count": "Documentos",
        "total": "Total",
    },
}
