"""
Errores de dominio expresados como HTTPException.

Los services los lanzan directamente; FastAPI los convierte en la respuesta
JSON `{"detail": ...}` con el código correspondiente.
"""
from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """Falta un dato requerido o se viola una regla de negocio (400)."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFoundError(HTTPException):
    """El recurso no existe o pertenece a otra empresa (404)."""

    def __init__(self, detail: str = "Recurso no encontrado"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """Duplicado de una clave única de negocio, p. ej. un folio (409)."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class TransactionFailure(HTTPException):
    """Falla dentro de una operación atómica; la transacción ya fue revertida (500)."""

    def __init__(self, detail: str = "La operación no pudo completarse, intente nuevamente"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
