"""
Validadores específicos para Chile
"""
import re
from typing import Optional


def clean_rut(rut: str) -> str:
    """Quita puntos y espacios, y normaliza el dígito verificador a mayúscula."""
    return re.sub(r'[\.\s]', '', rut or '').upper()


def calculate_rut_dv(body: str) -> Optional[str]:
    """
    Calcula el dígito verificador (módulo 11) de un RUT.
    Multiplica los dígitos de derecha a izquierda por la serie 2..7.
    Retorna '0'-'9' o 'K', o None si el cuerpo no es numérico.
    """
    if not body or not body.isdigit():
        return None

    total = 0
    factor = 2
    for digit in reversed(body):
        total += int(digit) * factor
        factor = 2 if factor == 7 else factor + 1

    remainder = 11 - (total % 11)
    if remainder == 11:
        return '0'
    if remainder == 10:
        return 'K'
    return str(remainder)


def validate_rut(rut: str) -> bool:
    """
    Valida un RUT chileno.
    Formatos válidos: 12345678-5, 12.345.678-5, 20000003-k
    """
    cleaned = clean_rut(rut)
    if not re.match(r'^[0-9]+-[0-9K]$', cleaned):
        return False

    body, dv = cleaned.split('-')
    return calculate_rut_dv(body) == dv


def format_rut(rut: str) -> str:
    """
    Formatea un RUT al formato estándar sin puntos: 12345678-5
    """
    if not validate_rut(rut):
        return rut  # Retorna sin cambios si no es válido
    return clean_rut(rut)


def validate_chile_phone(phone: str) -> bool:
    """
    Valida teléfono chileno.
    - +569XXXXXXXX / 569XXXXXXXX / 9XXXXXXXX (móvil)
    - +562XXXXXXXX (fijo Santiago) y otros fijos de 9 dígitos
    """
    cleaned = re.sub(r'[\s\-\(\)]', '', phone or '')
    patterns = [
        r'^\+56[2-9][0-9]{8}$',
        r'^56[2-9][0-9]{8}$',
        r'^[2-9][0-9]{8}$',
    ]
    return any(re.match(pattern, cleaned) for pattern in patterns)
