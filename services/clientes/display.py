"""Rendering of customer records for the detail view and the list table."""

from typing import Dict, Optional

from .helpers.rut import format_rut
from .models import Cliente
from .ubicacion import region_name

NO_DISPONIBLE = "N/A"


def _or_na(value: Optional[str]) -> str:
    return value if value else NO_DISPONIBLE


def display_rut(rut: Optional[str]) -> str:
    """Display form of a stored RUT; unparseable values are shown as stored."""
    if not rut:
        return NO_DISPONIBLE
    try:
        return format_rut(rut)
    except ValueError:
        return rut


def display_direccion(cliente: Cliente) -> str:
    if not cliente.direccion:
        return NO_DISPONIBLE
    return f"{cliente.direccion} {cliente.numero or ''}".strip()


def cliente_detail(cliente: Cliente) -> Dict[str, str]:
    """Label -> value rows of the detail view, in display order."""
    return {
        "Código Auxiliar": cliente.codaux,
        "Nombre": _or_na(cliente.nombre),
        "RUT": display_rut(cliente.rut),
        "Teléfono": _or_na(cliente.fono),
        "Correo Electrónico": _or_na(cliente.email),
        "Tipo de Cliente": _or_na(cliente.tipo),
        "Dirección": display_direccion(cliente),
        "Comuna": _or_na(cliente.comuna),
        "Ciudad": _or_na(cliente.ciudad),
        "Región": region_name(cliente.region),
    }


def display_ubicacion(cliente: Cliente) -> str:
    """City, then the commune when it differs from the city, then the region."""
    ciudad = _or_na(cliente.ciudad)
    comuna = _or_na(cliente.comuna)

    parts = [ciudad]
    if ciudad != comuna and NO_DISPONIBLE not in (ciudad, comuna):
        parts.append(comuna)
    parts.append(region_name(cliente.region))
    return " / ".join(parts)


def cliente_row(cliente: Cliente) -> Dict[str, str]:
    """Row of the customer list table."""
    return {
        "codaux": cliente.codaux,
        "nombre": _or_na(cliente.nombre),
        "direccion": display_direccion(cliente),
        "fono": _or_na(cliente.fono),
        "ubicacion": display_ubicacion(cliente),
    }
