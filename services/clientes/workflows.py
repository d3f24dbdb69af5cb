"""
Create, edit and search workflows for customer forms.

Each workflow validates and shapes form input before calling the customer
API and reports problems as failure results. The submitted values are never
modified, so a failed submission keeps everything the user typed.
"""

from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from .helpers.rut import format_rut_body, sanitize_for_storage, validate_rut
from .log_config import get_logger
from .models import (
    Cliente,
    ClienteResult,
    ClienteSearchResult,
    OperationResult,
    SearchFilters,
    TipoCliente,
)
from .service import ClienteService
from .ubicacion import Comuna, communes_for

logger = get_logger(__name__)

RUT_INVALIDO = "El RUT ingresado no es válido"

# Form-only fields never sent to the API
DISPLAY_ONLY_FIELDS = {"rut_formateado"}

REQUIRED_FIELDS = {
    "codaux": "Por favor ingresa el código auxiliar",
    "nombre": "Por favor ingresa el nombre del cliente",
}


class ClienteFormError(ValueError):
    """Raised when form input cannot be submitted."""
    pass


def _clean_values(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy form values, dropping display-only fields and blank strings."""
    cleaned = {}
    for key, value in values.items():
        if key in DISPLAY_ONLY_FIELDS:
            continue
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        if value is None:
            continue
        cleaned[key] = value
    return cleaned


def _prepare_rut(payload: Dict[str, Any]) -> None:
    rut = payload.get("rut")
    if not rut:
        return
    if not validate_rut(rut):
        raise ClienteFormError(RUT_INVALIDO)
    payload["rut"] = sanitize_for_storage(rut)


def _build_cliente(payload: Dict[str, Any]) -> Cliente:
    tipo = payload.get("tipo")
    if tipo is not None:
        try:
            TipoCliente(tipo)
        except ValueError as exc:
            raise ClienteFormError(f"Datos del cliente inválidos: tipo '{tipo}'") from exc

    try:
        return Cliente.model_validate(payload)
    except ValidationError as exc:
        fields = ", ".join(str(error["loc"][0]) for error in exc.errors() if error["loc"])
        raise ClienteFormError(f"Datos del cliente inválidos: {fields}") from exc


def prepare_create_payload(values: Mapping[str, Any]) -> Cliente:
    """
    Validate create-form values and shape them for the API.

    Args:
        values: Raw form values (rut may carry dots and hyphen)

    Returns:
        Cliente ready to send, with the RUT stored without separators

    Raises:
        ClienteFormError: Missing required field, invalid RUT or invalid data
    """
    payload = _clean_values(values)

    for field, message in REQUIRED_FIELDS.items():
        if not payload.get(field):
            raise ClienteFormError(message)

    _prepare_rut(payload)
    return _build_cliente(payload)


def prepare_update_payload(codaux: str, values: Mapping[str, Any]) -> Cliente:
    """
    Validate edit-form values for a full-record update.

    The auxiliary code is immutable: it is pinned to the record being edited.

    Raises:
        ClienteFormError: Changed codaux, missing name, invalid RUT or data
    """
    payload = _clean_values(values)

    submitted_code = payload.get("codaux")
    if submitted_code is not None and str(submitted_code) != str(codaux):
        raise ClienteFormError("El código auxiliar no se puede modificar")
    payload["codaux"] = str(codaux)

    if not payload.get("nombre"):
        raise ClienteFormError(REQUIRED_FIELDS["nombre"])

    _prepare_rut(payload)
    return _build_cliente(payload)


def create_cliente(service: ClienteService, values: Mapping[str, Any]) -> OperationResult:
    """Submit the create form."""
    try:
        cliente = prepare_create_payload(values)
    except ClienteFormError as exc:
        logger.warning("Create form rejected", error=str(exc))
        return OperationResult.failure(str(exc))

    result = service.create(cliente)
    if result.success:
        logger.info("Cliente creado exitosamente", codaux=cliente.codaux)
    elif not result.message:
        result.message = "Error al crear el cliente."
    return result


def update_cliente(service: ClienteService, codaux: str, values: Mapping[str, Any]) -> OperationResult:
    """Submit the edit form for an existing customer."""
    try:
        cliente = prepare_update_payload(codaux, values)
    except ClienteFormError as exc:
        logger.warning("Edit form rejected", codaux=codaux, error=str(exc))
        return OperationResult.failure(str(exc))

    result = service.update(codaux, cliente)
    if result.success:
        logger.info("Cliente actualizado exitosamente", codaux=codaux)
    elif not result.message:
        result.message = "Error al actualizar el cliente."
    return result


def edit_form_initial(cliente: Cliente) -> Dict[str, Any]:
    """
    Initial values for the edit form.

    rut_formateado shows the auxiliary code as a RUT. The code is the RUT body
    without its check digit, so the digit is always computed.
    """
    values = cliente.model_dump(mode="json")
    try:
        values["rut_formateado"] = format_rut_body(cliente.codaux)
    except ValueError:
        values["rut_formateado"] = ""
    return values


class EditForm:
    """Loaded edit form: initial values plus commune options for the stored region."""

    def __init__(self, result: ClienteResult, initial: Dict[str, Any], comunas: List[Comuna]):
        self.result = result
        self.initial = initial
        self.comunas = comunas

    @property
    def success(self) -> bool:
        return self.result.success


def load_for_edit(service: ClienteService, codaux: str) -> EditForm:
    """Fetch a customer and build its edit form."""
    result = service.get_by_code(codaux)
    if not result.success or result.cliente is None:
        if result.success:
            result = ClienteResult.failure(result.message or "Cliente no encontrado")
        return EditForm(result, {}, [])

    cliente = result.cliente
    return EditForm(result, edit_form_initial(cliente), communes_for(cliente.region))


def filter_search_results(
    clientes: List[Cliente],
    region: Optional[str] = None,
    ciudad: Optional[str] = None
) -> List[Cliente]:
    """
    Refine API search results locally.

    Region must match exactly; ciudad matches as a case-insensitive substring.
    """
    filtered = list(clientes)

    if region:
        filtered = [c for c in filtered if c.region == str(region)]

    if ciudad:
        needle = ciudad.lower()
        filtered = [c for c in filtered if c.ciudad and needle in c.ciudad.lower()]

    return filtered


def search_clientes(
    service: ClienteService,
    search_text: Optional[str] = None,
    region: Optional[str] = None,
    ciudad: Optional[str] = None,
    page_size: int = 10
):
    """
    Run the list view search.

    With no criteria this falls back to the first page of the full list.

    Returns:
        ClienteListResult (no criteria) or ClienteSearchResult
    """
    filters = SearchFilters(search_text=search_text, region=region, ciudad=ciudad)

    if filters.is_empty():
        return service.list_clientes(1, page_size)

    result = service.search(filters)
    if not result.success:
        if not result.message:
            result.message = "Error al realizar la búsqueda"
        return result

    clientes = filter_search_results(result.clientes, region, ciudad)
    logger.info("Search finished", results=len(clientes))
    return ClienteSearchResult(success=True, message=result.message, clientes=clientes)
