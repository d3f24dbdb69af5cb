"""
Customer API collaborator.

Wraps the /clientes REST endpoints. Every operation returns a result model;
transport, HTTP and decoding failures are logged and converted into a
failure result carrying the empty default for the entity field, so callers
can keep the form state and show the message.
"""

from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from .client import ClienteAPIError, HTTPClient, create_client
from .log_config import get_logger, log_operation_result
from .models import (
    Cliente,
    ClienteListResult,
    ClienteResult,
    ClienteSearchResult,
    OperationResult,
    SearchFilters,
)

logger = get_logger(__name__)

CLIENTES_PATH = "/clientes"

ResultT = TypeVar("ResultT", bound=OperationResult)

ClientePayload = Union[Cliente, Mapping[str, Any]]


def build_query_params(params: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Drop parameters whose value is None or an empty string.

    Examples:
        >>> build_query_params({"page": 1, "searchText": "", "region": None})
        {'page': 1}
    """
    query = {}
    for key, value in params.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        query[key] = value
    return query


def _cliente_path(codaux: str) -> str:
    return f"{CLIENTES_PATH}/{quote(str(codaux), safe='')}"


def _error_message(exc: Exception, operacion: str) -> str:
    if isinstance(exc, ValidationError):
        return f"Respuesta inválida al {operacion}"
    return str(exc) or f"Error al {operacion}"


def _to_payload(record: ClientePayload) -> Dict[str, Any]:
    if isinstance(record, Cliente):
        return record.to_payload()
    return dict(record)


class ClienteService:
    """
    Client for the customer API.

    Usage:
        with ClienteService.from_settings() as service:
            result = service.get_by_code("76086428")
            if result.success:
                print(result.cliente.nombre)
    """

    def __init__(self, client: HTTPClient):
        self.client = client

    @classmethod
    def from_settings(cls, config=None) -> "ClienteService":
        return cls(create_client(config))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self.client.close()

    def _handle_error(
        self,
        exc: Exception,
        operacion: str,
        result_cls: Type[ResultT],
        **context: Any
    ) -> ResultT:
        """Log a failed call and build the failure result for it."""
        message = _error_message(exc, operacion)
        logger.error(
            "Customer API call failed",
            operacion=operacion,
            error=message,
            error_type=type(exc).__name__,
            status_code=getattr(exc, "status_code", None),
            **context
        )
        return result_cls.failure(message)

    def _call(
        self,
        operation: str,
        operacion: str,
        result_cls: Type[ResultT],
        method: str,
        url: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        **context: Any
    ) -> ResultT:
        start_time = datetime.now()

        try:
            data = self.client.request_json(method, url, json=json, params=params)
            if not data:
                result = result_cls.failure(f"Error al {operacion}")
            else:
                result = result_cls.model_validate(data)
        except (ClienteAPIError, httpx.HTTPError, ValidationError, ValueError) as exc:
            return self._handle_error(exc, operacion, result_cls, **context)

        duration_ms = (datetime.now() - start_time).total_seconds() * 1000
        log_operation_result(
            logger,
            operation,
            result.success,
            duration_ms=duration_ms,
            api_message=result.message,
            **context
        )
        return result

    def list_clientes(self, page: int = 1, limit: int = 10, all: bool = False) -> ClienteListResult:
        """
        Fetch a page of customers.

        Args:
            page: 1-based page number
            limit: Customers per page
            all: Ask the API for every record, ignoring pagination

        Returns:
            ClienteListResult with clientes and pagination.total
        """
        params = build_query_params({"page": page, "limit": limit, "all": all})
        result = self._call(
            "list", "obtener clientes", ClienteListResult,
            "GET", CLIENTES_PATH, params=params, page=page, limit=limit
        )
        logger.debug("Customers listed", count=len(result.clientes), total=result.pagination.total)
        return result

    def get_by_code(self, codaux: str) -> ClienteResult:
        """Fetch one customer by auxiliary code."""
        return self._call(
            "get", "obtener el cliente", ClienteResult,
            "GET", _cliente_path(codaux), codaux=codaux
        )

    def create(self, record: ClientePayload) -> OperationResult:
        """Create a customer. The payload is sent as given."""
        payload = _to_payload(record)
        return self._call(
            "create", "crear el cliente", OperationResult,
            "POST", CLIENTES_PATH, json=payload, codaux=payload.get("codaux")
        )

    def update(self, codaux: str, record: ClientePayload) -> OperationResult:
        """Replace a customer's data (full-record update)."""
        return self._call(
            "update", "actualizar el cliente", OperationResult,
            "PUT", _cliente_path(codaux), json=_to_payload(record), codaux=codaux
        )

    def remove(self, codaux: str) -> OperationResult:
        """Delete a customer by auxiliary code."""
        return self._call(
            "delete", "eliminar el cliente", OperationResult,
            "DELETE", _cliente_path(codaux), codaux=codaux
        )

    def search(self, filters: Union[SearchFilters, Mapping[str, Any], None] = None) -> ClienteSearchResult:
        """
        Search customers by free text, region and city.

        Args:
            filters: SearchFilters or a mapping with searchText/region/ciudad
        """
        if filters is None:
            filters = SearchFilters()
        elif not isinstance(filters, SearchFilters):
            filters = SearchFilters.model_validate(dict(filters))

        params = build_query_params(filters.to_query_params())
        result = self._call(
            "search", "buscar clientes", ClienteSearchResult,
            "GET", f"{CLIENTES_PATH}/search", params=params, filters=params
        )
        logger.debug("Customer search finished", results=len(result.clientes))
        return result
