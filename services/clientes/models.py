"""
Customer record and API result models.

Results are explicit success/failure objects: a failed call still carries
the empty default for its entity field (no clientes, no cliente) so callers
never have to handle a raised error.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TipoCliente(str, Enum):
    """Customer classification."""

    FINAL = "Final"
    RETAIL = "Retail"
    DISTRIBUIDOR = "Distribuidor"


class Cliente(BaseModel):
    """
    Customer record as exchanged with the customer API.

    Parsing is lenient so one odd stored record never fails a whole list.
    Form rules live in workflows.
    """

    model_config = ConfigDict(extra="ignore")

    codaux: str = Field(min_length=1, description="Auxiliary code, unique and immutable")
    nombre: Optional[str] = Field(default=None, description="Customer name")
    rut: Optional[str] = Field(default=None, description="RUT without separators")
    direccion: Optional[str] = None
    numero: Optional[str] = None
    fono: Optional[str] = None
    email: Optional[str] = None
    region: Optional[str] = Field(default=None, description="Region identifier")
    comuna: Optional[str] = Field(default=None, description="Commune name")
    ciudad: Optional[str] = None
    tipo: Optional[str] = Field(default=None, description="Customer type, as stored")

    @field_validator("codaux", "rut", "numero", "fono", "region", mode="before")
    @classmethod
    def coerce_to_str(cls, v):
        """The API may return numeric codes; keep them as strings."""
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator("tipo", mode="before")
    @classmethod
    def normalize_tipo(cls, v):
        """Stored records may carry types outside TipoCliente; keep them as text."""
        if isinstance(v, TipoCliente):
            return v.value
        if v == "":
            return None
        return v

    def to_payload(self) -> Dict[str, Any]:
        """JSON body for create/update, without unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)


class SearchFilters(BaseModel):
    """Search criteria for /clientes/search."""

    model_config = ConfigDict(populate_by_name=True)

    search_text: Optional[str] = Field(default=None, alias="searchText")
    region: Optional[str] = None
    ciudad: Optional[str] = None

    def is_empty(self) -> bool:
        return not any(
            value and str(value).strip()
            for value in (self.search_text, self.region, self.ciudad)
        )

    def to_query_params(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class Pagination(BaseModel):
    model_config = ConfigDict(extra="ignore")

    total: int = 0
    page: Optional[int] = None
    limit: Optional[int] = None


class OperationResult(BaseModel):
    """Outcome of create, update and delete calls."""

    model_config = ConfigDict(extra="ignore")

    success: bool = False
    message: Optional[str] = None

    @classmethod
    def failure(cls, message: str, **defaults: Any):
        return cls(success=False, message=message, **defaults)


class ClienteListResult(OperationResult):
    clientes: List[Cliente] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)

    @field_validator("clientes", mode="before")
    @classmethod
    def null_clientes_is_empty(cls, v):
        return [] if v is None else v

    @field_validator("pagination", mode="before")
    @classmethod
    def null_pagination_is_empty(cls, v):
        return {} if v is None else v


class ClienteResult(OperationResult):
    cliente: Optional[Cliente] = None


class ClienteSearchResult(OperationResult):
    clientes: List[Cliente] = Field(default_factory=list)

    @field_validator("clientes", mode="before")
    @classmethod
    def null_clientes_is_empty(cls, v):
        return [] if v is None else v
