"""Tests for customer and result models."""

import pytest
from pydantic import ValidationError

from services.clientes.models import (
    Cliente,
    ClienteListResult,
    ClienteResult,
    ClienteSearchResult,
    OperationResult,
    SearchFilters,
    TipoCliente,
)


class TestCliente:

    def test_parse_full_record(self, cliente_payload):
        cliente = Cliente.model_validate(cliente_payload)
        assert cliente.codaux == "12345678"
        assert cliente.tipo == TipoCliente.RETAIL
        assert cliente.tipo == "Retail"

    def test_numeric_fields_are_coerced_to_strings(self):
        cliente = Cliente.model_validate({"codaux": 76086428, "nombre": "ACME", "region": 13})
        assert cliente.codaux == "76086428"
        assert cliente.region == "13"

    def test_unknown_fields_are_ignored(self):
        cliente = Cliente.model_validate({"codaux": "1", "nombre": "X", "created_at": "2026-01-01"})
        assert not hasattr(cliente, "created_at")

    @pytest.mark.parametrize("tipo", ["Final", "Retail", "Distribuidor"])
    def test_valid_tipos(self, tipo):
        assert Cliente(codaux="1", nombre="X", tipo=tipo).tipo == tipo

    def test_empty_tipo_is_none(self):
        assert Cliente(codaux="1", nombre="X", tipo="").tipo is None

    def test_unknown_tipo_is_kept_as_stored(self):
        assert Cliente(codaux="1", nombre="X", tipo="Mayorista").tipo == "Mayorista"

    def test_enum_tipo_is_stored_as_text(self):
        cliente = Cliente(codaux="1", nombre="X", tipo=TipoCliente.DISTRIBUIDOR)
        assert cliente.model_dump()["tipo"] == "Distribuidor"

    def test_missing_nombre_is_accepted(self):
        assert Cliente.model_validate({"codaux": "1", "nombre": None}).nombre is None
        assert Cliente(codaux="1").nombre is None

    def test_codaux_required(self):
        with pytest.raises(ValidationError):
            Cliente(codaux="", nombre="X")

    def test_payload_omits_unset_fields(self):
        payload = Cliente(codaux="1", nombre="X", tipo=TipoCliente.FINAL).to_payload()
        assert payload == {"codaux": "1", "nombre": "X", "tipo": "Final"}


class TestSearchFilters:

    def test_alias_and_field_name(self):
        assert SearchFilters(searchText="perez").search_text == "perez"
        assert SearchFilters(search_text="perez").search_text == "perez"

    def test_query_params_use_api_names(self):
        params = SearchFilters(search_text="perez", region="13").to_query_params()
        assert params == {"searchText": "perez", "region": "13", "ciudad": None}

    @pytest.mark.parametrize(
        "kwargs,expected",
        [
            ({}, True),
            ({"search_text": "   "}, True),
            ({"search_text": "perez"}, False),
            ({"region": "13"}, False),
            ({"ciudad": "Santiago"}, False),
        ],
    )
    def test_is_empty(self, kwargs, expected):
        assert SearchFilters(**kwargs).is_empty() is expected


class TestResults:

    def test_failure_defaults(self):
        assert ClienteListResult.failure("boom").clientes == []
        assert ClienteListResult.failure("boom").pagination.total == 0
        assert ClienteResult.failure("boom").cliente is None
        assert ClienteSearchResult.failure("boom").clientes == []

        result = OperationResult.failure("boom")
        assert result.success is False
        assert result.message == "boom"

    def test_list_result_from_api(self, cliente_payload):
        result = ClienteListResult.model_validate({
            "success": True,
            "clientes": [cliente_payload],
            "pagination": {"total": 42, "page": 1, "limit": 10},
        })
        assert result.success is True
        assert result.clientes[0].nombre == "Juan Pérez"
        assert result.pagination.total == 42

    def test_null_collections_become_empty(self):
        result = ClienteListResult.model_validate({"success": True, "clientes": None, "pagination": None})
        assert result.clientes == []
        assert result.pagination.total == 0

        search = ClienteSearchResult.model_validate({"success": True, "clientes": None})
        assert search.clientes == []
