"""
Pytest fixtures for the customer service tests.

Structured logging is silenced so CLI tests can parse stdout as JSON.
"""

from unittest.mock import Mock

import pytest
import structlog

from services.clientes.client import HTTPClient
from services.clientes.helpers import dates
from services.clientes.service import ClienteService


@pytest.fixture(autouse=True, scope="session")
def silence_structlog():
    structlog.configure(
        processors=[],
        logger_factory=structlog.ReturnLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def clear_date_memo():
    dates._memo.clear()
    yield
    dates._memo.clear()


@pytest.fixture
def http_client() -> Mock:
    """HTTPClient double; set request_json.return_value / side_effect per test."""
    return Mock(spec=HTTPClient)


@pytest.fixture
def service(http_client) -> ClienteService:
    return ClienteService(http_client)


@pytest.fixture
def cliente_payload() -> dict:
    return {
        "codaux": "12345678",
        "nombre": "Juan Pérez",
        "rut": "123456785",
        "direccion": "Av. Providencia",
        "numero": "1234",
        "fono": "+56 9 1234 5678",
        "email": "juan@example.com",
        "region": "13",
        "comuna": "Providencia",
        "ciudad": "Santiago",
        "tipo": "Retail",
    }


@pytest.fixture
def mock_service() -> Mock:
    """ClienteService double for workflow and CLI tests."""
    return Mock(spec=ClienteService)
