"""
Tests for HTTP client with retries and backoff.
"""

import pytest
from unittest.mock import Mock, patch
import httpx

from services.clientes.client import (
    ClienteAPIAuthError,
    ClienteAPIError,
    HTTPClient,
    RetryableHTTPError,
    RETRYABLE_STATUS_CODES,
    calculate_backoff_delay,
    create_client,
    extract_error_message,
)
from services.clientes.settings import Settings


def json_response(status_code: int, body=None, text: str = "") -> Mock:
    """Build a response double with a JSON body."""
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.content = b"{}" if body is not None else b""
    if body is not None:
        response.json.return_value = body
    else:
        response.json.side_effect = ValueError("No JSON")
    return response


class TestBackoffCalculation:
    """Test exponential backoff calculation."""

    def test_basic_backoff(self):
        delay = calculate_backoff_delay(0, base_delay=1.0)
        assert 1.0 <= delay <= 1.2  # 1.0 + jitter (0-20%)

        delay = calculate_backoff_delay(1, base_delay=1.0)
        assert 2.0 <= delay <= 2.4

        delay = calculate_backoff_delay(2, base_delay=1.0)
        assert 4.0 <= delay <= 4.8

    def test_max_delay_respected(self):
        delay = calculate_backoff_delay(10, base_delay=1.0, max_delay=5.0)
        assert delay <= 6.0  # max_delay + max jitter (20%)


class TestHTTPClient:
    """Test HTTP client functionality."""

    @patch('httpx.Client')
    def test_successful_request(self, mock_client_class):
        mock_client = Mock()
        mock_client.request.return_value = json_response(200, {"success": True})
        mock_client_class.return_value = mock_client

        with HTTPClient() as client:
            result = client.get_json("/clientes", params={"page": 1})

        assert result == {"success": True}
        mock_client.request.assert_called_once_with(
            "GET", "/clientes", json=None, params={"page": 1}, headers=None
        )

    @patch('services.clientes.client.log_api_call')
    @patch('httpx.Client')
    @patch('time.sleep')
    def test_each_completed_attempt_is_logged(self, mock_sleep, mock_client_class, mock_log_api_call):
        mock_client = Mock()
        mock_client.request.side_effect = [
            json_response(503, {}),
            json_response(200, {"success": True}),
        ]
        mock_client_class.return_value = mock_client

        with HTTPClient(max_retries=2) as client:
            client.get_json("/clientes")

        assert mock_log_api_call.call_count == 2
        statuses = [call.kwargs["status_code"] for call in mock_log_api_call.call_args_list]
        assert statuses == [503, 200]
        _, method, url = mock_log_api_call.call_args.args
        assert (method, url) == ("GET", "/clientes")
        assert mock_log_api_call.call_args.kwargs["attempt"] == 2
        assert mock_log_api_call.call_args.kwargs["duration_ms"] >= 0

    @patch('httpx.Client')
    def test_post_sends_json_body(self, mock_client_class):
        mock_client = Mock()
        mock_client.request.return_value = json_response(201, {"success": True})
        mock_client_class.return_value = mock_client

        with HTTPClient() as client:
            client.post_json("/clientes", json={"codaux": "1"})

        args, kwargs = mock_client.request.call_args
        assert args == ("POST", "/clientes")
        assert kwargs["json"] == {"codaux": "1"}

    @patch('httpx.Client')
    def test_empty_body_returns_empty_dict(self, mock_client_class):
        mock_client = Mock()
        mock_client.request.return_value = json_response(204)
        mock_client_class.return_value = mock_client

        with HTTPClient() as client:
            assert client.delete_json("/clientes/1") == {}

    @patch('httpx.Client')
    @patch('time.sleep')
    def test_retry_on_server_error_for_get(self, mock_sleep, mock_client_class):
        mock_client = Mock()
        mock_client.request.return_value = json_response(500, {}, text="Internal Server Error")
        mock_client_class.return_value = mock_client

        with HTTPClient(max_retries=2) as client:
            with pytest.raises(RetryableHTTPError) as exc_info:
                client.get_json("/clientes")

        assert exc_info.value.status_code == 500
        assert mock_client.request.call_count == 3
        assert mock_sleep.call_count == 2

    @patch('httpx.Client')
    @patch('time.sleep')
    def test_no_retry_on_server_error_for_post(self, mock_sleep, mock_client_class):
        mock_client = Mock()
        mock_client.request.return_value = json_response(
            500, {"message": "Error interno"}, text="Error interno"
        )
        mock_client_class.return_value = mock_client

        with HTTPClient(max_retries=2) as client:
            with pytest.raises(ClienteAPIError, match="Error interno"):
                client.post_json("/clientes", json={"codaux": "1"})

        assert mock_client.request.call_count == 1
        mock_sleep.assert_not_called()

    @patch('httpx.Client')
    @patch('time.sleep')
    def test_retry_on_connect_error_for_post(self, mock_sleep, mock_client_class):
        mock_client = Mock()
        mock_client.request.side_effect = [
            httpx.ConnectError("Connection refused"),
            json_response(201, {"success": True}),
        ]
        mock_client_class.return_value = mock_client

        with HTTPClient(max_retries=2) as client:
            result = client.post_json("/clientes", json={"codaux": "1"})

        assert result == {"success": True}
        assert mock_client.request.call_count == 2
        assert mock_sleep.call_count == 1

    @patch('httpx.Client')
    def test_read_timeout_not_retried_for_post(self, mock_client_class):
        mock_client = Mock()
        mock_client.request.side_effect = httpx.ReadTimeout("Timeout")
        mock_client_class.return_value = mock_client

        with HTTPClient(max_retries=2) as client:
            with pytest.raises(httpx.ReadTimeout):
                client.post_json("/clientes", json={})

        assert mock_client.request.call_count == 1

    @patch('httpx.Client')
    @patch('time.sleep')
    def test_retry_on_timeout(self, mock_sleep, mock_client_class):
        mock_client = Mock()
        mock_client.request.side_effect = httpx.ConnectTimeout("Timeout")
        mock_client_class.return_value = mock_client

        with HTTPClient(max_retries=2) as client:
            with pytest.raises(RetryableHTTPError):
                client.get_json("/clientes")

        assert mock_client.request.call_count == 3
        assert mock_sleep.call_count == 2

    @patch('httpx.Client')
    @patch('time.sleep')
    def test_eventual_success_after_retries(self, mock_sleep, mock_client_class):
        mock_client = Mock()
        mock_client.request.side_effect = [
            Mock(status_code=500),
            Mock(status_code=502),
            json_response(200, {"success": True}),
        ]
        mock_client_class.return_value = mock_client

        with HTTPClient(max_retries=3) as client:
            result = client.put_json("/clientes/1", json={"nombre": "X"})

        assert result == {"success": True}
        assert mock_client.request.call_count == 3

    @patch('httpx.Client')
    def test_client_error_carries_api_message(self, mock_client_class):
        mock_client = Mock()
        mock_client.request.return_value = json_response(
            409, {"success": False, "message": "El cliente ya existe"}, text="conflict"
        )
        mock_client_class.return_value = mock_client

        with HTTPClient(max_retries=2) as client:
            with pytest.raises(ClienteAPIError) as exc_info:
                client.post_json("/clientes", json={"codaux": "1"})

        assert str(exc_info.value) == "El cliente ya existe"
        assert exc_info.value.status_code == 409
        assert mock_client.request.call_count == 1

    @patch('httpx.Client')
    def test_client_error_without_message(self, mock_client_class):
        mock_client = Mock()
        mock_client.request.return_value = json_response(404, None, text="Not Found")
        mock_client_class.return_value = mock_client

        with HTTPClient() as client:
            with pytest.raises(ClienteAPIError, match="HTTP 404"):
                client.get_json("/clientes/999")

    @pytest.mark.parametrize("status_code", [401, 403])
    @patch('httpx.Client')
    def test_auth_errors(self, mock_client_class, status_code):
        mock_client = Mock()
        mock_client.request.return_value = json_response(
            status_code, {"message": "Token inválido"}, text="unauthorized"
        )
        mock_client_class.return_value = mock_client

        with HTTPClient() as client:
            with pytest.raises(ClienteAPIAuthError, match="Token inválido"):
                client.get_json("/clientes")

    @patch('httpx.Client')
    def test_invalid_json_response(self, mock_client_class):
        mock_client = Mock()
        mock_response = Mock()
        mock_response.status_code = 200
        mock_response.content = b"<html>"
        mock_response.json.side_effect = ValueError("Invalid JSON")
        mock_response.text = "<html>"
        mock_client.request.return_value = mock_response
        mock_client_class.return_value = mock_client

        with HTTPClient() as client:
            with pytest.raises(ValueError, match="Invalid JSON response"):
                client.get_json("/clientes")

    @patch('httpx.Client')
    def test_retryable_status_codes(self, mock_client_class):
        client = HTTPClient()

        for code in RETRYABLE_STATUS_CODES:
            response = Mock(status_code=code)
            assert client._is_retryable_error("GET", response=response) is True
            assert client._is_retryable_error("POST", response=response) is False

        for code in [200, 400, 404]:
            response = Mock(status_code=code)
            assert client._is_retryable_error("GET", response=response) is False

    @patch('httpx.Client')
    def test_retryable_exceptions(self, mock_client_class):
        client = HTTPClient()

        assert client._is_retryable_error("POST", exception=httpx.ConnectError("x")) is True
        assert client._is_retryable_error("GET", exception=httpx.ReadTimeout("x")) is True
        assert client._is_retryable_error("POST", exception=httpx.ReadTimeout("x")) is False
        assert client._is_retryable_error("GET", exception=ValueError("x")) is False


class TestExtractErrorMessage:

    def test_message_field(self):
        assert extract_error_message(json_response(400, {"message": "RUT duplicado"})) == "RUT duplicado"

    def test_no_message(self):
        assert extract_error_message(json_response(400, {"error": "x"})) is None
        assert extract_error_message(json_response(400, ["x"])) is None
        assert extract_error_message(json_response(400, None)) is None


class TestHTTPClientConfiguration:
    """Test HTTP client configuration options."""

    @patch('httpx.Client')
    def test_custom_timeout(self, mock_client_class):
        HTTPClient(timeout=60.0)
        mock_client_class.assert_called_once_with(timeout=60.0)

    @patch('httpx.Client')
    def test_custom_retry_settings(self, mock_client_class):
        client = HTTPClient(max_retries=5, base_delay=1.0, max_delay=30.0)
        assert client.max_retries == 5
        assert client.base_delay == 1.0
        assert client.max_delay == 30.0

    @patch('httpx.Client')
    def test_create_client_from_settings(self, mock_client_class):
        config = Settings(
            api_base_url="https://erp.example.cl/api/",
            api_token="secret",
            api_timeout=10.0,
            api_max_retries=1,
        )

        client = create_client(config)

        assert client.max_retries == 1
        _, kwargs = mock_client_class.call_args
        assert kwargs["base_url"] == "https://erp.example.cl/api"
        assert kwargs["timeout"] == 10.0
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
