"""Tests for structured logging helpers."""

from unittest.mock import Mock

import pytest

from services.clientes.log_config import log_api_call, log_operation_result


class TestLogAPICall:

    @pytest.mark.parametrize(
        "status_code,level",
        [(200, "info"), (404, "warning"), (503, "error")],
        ids=["ok", "client_error", "server_error"],
    )
    def test_level_follows_status(self, status_code, level):
        logger = Mock()

        log_api_call(logger, "GET", "/clientes", status_code=status_code, duration_ms=12.3456)

        getattr(logger, level).assert_called_once()
        kwargs = getattr(logger, level).call_args.kwargs
        assert kwargs["status_code"] == status_code
        assert kwargs["duration_ms"] == 12.35
        assert kwargs["method"] == "GET"


class TestLogOperationResult:

    def test_failure_is_a_warning(self):
        logger = Mock()

        log_operation_result(logger, "create", False, codaux="1")

        logger.warning.assert_called_once()
        logger.info.assert_not_called()
