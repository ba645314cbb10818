"""
Tests for the error taxonomy and response type.
"""
import httpx
import pytest

from fetch_facade.errors import (
    ErrorCode,
    HttpError,
    create_cancel_error,
    create_network_error,
    create_status_error,
    create_timeout_error,
    normalize_error,
)
from fetch_facade.types import HttpResponse, RequestConfig


class TestHttpResponse:
    def test_headers_lower_cased(self):
        response = HttpResponse(data=None, status=200, headers={"Content-Type": "application/json"})
        assert response.headers == {"content-type": "application/json"}

    @pytest.mark.parametrize("status", [99, 600, 0])
    def test_invalid_status_rejected(self, status):
        with pytest.raises(ValueError, match="Invalid HTTP status"):
            HttpResponse(data=None, status=status)

    def test_ok(self):
        assert HttpResponse(data=None, status=204).ok is True
        assert HttpResponse(data=None, status=302).ok is False

    def test_dict_round_trip_keeps_request_identity(self):
        config = RequestConfig(url="/users", method="GET", base_url="https://api.example.com", params={"a": 1})
        response = HttpResponse(data=[1, 2], status=200, status_text="OK", config=config)

        rebuilt = HttpResponse.from_dict(response.to_dict())

        assert rebuilt.data == [1, 2]
        assert rebuilt.config.url == "/users"
        assert rebuilt.config.params == {"a": 1}


class TestHttpError:
    def test_flags_are_exclusive(self):
        with pytest.raises(ValueError):
            HttpError("x", is_network_error=True, is_timeout_error=True)

    def test_response_excludes_network_flag(self):
        response = HttpResponse(data=None, status=500)
        with pytest.raises(ValueError):
            HttpError("x", response=response, is_network_error=True)

    def test_status_property(self):
        assert HttpError("x").status is None
        error = create_status_error(HttpResponse(data=None, status=418, status_text="I'm a teapot"))
        assert error.status == 418
        assert error.code == "HTTP_418"
        assert error.message == "Request failed with status 418 (I'm a teapot)"

    def test_factories(self):
        config = RequestConfig(url="/users")

        network = create_network_error(config)
        timeout = create_timeout_error(config, 5.0)
        cancel = create_cancel_error(None, config)

        assert network.code == ErrorCode.NETWORK and network.is_network_error
        assert timeout.code == ErrorCode.TIMEOUT and timeout.is_timeout_error
        assert "5.0s" in timeout.message
        assert cancel.code == ErrorCode.CANCELED and cancel.message == "Request cancelled"
        assert cancel.reason == "Request cancelled"
        assert network.reason is None and timeout.reason is None
        assert all(e.config is config for e in (network, timeout, cancel))


class TestNormalizeError:
    def test_http_error_passthrough_fills_config(self):
        config = RequestConfig(url="/users")
        error = create_network_error()

        assert normalize_error(error, config) is error
        assert error.config is config

    def test_http_error_keeps_own_config(self):
        own = RequestConfig(url="/own")
        error = create_network_error(own)
        normalize_error(error, RequestConfig(url="/other"))
        assert error.config is own

    def test_httpx_timeout(self):
        config = RequestConfig(url="/users", timeout=2.0)
        error = normalize_error(httpx.ReadTimeout("slow"), config)
        assert error.is_timeout_error is True
        assert isinstance(error.__cause__, httpx.ReadTimeout)

    def test_httpx_transport_error(self):
        error = normalize_error(httpx.ConnectError("refused"))
        assert error.is_network_error is True

    def test_connection_error(self):
        assert normalize_error(ConnectionResetError()).is_network_error is True

    def test_unknown(self):
        """
        Path: arbitrary exception
        Decision: UNKNOWN_ERROR with the cause chained and no flags set
        """
        cause = KeyError("missing")
        error = normalize_error(cause, RequestConfig(url="/users"))

        assert error.code == ErrorCode.UNKNOWN
        assert error.__cause__ is cause
        assert not (error.is_network_error or error.is_timeout_error or error.is_cancel_error)
