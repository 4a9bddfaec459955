"""Unit tests for the request context and request logging middleware."""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pytest_mock import MockerFixture, MockType

from magazenn.api.middleware.request_context import RequestContextMiddleware
from magazenn.api.middleware.request_logging import RequestLoggingMiddleware
from magazenn.core.config import LogConfig
from magazenn.core.context import RequestContext


def build_app(log_config: LogConfig) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware, log_config=log_config)
    app.add_middleware(RequestContextMiddleware)

    @app.get("/api/categories")
    async def categories() -> dict[str, str | None]:
        return {"correlation_id": RequestContext.get_correlation_id()}

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy"}

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("boom")

    return app


@pytest.fixture
def mock_logger(mocker: MockerFixture) -> MockType:
    return mocker.patch("magazenn.api.middleware.request_logging.logger")


@pytest.fixture
async def middleware_client() -> AsyncGenerator[AsyncClient]:
    app = build_app(LogConfig(slow_request_threshold_ms=10_000))
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.mark.unit
class TestRequestContextMiddleware:
    """Tests for correlation ID handling."""

    async def test_generates_correlation_id(
        self, middleware_client: AsyncClient
    ) -> None:
        response = await middleware_client.get("/api/categories")

        correlation_id = response.headers["X-Correlation-ID"]
        assert correlation_id
        assert response.json() == {"correlation_id": correlation_id}

    async def test_propagates_incoming_correlation_id(
        self, middleware_client: AsyncClient
    ) -> None:
        response = await middleware_client.get(
            "/api/categories", headers={"X-Correlation-ID": "client-abc"}
        )

        assert response.headers["X-Correlation-ID"] == "client-abc"
        assert response.json() == {"correlation_id": "client-abc"}


@pytest.mark.unit
class TestRequestLoggingMiddleware:
    """Tests for request start/completion logging."""

    async def test_logs_start_and_completion(
        self, middleware_client: AsyncClient, mock_logger: MockType
    ) -> None:
        response = await middleware_client.get(
            "/api/categories", params={"name_filter": "boo"}
        )

        messages = [call.args[0] for call in mock_logger.info.call_args_list]
        assert messages == ["Request started", "Request completed"]
        assert mock_logger.info.call_args_list[0].kwargs["query_params"] == {
            "name_filter": "boo"
        }
        assert mock_logger.info.call_args_list[1].kwargs["status_code"] == 200
        assert response.headers["X-Request-ID"]

    async def test_reuses_incoming_request_id(
        self, middleware_client: AsyncClient, mock_logger: MockType
    ) -> None:
        response = await middleware_client.get(
            "/api/categories", headers={"X-Request-ID": "req-1"}
        )

        assert response.headers["X-Request-ID"] == "req-1"
        mock_logger.contextualize.assert_called_once()
        assert mock_logger.contextualize.call_args.kwargs["request_id"] == "req-1"

    async def test_excluded_paths_are_not_logged(
        self, middleware_client: AsyncClient, mock_logger: MockType
    ) -> None:
        response = await middleware_client.get("/health")

        assert response.status_code == 200
        mock_logger.info.assert_not_called()
        assert "X-Request-ID" not in response.headers

    async def test_failure_is_logged(
        self, middleware_client: AsyncClient, mock_logger: MockType
    ) -> None:
        response = await middleware_client.get("/boom")

        assert response.status_code == 500
        mock_logger.error.assert_called_once()
        assert mock_logger.error.call_args.kwargs["error_type"] == "RuntimeError"

    async def test_slow_request_warning(
        self, mocker: MockerFixture, mock_logger: MockType
    ) -> None:
        mock_time = mocker.patch("magazenn.api.middleware.request_logging.time")
        mock_time.perf_counter.side_effect = [0.0, 2.5]
        app = build_app(LogConfig(slow_request_threshold_ms=1000))
        transport = ASGITransport(app=app)

        async with AsyncClient(transport=transport, base_url="http://test") as client:
            await client.get("/api/categories")

        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.kwargs["threshold_ms"] == 1000

    async def test_client_ip_from_proxy_in_production(
        self, mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ENVIRONMENT", "production")
        middleware = RequestLoggingMiddleware(mocker.Mock(), log_config=LogConfig())
        request = mocker.Mock()
        request.headers = {"x-forwarded-for": "10.0.0.1, 10.0.0.2"}

        assert middleware._get_client_ip(request) == "10.0.0.1"

    def test_proxy_headers_ignored_in_development(self, mocker: MockerFixture) -> None:
        middleware = RequestLoggingMiddleware(mocker.Mock(), log_config=LogConfig())
        request = mocker.Mock()
        request.headers = {"x-forwarded-for": "10.0.0.1"}
        request.client.host = "127.0.0.1"

        assert middleware._get_client_ip(request) == "127.0.0.1"
