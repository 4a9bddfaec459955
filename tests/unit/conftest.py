"""Shared fixtures for unit tests."""

import uuid
from collections.abc import AsyncGenerator, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from pytest_mock import MockerFixture, MockType
from sqlalchemy.ext.asyncio import AsyncSession

from magazenn.api.main import create_app
from magazenn.core.config import Settings
from magazenn.domain.categories.dependencies import get_category_service
from magazenn.domain.categories.models import Category
from magazenn.domain.categories.repository import CategoryRepository
from magazenn.domain.categories.service import CategoryService

CategoryFactory = Callable[..., Category]


@pytest.fixture
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Provide a real Settings object with test values."""
    monkeypatch.setenv("APP_NAME", "TestApp")
    monkeypatch.setenv("APP_VERSION", "1.0.0")
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("API_HOST", "127.0.0.1")
    monkeypatch.setenv("API_PORT", "3000")
    monkeypatch.setenv("OBSERVABILITY_CONFIG__ENABLE_TRACING", "false")
    return Settings()


@pytest.fixture
def make_category() -> CategoryFactory:
    """Build detached Category instances with a fixed or random id."""

    def _make(
        name: str = "Electronics",
        description: str | None = "Phones and laptops",
        category_id: uuid.UUID | None = None,
    ) -> Category:
        return Category(
            id=category_id or uuid.uuid4(), name=name, description=description
        )

    return _make


@pytest.fixture
def mock_async_session(mocker: MockerFixture) -> MockType:
    """Provide an AsyncSession mock; ``add``/``add_all`` stay synchronous."""
    session = mocker.AsyncMock(spec=AsyncSession)
    session.add = mocker.Mock()
    session.add_all = mocker.Mock()
    return session


@pytest.fixture
def mock_repository(mocker: MockerFixture) -> MockType:
    return mocker.AsyncMock(spec=CategoryRepository)


@pytest.fixture
def mock_service(mocker: MockerFixture) -> MockType:
    return mocker.AsyncMock(spec=CategoryService)


@pytest.fixture
async def api_client(
    mock_settings: Settings, mock_service: MockType
) -> AsyncGenerator[AsyncClient]:
    """Client for an application whose category service is a mock."""
    app = create_app(mock_settings)
    app.dependency_overrides[get_category_service] = lambda: mock_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
