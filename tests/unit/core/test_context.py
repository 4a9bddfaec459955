"""Unit tests for magazenn/core/context.py module."""

import asyncio
import uuid

import pytest

from magazenn.core.context import (
    RequestContext,
    generate_correlation_id,
    generate_request_id,
)


@pytest.mark.unit
class TestRequestContext:
    """Tests for correlation ID storage."""

    def test_default_is_none(self) -> None:
        assert RequestContext.get_correlation_id() is None

    def test_set_get_clear(self) -> None:
        RequestContext.set_correlation_id("abc-123")
        assert RequestContext.get_correlation_id() == "abc-123"

        RequestContext.clear()
        assert RequestContext.get_correlation_id() is None

    async def test_isolated_between_tasks(self) -> None:
        async def worker(value: str) -> str | None:
            RequestContext.set_correlation_id(value)
            await asyncio.sleep(0)
            return RequestContext.get_correlation_id()

        results = await asyncio.gather(worker("first"), worker("second"))

        assert results == ["first", "second"]
        assert RequestContext.get_correlation_id() is None


@pytest.mark.unit
class TestIdGeneration:
    """Tests for correlation and request ID generators."""

    def test_correlation_id_is_uuid4(self) -> None:
        value = generate_correlation_id()
        assert uuid.UUID(value).version == 4

    def test_request_id_format(self) -> None:
        value = generate_request_id()

        assert value.startswith("req-")
        assert uuid.UUID(value.removeprefix("req-")).version == 4

    def test_ids_are_unique(self) -> None:
        assert len({generate_request_id() for _ in range(50)}) == 50
