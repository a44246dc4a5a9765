"""Tests for the with_fallback best-effort decorator."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from thesis_archive.core.fallback import with_fallback


class _Service:
    def __init__(self, fail: bool = True):
        self.fail = fail
        self.db = MagicMock()
        self.db.rollback = AsyncMock()

    @with_fallback({"guest": 0, "user": 0})
    async def breakdown(self):
        if self.fail:
            raise SQLAlchemyError("relation does not exist")
        return {"guest": 4, "user": 2}

    @with_fallback([], recover=lambda self, limit=3: ["fallback"] * limit)
    async def recovered(self, limit=3):
        raise RuntimeError("boom")

    async def _async_recover(self, name):
        return f"recovered {name}"

    @with_fallback(None, recover=lambda self, name: self._async_recover(name))
    async def recovered_async(self, name):
        raise RuntimeError("boom")


class TestWithFallback:
    """Tests for error conversion and recovery."""

    async def test_passes_through_successful_result(self):
        service = _Service(fail=False)

        assert await service.breakdown() == {"guest": 4, "user": 2}
        service.db.rollback.assert_not_awaited()

    async def test_returns_default_and_rolls_back(self):
        service = _Service()

        assert await service.breakdown() == {"guest": 0, "user": 0}
        service.db.rollback.assert_awaited_once()

    async def test_default_is_copied_per_call(self):
        service = _Service()

        first = await service.breakdown()
        first["guest"] = 99

        assert await service.breakdown() == {"guest": 0, "user": 0}

    async def test_recover_receives_call_arguments(self):
        service = _Service()

        assert await service.recovered(limit=2) == ["fallback", "fallback"]

    async def test_recover_may_be_async(self):
        service = _Service()

        assert await service.recovered_async("keywords") == "recovered keywords"

    async def test_rollback_failure_does_not_escape(self):
        service = _Service()
        service.db.rollback = AsyncMock(side_effect=SQLAlchemyError("connection closed"))

        assert await service.breakdown() == {"guest": 0, "user": 0}

    async def test_keeps_wrapped_name(self):
        assert _Service.breakdown.__name__ == "breakdown"

    async def test_validation_errors_raised_before_call_still_propagate(self):
        class _Validating:
            db = None

            async def record(self, value):
                if not value:
                    raise ValueError("value is required")
                return await self._store(value)

            @with_fallback(None)
            async def _store(self, value):
                raise SQLAlchemyError("insert failed")

        service = _Validating()

        with pytest.raises(ValueError, match="value is required"):
            await service.record("")
        assert await service.record("x") is None
