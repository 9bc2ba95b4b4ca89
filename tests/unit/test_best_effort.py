from unittest.mock import AsyncMock

from realty_crm.lib.best_effort import best_effort


async def _ok():
    return "done"


async def _boom():
    raise RuntimeError("cache write failed")


async def test_successful_operation_returns_true():
    assert await best_effort("noop", _ok()) is True


async def test_failure_is_swallowed_and_reported():
    assert await best_effort("cache summary", _boom()) is False


async def test_failure_rolls_back_given_session():
    session = AsyncMock()

    result = await best_effort("cache summary", _boom(), session=session)

    assert result is False
    session.rollback.assert_awaited_once()


async def test_success_leaves_session_alone():
    session = AsyncMock()

    await best_effort("noop", _ok(), session=session)

    session.rollback.assert_not_awaited()
