from unittest.mock import AsyncMock, patch

import pytest

from app.utils.retry import retry


@pytest.mark.asyncio
async def test_retry_succeeds_after_failures():
    call = AsyncMock(side_effect=[ConnectionError("down"), ConnectionError("down"), "pong"])
    call.__name__ = "ping"
    wrapped = retry(tries=3, delay=1, backoff=2)(call)

    with patch("app.utils.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
        assert await wrapped() == "pong"

    assert call.await_count == 3
    assert [c.args[0] for c in sleep.await_args_list] == [1, 2]


@pytest.mark.asyncio
async def test_retry_gives_up():
    call = AsyncMock(side_effect=ConnectionError("down"))
    call.__name__ = "ping"
    wrapped = retry(tries=2, delay=0.5)(call)

    with patch("app.utils.retry.asyncio.sleep", new_callable=AsyncMock):
        with pytest.raises(ConnectionError):
            await wrapped()
    assert call.await_count == 2


@pytest.mark.asyncio
async def test_retry_ignores_other_exceptions():
    call = AsyncMock(side_effect=ValueError("bad config"))
    call.__name__ = "ping"
    wrapped = retry(tries=3, exceptions=(ConnectionError,))(call)

    with pytest.raises(ValueError):
        await wrapped()
    assert call.await_count == 1
