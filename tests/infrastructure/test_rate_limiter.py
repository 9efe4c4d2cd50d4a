# tests/infrastructure/test_rate_limiter.py

import time
import random
import asyncio
from datetime import datetime, timedelta
from unittest.mock import patch, AsyncMock

import pytest

from docksync.infrastructure.rate_limiter import RateLimiter, RateLimitInfo


## 1. RateLimitInfo
# -----------------

def test_rate_limit_info_is_exhausted():
    info = RateLimitInfo()
    info.remaining = 11
    assert not info.is_exhausted

    info.remaining = 10
    assert info.is_exhausted

    info.remaining = 0
    assert info.is_exhausted


def test_rate_limit_info_reset_in_seconds():
    info = RateLimitInfo()

    mock_now = datetime(2026, 10, 19, 12, 0, 0)
    with patch('docksync.infrastructure.rate_limiter.datetime', autospec=True) as mock_datetime:
        mock_datetime.now.return_value = mock_now

        info.reset_time = mock_now + timedelta(seconds=30)
        assert info.reset_in_seconds == 30.0

        info.reset_time = mock_now - timedelta(seconds=30)
        assert info.reset_in_seconds == 0.0

        info.reset_time = None
        assert info.reset_in_seconds == 0.0


## 2. Construction
# ----------------

def test_ratelimiter_defaults_do_not_pace_requests():
    rl = RateLimiter()
    assert rl.default_delay == 0.0
    assert rl._calculate_delay() == 0.0


def test_adaptive_delay_doubles_per_consecutive_limit():
    rl = RateLimiter(default_delay=1.0, max_delay=60.0)
    rl._consecutive_limits = 3

    delay = rl._calculate_delay()

    assert 7.2 <= delay <= 8.8


def test_adaptive_delay_is_capped():
    rl = RateLimiter(default_delay=1.0, max_delay=5.0)
    rl._consecutive_limits = 10
    assert rl._calculate_delay() == 5.0


def test_non_adaptive_delay_is_constant():
    rl = RateLimiter(default_delay=0.5, adaptive=False)
    rl._consecutive_limits = 4
    assert rl._calculate_delay() == 0.5


## 3. Header parsing
# ------------------

@pytest.mark.asyncio
async def test_update_rate_limit_info_sets_values_correctly():
    rl = RateLimiter()
    reset_timestamp = int(time.time()) + 60

    await rl.update_rate_limit_info({
        "x-ratelimit-limit": "5000",
        "x-ratelimit-remaining": "4500",
        "x-ratelimit-used": "500",
        "x-ratelimit-reset": str(reset_timestamp),
    })
    info = rl.rate_limit_info

    assert info.limit == 5000
    assert info.remaining == 4500
    assert info.used == 500
    assert info.reset_time == datetime.fromtimestamp(reset_timestamp)
    assert not info.is_exhausted


@pytest.mark.asyncio
async def test_update_rate_limit_tracks_consecutive_limits():
    rl = RateLimiter()

    await rl.update_rate_limit_info({"x-ratelimit-remaining": "5"})
    await rl.update_rate_limit_info({"x-ratelimit-remaining": "0"})
    assert rl._consecutive_limits == 2

    await rl.update_rate_limit_info({"x-ratelimit-remaining": "100"})
    assert rl._consecutive_limits == 0


@pytest.mark.asyncio
async def test_missing_headers_leave_state_untouched():
    rl = RateLimiter()
    await rl.update_rate_limit_info({"content-type": "application/json"})

    assert rl.rate_limit_info.remaining == 5000
    assert rl._consecutive_limits == 0


## 4. acquire()
# -------------

@pytest.mark.asyncio
@patch('asyncio.sleep', new_callable=AsyncMock)
async def test_acquire_waits_for_reset_when_exhausted(mock_sleep):
    rl = RateLimiter()

    mock_now = datetime(2026, 10, 19, 12, 0, 0)
    with patch('docksync.infrastructure.rate_limiter.datetime', autospec=True) as mock_datetime:
        mock_datetime.now.return_value = mock_now
        rl.rate_limit_info.remaining = 5
        rl.rate_limit_info.reset_time = mock_now + timedelta(seconds=15)

        await rl.acquire()

    mock_sleep.assert_any_await(15.0)


@pytest.mark.asyncio
@patch('asyncio.sleep', new_callable=AsyncMock)
async def test_acquire_wait_is_capped_by_max_delay(mock_sleep):
    rl = RateLimiter(max_delay=10.0)

    mock_now = datetime(2026, 10, 19, 12, 0, 0)
    with patch('docksync.infrastructure.rate_limiter.datetime', autospec=True) as mock_datetime:
        mock_datetime.now.return_value = mock_now
        rl.rate_limit_info.remaining = 0
        rl.rate_limit_info.reset_time = mock_now + timedelta(hours=1)

        await rl.acquire()

    mock_sleep.assert_any_await(10.0)


@pytest.mark.asyncio
@patch('asyncio.sleep', new_callable=AsyncMock)
async def test_acquire_does_not_sleep_with_quota_and_no_delay(mock_sleep):
    rl = RateLimiter()

    await rl.acquire()
    await rl.acquire()

    mock_sleep.assert_not_awaited()


@pytest.mark.asyncio
@patch('asyncio.sleep', new_callable=AsyncMock)
async def test_acquire_spaces_requests_by_delay(mock_sleep):
    rl = RateLimiter(default_delay=1.0, adaptive=False)
    rl._last_request = 1000.0

    with patch('time.time', side_effect=[1000.25, 1001.0]):
        await rl.acquire()

    mock_sleep.assert_awaited_once_with(0.75)
    assert rl._last_request == 1001.0


## 5. Task safety
# ---------------

@pytest.mark.asyncio
async def test_update_rate_limit_info_is_task_safe():
    rl = RateLimiter()

    async def worker(i):
        await asyncio.sleep(0.01 * random.random())
        await rl.update_rate_limit_info({
            "x-ratelimit-limit": str(5000 + i),
            "x-ratelimit-remaining": str(4000 + i),
        })

    await asyncio.gather(*(worker(i) for i in range(50)))

    i = rl.rate_limit_info.limit - 5000
    assert rl.rate_limit_info.remaining == 4000 + i
