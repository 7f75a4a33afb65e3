"""Tests for the in-process rate limit repository."""

import threading

import pytest

from formpipe.domain.rate_limiting.value_objects import Decision
from formpipe.infrastructure.rate_limiting.memory_backend import LOCK_STRIPES, InMemoryRateLimitRepository

NOW = 1_700_000_000


pytestmark = pytest.mark.unit


class TestInMemoryRateLimitRepository:
    @pytest.mark.asyncio
    async def test_limit_then_block_then_reset(self):
        repository = InMemoryRateLimitRepository()
        assert await repository.check_and_consume("k", 2, 60, NOW) == Decision(True, 1, 60)
        assert await repository.check_and_consume("k", 2, 60, NOW + 1) == Decision(True, 0, 59)
        assert await repository.check_and_consume("k", 2, 60, NOW + 2) == Decision(False, 0, 58)
        assert await repository.check_and_consume("k", 2, 60, NOW + 60) == Decision(True, 1, 60)

    def test_concurrent_threads_never_exceed_limit(self):
        repository = InMemoryRateLimitRepository()
        results = []
        lock = threading.Lock()

        def worker():
            for _ in range(25):
                decision = repository.consume("shared", 40, 60, NOW)
                with lock:
                    results.append(decision.allowed)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 40
        assert len(results) == 200

    @pytest.mark.asyncio
    async def test_cleanup_removes_only_expired_windows(self):
        repository = InMemoryRateLimitRepository()
        await repository.check_and_consume("old", 5, 60, NOW)
        await repository.check_and_consume("new", 5, 60, NOW + 50)

        removed = await repository.cleanup_expired(NOW + 70, 60)

        assert removed == 1
        assert (await repository.health_check())["tracked_clients"] == 1

    @pytest.mark.asyncio
    async def test_reset_forgets_client(self):
        repository = InMemoryRateLimitRepository()
        await repository.check_and_consume("k", 1, 60, NOW)
        await repository.reset("k")
        assert (await repository.check_and_consume("k", 1, 60, NOW)).allowed

    @pytest.mark.asyncio
    async def test_storage_stays_bounded_after_cleanup(self):
        repository = InMemoryRateLimitRepository()
        for i in range(5000):
            await repository.check_and_consume(f"client-{i}", 5, 60, NOW)

        removed = await repository.cleanup_expired(NOW + 120, 60)

        assert removed == 5000
        assert repository._windows == {}
        assert len(repository._locks) == LOCK_STRIPES

    def test_keys_sharing_a_stripe_keep_separate_windows(self):
        repository = InMemoryRateLimitRepository(lock_stripes=1)
        assert repository.consume("a", 1, 60, NOW).allowed
        assert repository.consume("b", 1, 60, NOW).allowed
        assert not repository.consume("a", 1, 60, NOW).allowed

    def test_rejects_empty_lock_pool(self):
        with pytest.raises(ValueError):
            InMemoryRateLimitRepository(lock_stripes=0)
