"""
File based rate limit repository.

One JSON file per client key, named after the SHA-256 digest of the key, holds
`{"start": <epoch seconds>, "count": <n>}`. The whole read-check-increment-write
cycle runs under an exclusive `fcntl.flock`, which keeps the count correct
across worker processes on one host without a shared cache.

Locking is non-blocking with a bounded retry loop so a stuck holder turns into
a backend failure (and a fail-open decision) instead of a hung request. The
blocking file I/O runs in a worker thread.
"""

import asyncio
import errno
import fcntl
import hashlib
import json
import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any, Dict, Iterator, Optional

import structlog

from formpipe.core.exceptions import BackendUnavailableError
from formpipe.domain.rate_limiting.repositories import RateLimitRepository, apply_window
from formpipe.domain.rate_limiting.value_objects import Decision, RateWindow

logger = structlog.get_logger(__name__)

LOCK_RETRY_INTERVAL = 0.01


class FileRateLimitRepository(RateLimitRepository):
    name = "file"

    def __init__(self, storage_dir: str | Path, lock_timeout: float = 1.0):
        self.storage_dir = Path(storage_dir)
        self.lock_timeout = lock_timeout

    def path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.storage_dir / f"{digest}.json"

    @contextmanager
    def _locked(self, path: Path, create: bool = True) -> Iterator[Optional[IO[str]]]:
        """Open `path` and hold an exclusive lock on it for the block.

        Yields None when `create` is False and the file does not exist.
        """
        deadline = time.monotonic() + self.lock_timeout
        while True:
            try:
                handle = open(path, "a+" if create else "r+", encoding="utf-8")
            except FileNotFoundError as e:
                if not create:
                    yield None
                    return
                raise BackendUnavailableError(f"Cannot open rate limit file: {e}") from e
            except OSError as e:
                raise BackendUnavailableError(f"Cannot open rate limit file: {e}") from e

            try:
                self._acquire(handle, deadline)
                # The file may have been removed by cleanup while we waited for
                # the lock; in that case retry on the live path.
                if not self._is_current(handle, path):
                    if create:
                        continue
                    yield None
                    return
                try:
                    yield handle
                finally:
                    handle.flush()
                    fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
                return
            finally:
                handle.close()

    def _acquire(self, handle: IO[str], deadline: float) -> None:
        while True:
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                return
            except OSError as e:
                if e.errno not in (errno.EAGAIN, errno.EACCES, errno.EWOULDBLOCK):
                    raise BackendUnavailableError(f"Cannot lock rate limit file: {e}") from e
            if time.monotonic() >= deadline:
                raise BackendUnavailableError(
                    f"Timed out after {self.lock_timeout}s waiting for rate limit file lock"
                )
            time.sleep(LOCK_RETRY_INTERVAL)

    @staticmethod
    def _is_current(handle: IO[str], path: Path) -> bool:
        try:
            return os.fstat(handle.fileno()).st_ino == os.stat(path).st_ino
        except FileNotFoundError:
            return False

    @staticmethod
    def _read_window(handle: IO[str]) -> Optional[RateWindow]:
        handle.seek(0)
        raw = handle.read()
        if not raw.strip():
            return None
        try:
            return RateWindow.from_dict(json.loads(raw))
        except (ValueError, AttributeError) as e:
            logger.warning("Discarding corrupt rate limit state", error=str(e))
            return None

    @staticmethod
    def _write_window(handle: IO[str], window: RateWindow) -> None:
        handle.seek(0)
        handle.truncate()
        handle.write(json.dumps(window.to_dict()))

    def consume(self, key: str, limit: int, window_seconds: int, now: int) -> Decision:
        """Blocking window step under the file lock."""
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BackendUnavailableError(f"Cannot create rate limit directory: {e}") from e

        with self._locked(self.path_for(key)) as handle:
            current = self._read_window(handle)
            to_store, decision = apply_window(current, now, limit, window_seconds)
            if to_store is not None:
                self._write_window(handle, to_store)
            return decision

    def _remove_if_expired(self, path: Path, now: int, window_seconds: Optional[int]) -> bool:
        with self._locked(path, create=False) as handle:
            if handle is None:
                return False
            window = self._read_window(handle)
            if window_seconds is not None and window is not None and not window.is_expired(now, window_seconds):
                return False
            path.unlink(missing_ok=True)
            return True

    def _cleanup(self, now: int, window_seconds: int) -> int:
        if not self.storage_dir.is_dir():
            return 0
        removed = 0
        for path in self.storage_dir.glob("*.json"):
            try:
                if self._remove_if_expired(path, now, window_seconds):
                    removed += 1
            except BackendUnavailableError as e:
                logger.warning("Skipping locked rate limit file during cleanup", file=path.name, error=str(e))
        return removed

    async def check_and_consume(self, key: str, limit: int, window_seconds: int, now: int) -> Decision:
        return await asyncio.to_thread(self.consume, key, limit, window_seconds, now)

    async def reset(self, key: str) -> None:
        await asyncio.to_thread(self._remove_if_expired, self.path_for(key), 0, None)

    async def cleanup_expired(self, now: int, window_seconds: int) -> int:
        removed = await asyncio.to_thread(self._cleanup, now, window_seconds)
        if removed:
            logger.info("Removed expired rate limit files", removed=removed)
        return removed

    async def health_check(self) -> Dict[str, Any]:
        directory = self.storage_dir
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return {"healthy": False, "error": str(e), "storage_dir": str(directory)}
        writable = os.access(directory, os.W_OK)
        return {"healthy": writable, "storage_dir": str(directory)}
