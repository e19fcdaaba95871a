from typing import Awaitable, Callable, TypeVar

from src.platform.exception.exceptions import ConcurrentModificationError
from src.platform.logging.loguru_io import Logger


_T = TypeVar('_T')


async def run_with_optimistic_retry(
    operation: Callable[[], Awaitable[_T]],
    *,
    max_attempts: int,
    label: str,
) -> _T:
    """
    Run a read-modify-write unit of work, re-running it from the read when a
    conditional write lost against a concurrent writer.

    The operation must open its own Unit of Work so every attempt starts from a
    fresh read. After ``max_attempts`` conflicts the last error propagates.
    """
    attempt = 1
    while True:
        try:
            return await operation()
        except ConcurrentModificationError as e:
            if attempt >= max_attempts:
                Logger.base.error(f'⚔️  [RETRY] {label} gave up after {attempt} attempts: {e}')
                raise
            Logger.base.warning(f'⚔️  [RETRY] {label} attempt {attempt} conflicted: {e}')
            attempt += 1
