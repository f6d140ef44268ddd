from __future__ import annotations

import abc
from collections import deque
from collections.abc import Sequence
import math
import secrets

from loguru import logger

from xkpass.entities import RandomSourceError


RANDOM_INT_SCALE = 1_000_000


class RandomNumberSource(abc.ABC):
    @abc.abstractmethod
    def draw(self, n: int) -> Sequence[float]:
        """
        Return random floats in [0, 1]. `n` is the number needed for one
        password and only a hint: any non-zero amount may be returned.
        """


class SystemRandomSource(RandomNumberSource):
    def __init__(self) -> None:
        self._random = secrets.SystemRandom()

    def draw(self, n: int) -> Sequence[float]:
        return [self._random.random() for _ in range(max(n, 1))]


def to_bounded_int(value: float, bound: int) -> int:
    """Map a float in [0, 1] to an integer in [0, bound).

    Uses floor(value * 1e6) mod bound. When `bound` does not divide one
    million the lower results are very slightly more likely than the higher
    ones; existing password vectors depend on this exact formula.
    """
    if isinstance(bound, bool) or not isinstance(bound, int) or bound <= 0:
        raise ValueError(f"bound must be a positive integer, got {bound!r}")
    return math.floor(value * RANDOM_INT_SCALE) % bound


def _is_valid_draw(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    # NaN fails both comparisons
    return 0 <= value <= 1


class RandomCache:
    """FIFO buffer of random floats, refilled from a `RandomNumberSource`.

    Values are handed out in exactly the order the source returned them.
    """

    def __init__(self, source: RandomNumberSource, batch_size: int = 1) -> None:
        self.source = source
        self.batch_size = batch_size
        self._queue: deque[float] = deque()

    def __len__(self) -> int:
        return len(self._queue)

    def clear(self) -> None:
        self._queue.clear()

    def _refill(self) -> None:
        logger.debug("Random cache empty - requesting {} values", self.batch_size)
        batch = list(self.source.draw(self.batch_size))
        if not batch:
            raise RandomSourceError("Random source did not return any random numbers")
        for value in batch:
            if not _is_valid_draw(value):
                raise RandomSourceError(
                    f"Random source returned an invalid value ({value!r})"
                )
        self._queue.extend(float(value) for value in batch)

    def next(self) -> float:
        if not self._queue:
            self._refill()
        return self._queue.popleft()

    def next_int(self, bound: int) -> int:
        return to_bounded_int(self.next(), bound)
