# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Thread-safe bucketed buffer pool."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Final

from ..config import (
    DEFAULT_MAX_BUFFERS_PER_BUCKET,
    DEFAULT_MAX_POOLED_LENGTH,
    MIN_POOLED_LENGTH,
    IteratorConfig,
)
from ..errors import InvalidArgumentError
from ..runtime.logging import StructuredLogger, get_logger

_MIN_BUCKET_LENGTH: Final[int] = MIN_POOLED_LENGTH

_logger: StructuredLogger = get_logger(
    "pullio.buffers.shared",
    context={"component": "buffer_pool"},
)


def _bucket_index(length: int) -> int:
    """Return the bucket whose buffers are the smallest fitting ``length``."""
    return max(0, (length - 1).bit_length() - (_MIN_BUCKET_LENGTH.bit_length() - 1))


def _require_positive_length(minimum_length: object) -> int:
    if (
        isinstance(minimum_length, bool)
        or not isinstance(minimum_length, int)
        or minimum_length <= 0
    ):
        msg = f"minimum_length must be a positive integer (got {minimum_length!r})."
        raise InvalidArgumentError(msg)
    return minimum_length


@dataclass(eq=False)
class SharedBufferPool:
    """Buffer pool keeping idle buffers in power-of-two size classes.

    Requests are rounded up to the next power of two (at least 16 bytes) so a
    returned buffer can serve any later request of its size class. The largest
    size class is the biggest power of two not above ``max_pooled_length``;
    requests beyond it receive a fresh buffer of exactly the requested length
    that is simply dropped when returned. Each size class retains at most
    ``max_buffers_per_bucket`` idle buffers.

    All bucket access happens under one lock, which is never held while the
    caller uses a buffer.

    Example::

        pool = SharedBufferPool()
        buffer = pool.rent(4096)
        try:
            count = stream.readinto(memoryview(buffer)[:4096])
        finally:
            pool.return_(buffer)
    """

    max_buffers_per_bucket: int = DEFAULT_MAX_BUFFERS_PER_BUCKET
    max_pooled_length: int = DEFAULT_MAX_POOLED_LENGTH
    _buckets: list[list[bytearray]] = field(init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        if self.max_buffers_per_bucket < 0:
            msg = "max_buffers_per_bucket must be non-negative"
            raise InvalidArgumentError(msg)
        if (
            isinstance(self.max_pooled_length, bool)
            or not isinstance(self.max_pooled_length, int)
            or self.max_pooled_length < _MIN_BUCKET_LENGTH
        ):
            msg = (
                f"max_pooled_length must be an integer of at least "
                f"{_MIN_BUCKET_LENGTH} (got {self.max_pooled_length!r})."
            )
            raise InvalidArgumentError(msg)
        # Round down: no retained buffer may exceed max_pooled_length.
        bucket_count = (
            self.max_pooled_length.bit_length() - _MIN_BUCKET_LENGTH.bit_length() + 1
        )
        self._buckets = [[] for _ in range(bucket_count)]

    @classmethod
    def from_config(cls, config: IteratorConfig) -> SharedBufferPool:
        """Create a pool sized by ``config``."""
        return cls(
            max_buffers_per_bucket=config.max_buffers_per_bucket,
            max_pooled_length=config.max_pooled_length,
        )

    @property
    def largest_bucket_length(self) -> int:
        """Length of the buffers in the largest size class."""
        return _MIN_BUCKET_LENGTH << (len(self._buckets) - 1)

    def idle_count(self) -> int:
        """Return the number of buffers currently waiting to be rented."""
        with self._lock:
            return sum(len(bucket) for bucket in self._buckets)

    def rent(self, minimum_length: int) -> bytearray:
        """Rent a buffer holding at least ``minimum_length`` bytes."""
        length = _require_positive_length(minimum_length)
        if length > self.largest_bucket_length:
            return bytearray(length)
        index = _bucket_index(length)
        with self._lock:
            bucket = self._buckets[index]
            if bucket:
                return bucket.pop()
        return bytearray(_MIN_BUCKET_LENGTH << index)

    def return_(self, buffer: bytearray, *, clear: bool = False) -> None:
        """Return a buffer obtained from :meth:`rent`.

        Raises:
            InvalidArgumentError: If ``buffer`` is not a bytearray or its
                length is not one this pool hands out.
        """
        if not isinstance(buffer, bytearray):
            msg = f"Only bytearray buffers can be returned (got {type(buffer).__name__})."
            raise InvalidArgumentError(msg)
        length = len(buffer)
        if length > self.largest_bucket_length:
            return
        index = _bucket_index(length)
        if length != _MIN_BUCKET_LENGTH << index:
            msg = f"Buffer of length {length} was not rented from this pool."
            raise InvalidArgumentError(msg)
        if clear:
            buffer[:] = bytes(length)
        with self._lock:
            bucket = self._buckets[index]
            if len(bucket) < self.max_buffers_per_bucket:
                bucket.append(buffer)
                return
        _logger.debug(
            "dropping returned buffer, size class full",
            event="pool.trimmed",
            context={"length": length},
        )


__all__ = [
    "SharedBufferPool",
]
