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

"""Recording buffer pool for tests."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from ..errors import BufferPoolError
from ._shared import _require_positive_length


@dataclass(eq=False)
class TrackingBufferPool:
    """Test pool that records every rent and return.

    Buffers are allocated with exactly the requested length. Returning a
    buffer that is not currently rented (including a second return of the
    same buffer) raises :class:`BufferPoolError`.

    Example::

        pool = TrackingBufferPool()

        for _ in iter_bytes(io.BytesIO(b"abc"), pool=pool, buffer_size=2):
            break

        assert pool.rent_count == 1
        assert pool.return_count == 1
        assert pool.outstanding == 0
    """

    _rented_lengths: list[int] = field(default_factory=list[int], repr=False)
    _returned: list[bytearray] = field(default_factory=list[bytearray], repr=False)
    _outstanding: dict[int, bytearray] = field(
        default_factory=dict[int, bytearray], repr=False
    )
    _cleared_returns: int = field(default=0, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def rent(self, minimum_length: int) -> bytearray:
        """Allocate and record a buffer of exactly ``minimum_length`` bytes."""
        length = _require_positive_length(minimum_length)
        buffer = bytearray(length)
        with self._lock:
            self._rented_lengths.append(length)
            self._outstanding[id(buffer)] = buffer
        return buffer

    def return_(self, buffer: bytearray, *, clear: bool = False) -> None:
        """Record the return of a rented buffer."""
        with self._lock:
            if self._outstanding.get(id(buffer)) is not buffer:
                msg = "Buffer returned that is not currently rented from this pool."
                raise BufferPoolError(msg)
            del self._outstanding[id(buffer)]
            self._returned.append(buffer)
            if clear:
                self._cleared_returns += 1
        if clear:
            buffer[:] = bytes(len(buffer))

    @property
    def rent_count(self) -> int:
        """Number of buffers rented so far."""
        with self._lock:
            return len(self._rented_lengths)

    @property
    def return_count(self) -> int:
        """Number of buffers returned so far."""
        with self._lock:
            return len(self._returned)

    @property
    def outstanding(self) -> int:
        """Number of buffers rented and not yet returned."""
        with self._lock:
            return len(self._outstanding)

    @property
    def rented_lengths(self) -> tuple[int, ...]:
        """Requested lengths, in rent order."""
        with self._lock:
            return tuple(self._rented_lengths)

    @property
    def cleared_returns(self) -> int:
        """Number of returns that asked for the buffer to be zeroed."""
        with self._lock:
            return self._cleared_returns


__all__ = [
    "TrackingBufferPool",
]
