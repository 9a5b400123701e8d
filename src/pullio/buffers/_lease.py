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

"""Scoped buffer leases."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from ._types import BufferPool


@contextmanager
def lease(pool: BufferPool, length: int, *, clear: bool = False) -> Iterator[bytearray]:
    """Rent a buffer for the duration of a ``with`` block.

    The buffer goes back to ``pool`` when the block exits, whether it
    completes, raises, or (inside a generator) is closed early.

    Example::

        with lease(SHARED_BUFFER_POOL, 4096) as buffer:
            count = stream.readinto(memoryview(buffer)[:4096])
    """

    buffer = pool.rent(length)
    try:
        yield buffer
    finally:
        pool.return_(buffer, clear=clear)


__all__ = [
    "lease",
]
