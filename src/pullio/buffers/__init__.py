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

"""Reusable byte buffers for chunked reads.

Example (production)::

    from pullio.buffers import SHARED_BUFFER_POOL, lease

    with lease(SHARED_BUFFER_POOL, 4096) as buffer:
        count = stream.readinto(memoryview(buffer)[:4096])

Example (testing)::

    from pullio.buffers import TrackingBufferPool

    pool = TrackingBufferPool()
    list(iter_bytes(stream, pool=pool))
    assert pool.outstanding == 0
"""

from __future__ import annotations

from typing import Final

from ._lease import lease
from ._shared import SharedBufferPool
from ._tracking import TrackingBufferPool
from ._types import BufferPool

# Module-level singleton for production use
SHARED_BUFFER_POOL: Final[BufferPool] = SharedBufferPool()
"""Process-wide default pool used when no pool is supplied.

Built with the default limits; applications needing other limits create their
own :class:`SharedBufferPool` (see :meth:`SharedBufferPool.from_config`).
"""

__all__ = [
    "SHARED_BUFFER_POOL",
    "BufferPool",
    "SharedBufferPool",
    "TrackingBufferPool",
    "lease",
]
