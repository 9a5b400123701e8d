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

"""Buffered, cancellable, pull-based iteration over byte and line sources."""

from __future__ import annotations

from .buffers import SHARED_BUFFER_POOL, BufferPool, SharedBufferPool, lease
from .config import DEFAULT_BUFFER_SIZE, IteratorConfig, load_config
from .errors import (
    BufferPoolError,
    InvalidArgumentError,
    PullioError,
    SourceContractError,
)
from .iterators import (
    AsyncByteChunkIterator,
    AsyncLineIterator,
    ByteChunkIterator,
    IterationState,
    LineIterator,
    StreamReaderByteSource,
    aiter_bytes,
    aiter_bytes_into,
    aiter_lines,
    iter_bytes,
    iter_bytes_into,
    iter_lines,
)
from .threading import CancellationToken, CancelledException, SimpleCancellationToken

__all__ = [
    "DEFAULT_BUFFER_SIZE",
    "SHARED_BUFFER_POOL",
    "AsyncByteChunkIterator",
    "AsyncLineIterator",
    "BufferPool",
    "BufferPoolError",
    "ByteChunkIterator",
    "CancellationToken",
    "CancelledException",
    "InvalidArgumentError",
    "IterationState",
    "IteratorConfig",
    "LineIterator",
    "PullioError",
    "SharedBufferPool",
    "SimpleCancellationToken",
    "SourceContractError",
    "StreamReaderByteSource",
    "aiter_bytes",
    "aiter_bytes_into",
    "aiter_lines",
    "iter_bytes",
    "iter_bytes_into",
    "iter_lines",
    "lease",
    "load_config",
]
