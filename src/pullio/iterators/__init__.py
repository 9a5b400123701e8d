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

"""Pull-based iterators over byte and line sources.

Byte iterators:
    ByteChunkIterator: Bytes of a blocking ByteSource, read in chunks.
    AsyncByteChunkIterator: Bytes of an AsyncByteSource, read in chunks.

Line iterators:
    LineIterator: Lines of a blocking LineSource.
    AsyncLineIterator: Lines of an AsyncLineSource, stopping on cancellation.

Source protocols:
    ByteSource, AsyncByteSource, LineSource, AsyncLineSource.
    StreamReaderByteSource adapts an asyncio.StreamReader.
"""

from __future__ import annotations

from ._bytes import (
    AsyncByteChunkIterator,
    ByteChunkIterator,
    aiter_bytes,
    aiter_bytes_into,
    iter_bytes,
    iter_bytes_into,
)
from ._lines import AsyncLineIterator, LineIterator, aiter_lines, iter_lines
from ._sources import (
    AsyncByteSource,
    AsyncLineSource,
    ByteSource,
    LineSource,
    StreamReaderByteSource,
)
from ._state import TERMINAL_STATES, IterationState

__all__ = [
    "TERMINAL_STATES",
    "AsyncByteChunkIterator",
    "AsyncByteSource",
    "AsyncLineIterator",
    "AsyncLineSource",
    "ByteChunkIterator",
    "ByteSource",
    "IterationState",
    "LineIterator",
    "LineSource",
    "StreamReaderByteSource",
    "aiter_bytes",
    "aiter_bytes_into",
    "aiter_lines",
    "iter_bytes",
    "iter_bytes_into",
    "iter_lines",
]
