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

"""Source protocols consumed by the iterators.

Sources are owned by the caller: iterators read from them but never close
them.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

__all__ = [
    "AsyncByteSource",
    "AsyncLineSource",
    "ByteSource",
    "LineSource",
    "StreamReaderByteSource",
]


@runtime_checkable
class ByteSource(Protocol):
    """Blocking byte source filling caller-provided buffers.

    ``io.BytesIO``, buffered binary files and raw file objects all satisfy
    this protocol.
    """

    def readinto(self, buffer: memoryview, /) -> int:
        """Read up to ``len(buffer)`` bytes into ``buffer``.

        Returns:
            The number of bytes written into ``buffer``. Zero signals the end
            of input; fewer bytes than requested is a normal short read.
        """
        ...


@runtime_checkable
class AsyncByteSource(Protocol):
    """Suspending byte source filling caller-provided buffers."""

    async def readinto(self, buffer: memoryview, /) -> int:
        """Read up to ``len(buffer)`` bytes, suspending until data is available.

        Returns:
            The number of bytes written. Zero signals the end of input.
        """
        ...


@runtime_checkable
class LineSource(Protocol):
    """Blocking line-oriented text source.

    By default the text file convention applies: each line keeps its
    terminator and an empty string signals the end of input. Text file objects
    and ``io.StringIO`` satisfy this protocol. Readers that strip terminators
    return ``None`` at the end instead; iterate those with
    ``terminated=False`` so that ``""`` stays a blank line.
    """

    def readline(self) -> str | None:
        """Read the next line, or the end marker."""
        ...


@runtime_checkable
class AsyncLineSource(Protocol):
    """Suspending line-oriented text source, with the same end markers."""

    async def readline(self) -> str | None:
        """Read the next line, or the end marker."""
        ...


@dataclass(slots=True, frozen=True)
class StreamReaderByteSource:
    """Adapt an :class:`asyncio.StreamReader` to :class:`AsyncByteSource`.

    Each call performs a single ``read`` on the stream reader and copies the
    result into the supplied buffer.

    Example::

        reader, writer = await asyncio.open_connection(host, port)
        async with aiter_bytes(StreamReaderByteSource(reader)) as data:
            async for value in data:
                ...
    """

    reader: asyncio.StreamReader

    async def readinto(self, buffer: memoryview, /) -> int:
        """Read up to ``len(buffer)`` bytes from the stream reader."""
        data = await self.reader.read(len(buffer))
        count = len(data)
        buffer[:count] = data
        return count
