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

"""Chunked byte sources exposed as one-byte-at-a-time iterators.

A :class:`ByteChunkIterator` reads its source in chunks of ``buffer_size``
bytes into a single buffer and hands the bytes out one at a time. The buffer
is either rented from a :class:`~pullio.buffers.BufferPool` on the first pull
or supplied by the caller. A rented buffer goes back to its pool exactly once,
when the iteration ends for any reason: end of input, ``close()``, leaving a
``with`` block, an error raised by the source, cancellation, or garbage
collection of an abandoned iterator.

Example::

    with iter_bytes(stream, buffer_size=8192) as data:
        for value in data:
            checksum = (checksum + value) & 0xFFFF

    async with aiter_bytes(StreamReaderByteSource(reader)) as data:
        async for value in data:
            ...
"""

from __future__ import annotations

import asyncio
from collections.abc import Buffer
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Self

from ..buffers import SHARED_BUFFER_POOL, BufferPool, lease
from ..config import DEFAULT_BUFFER_SIZE, IteratorConfig
from ..errors import InvalidArgumentError, SourceContractError
from ..runtime.logging import StructuredLogger, get_logger
from ..threading import CancellationToken, CancelledException
from ._sources import AsyncByteSource, ByteSource
from ._state import IterationState

__all__ = [
    "AsyncByteChunkIterator",
    "ByteChunkIterator",
    "aiter_bytes",
    "aiter_bytes_into",
    "iter_bytes",
    "iter_bytes_into",
]

_CANCELLATION_ERRORS = (CancelledException, asyncio.CancelledError)

_logger: StructuredLogger = get_logger(
    "pullio.iterators.bytes",
    context={"component": "byte_iterator"},
)


def _require_source(source: object) -> None:
    if source is None:
        msg = "source must not be None."
        raise InvalidArgumentError(msg)


def _require_buffer_size(buffer_size: object) -> int:
    if (
        isinstance(buffer_size, bool)
        or not isinstance(buffer_size, int)
        or buffer_size <= 0
    ):
        msg = f"buffer_size must be a positive integer (got {buffer_size!r})."
        raise InvalidArgumentError(msg)
    return buffer_size


def _writable_view(buffer: Buffer) -> memoryview:
    if buffer is None:
        msg = "buffer must not be None."
        raise InvalidArgumentError(msg)
    try:
        view = memoryview(buffer)
    except TypeError:
        msg = f"buffer must support the buffer protocol (got {type(buffer).__name__})."
        raise InvalidArgumentError(msg) from None
    if view.readonly:
        msg = "buffer must be writable."
        raise InvalidArgumentError(msg)
    if not view.c_contiguous:
        msg = "buffer must be contiguous."
        raise InvalidArgumentError(msg)
    if view.nbytes == 0:
        msg = "buffer must have a positive length."
        raise InvalidArgumentError(msg)
    if view.format != "B" or view.ndim != 1:
        view = view.cast("B")
    return view


@dataclass(slots=True, eq=False, kw_only=True)
class _ChunkCursor:
    """Buffer lifecycle and read cursor shared by both byte iterators.

    ``_read`` counts the valid bytes in the current chunk and ``_index`` points
    at the next one to hand out; ``0 <= _index <= _read <= _capacity``.
    """

    _capacity: int
    _pool: BufferPool | None = None
    _supplied: memoryview | None = field(default=None, repr=False)
    _token: CancellationToken | None = None
    _chunk: memoryview | None = field(default=None, init=False, repr=False)
    _read: int = field(default=0, init=False)
    _index: int = field(default=0, init=False)
    _bytes_read: int = field(default=0, init=False)
    _state: IterationState = field(default=IterationState.IDLE, init=False)
    _resources: ExitStack = field(default_factory=ExitStack, init=False, repr=False)

    @classmethod
    def pooled(
        cls,
        source: object,
        *,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        pool: BufferPool = SHARED_BUFFER_POOL,
        token: CancellationToken | None = None,
    ) -> Self:
        """Iterate ``source`` through a buffer rented from ``pool``.

        Args:
            source: The byte source to read from. Never closed by the iterator.
            buffer_size: Bytes requested per read. Must be positive.
            pool: Pool the buffer is rented from on the first pull.
            token: Optional cancellation token checked before every read.

        Raises:
            InvalidArgumentError: If ``source`` or ``pool`` is ``None`` or
                ``buffer_size`` is not a positive integer.
        """
        _require_source(source)
        capacity = _require_buffer_size(buffer_size)
        if pool is None:
            msg = "pool must not be None."
            raise InvalidArgumentError(msg)
        return cls(_source=source, _capacity=capacity, _pool=pool, _token=token)  # type: ignore[call-arg]

    @classmethod
    def from_config(
        cls,
        source: object,
        config: IteratorConfig,
        *,
        pool: BufferPool = SHARED_BUFFER_POOL,
        token: CancellationToken | None = None,
    ) -> Self:
        """Iterate ``source`` in chunks of ``config.buffer_size`` bytes.

        The pool limits in ``config`` describe a pool, not an iteration; pass
        ``SharedBufferPool.from_config(config)`` as ``pool`` to apply them.
        """
        return cls.pooled(
            source, buffer_size=config.buffer_size, pool=pool, token=token
        )

    @classmethod
    def over(
        cls,
        source: object,
        buffer: Buffer,
        *,
        token: CancellationToken | None = None,
    ) -> Self:
        """Iterate ``source`` through a caller-owned ``buffer``.

        Each read requests up to ``len(buffer)`` bytes. The buffer is never
        rented or returned; the caller keeps ownership.

        Raises:
            InvalidArgumentError: If ``source`` or ``buffer`` is ``None``, or
                ``buffer`` is empty, read-only or not contiguous.
        """
        _require_source(source)
        view = _writable_view(buffer)
        iterator = cls(  # type: ignore[call-arg]
            _source=source, _capacity=view.nbytes, _supplied=view, _token=token
        )
        iterator._resources.callback(view.release)
        return iterator

    @property
    def state(self) -> IterationState:
        """Current lifecycle state."""
        return self._state

    @property
    def buffer_size(self) -> int:
        """Maximum number of bytes requested per read."""
        return self._capacity

    @property
    def bytes_read(self) -> int:
        """Total bytes read from the source so far."""
        return self._bytes_read

    def _begin_fetch(self) -> memoryview:
        if self._state is IterationState.FETCHING:
            msg = "next element requested while a read is already in flight"
            raise RuntimeError(msg)
        if self._state is IterationState.IDLE:
            try:
                self._acquire()
            except BaseException:
                self._finish(IterationState.FAULTED)
                raise
        self._state = IterationState.FETCHING
        chunk = self._chunk
        assert chunk is not None
        return chunk

    def _acquire(self) -> None:
        if self._pool is not None:
            buffer = self._resources.enter_context(lease(self._pool, self._capacity))
            view = memoryview(buffer)
            self._resources.callback(view.release)
        else:
            assert self._supplied is not None
            view = self._supplied
        chunk = view[: self._capacity]
        self._resources.callback(chunk.release)
        self._chunk = chunk
        _logger.debug(
            "chunk buffer acquired",
            event="buffer.leased",
            context={"buffer_size": self._capacity, "pooled": self._pool is not None},
        )

    def _accept(self, count: object) -> bool:
        if (
            isinstance(count, bool)
            or not isinstance(count, int)
            or not 0 <= count <= self._capacity
        ):
            self._finish(IterationState.FAULTED)
            msg = (
                f"Source returned {count!r} from readinto; expected an integer "
                f"between 0 and {self._capacity}."
            )
            raise SourceContractError(msg)
        if count == 0:
            self._finish(IterationState.EXHAUSTED)
            return False
        self._read = count
        self._index = 0
        self._bytes_read += count
        self._state = IterationState.EMITTING
        return True

    def _fail(self, error: BaseException) -> None:
        if isinstance(error, _CANCELLATION_ERRORS):
            self._finish(IterationState.CANCELLED)
        else:
            self._finish(IterationState.FAULTED)

    def _next_buffered(self) -> int:
        chunk = self._chunk
        assert chunk is not None
        value = chunk[self._index]
        self._index += 1
        return value

    def _finish(self, state: IterationState) -> None:
        if self._state.terminal:
            return
        leased = self._state is not IterationState.IDLE
        self._state = state
        self._read = self._index = 0
        self._chunk = None
        self._resources.close()
        if leased:
            _logger.debug(
                "chunk buffer released",
                event="buffer.released",
                context={"buffer_size": self._capacity, "pooled": self._pool is not None},
            )
        _logger.debug(
            f"byte iteration {state.value}",
            event=f"iteration.{state.value}",
            context={"bytes_read": self._bytes_read},
        )

    def close(self) -> None:
        """End the iteration early and release the buffer.

        Safe to call more than once and after the iteration has ended.

        Raises:
            RuntimeError: If a read is currently in flight.
        """
        if self._state is IterationState.FETCHING:
            msg = "cannot close while a read is in flight"
            raise RuntimeError(msg)
        self._finish(IterationState.EXHAUSTED)

    def __del__(self) -> None:
        state = getattr(self, "_state", IterationState.EXHAUSTED)
        resources = getattr(self, "_resources", None)
        if resources is not None and not state.terminal:
            resources.close()


@dataclass(slots=True, eq=False, kw_only=True)
class ByteChunkIterator(_ChunkCursor):
    """Blocking iterator producing the bytes of a :class:`ByteSource`.

    Each ``next()`` either returns a byte already in the buffer or performs
    exactly one ``readinto`` against the source. Iterators are single-use:
    once finished they keep raising ``StopIteration``.
    """

    _source: ByteSource

    def __iter__(self) -> Self:
        return self

    def __next__(self) -> int:
        if self._index < self._read:
            return self._next_buffered()
        if self._state.terminal:
            raise StopIteration
        chunk = self._begin_fetch()
        try:
            if self._token is not None:
                self._token.check()
            count = self._source.readinto(chunk)
        except BaseException as error:
            self._fail(error)
            raise
        if not self._accept(count):
            raise StopIteration
        return self._next_buffered()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()


@dataclass(slots=True, eq=False, kw_only=True)
class AsyncByteChunkIterator(_ChunkCursor):
    """Suspending iterator producing the bytes of an :class:`AsyncByteSource`.

    ``__anext__`` only awaits when the buffer is exhausted; bytes already in
    the buffer are returned without suspending. Cancelling the awaiting task
    releases the buffer before ``asyncio.CancelledError`` propagates.
    """

    _source: AsyncByteSource

    def __aiter__(self) -> Self:
        return self

    async def __anext__(self) -> int:
        if self._index < self._read:
            return self._next_buffered()
        if self._state.terminal:
            raise StopAsyncIteration
        chunk = self._begin_fetch()
        try:
            if self._token is not None:
                self._token.check()
            count = await self._source.readinto(chunk)
        except BaseException as error:
            self._fail(error)
            raise
        if not self._accept(count):
            raise StopAsyncIteration
        return self._next_buffered()

    async def aclose(self) -> None:
        """End the iteration early and release the buffer."""
        self.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.aclose()


def iter_bytes(
    source: ByteSource,
    *,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    pool: BufferPool = SHARED_BUFFER_POOL,
    token: CancellationToken | None = None,
) -> ByteChunkIterator:
    """Iterate the bytes of ``source`` using a pooled buffer.

    Arguments are validated immediately; no read happens until the first
    pull. See :meth:`ByteChunkIterator.pooled`.
    """
    return ByteChunkIterator.pooled(
        source, buffer_size=buffer_size, pool=pool, token=token
    )


def iter_bytes_into(
    source: ByteSource,
    buffer: Buffer,
    *,
    token: CancellationToken | None = None,
) -> ByteChunkIterator:
    """Iterate the bytes of ``source`` through a caller-owned buffer."""
    return ByteChunkIterator.over(source, buffer, token=token)


def aiter_bytes(
    source: AsyncByteSource,
    *,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    pool: BufferPool = SHARED_BUFFER_POOL,
    token: CancellationToken | None = None,
) -> AsyncByteChunkIterator:
    """Asynchronously iterate the bytes of ``source`` using a pooled buffer."""
    return AsyncByteChunkIterator.pooled(
        source, buffer_size=buffer_size, pool=pool, token=token
    )


def aiter_bytes_into(
    source: AsyncByteSource,
    buffer: Buffer,
    *,
    token: CancellationToken | None = None,
) -> AsyncByteChunkIterator:
    """Asynchronously iterate the bytes of ``source`` through ``buffer``."""
    return AsyncByteChunkIterator.over(source, buffer, token=token)
