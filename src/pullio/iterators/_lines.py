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

"""Line sources exposed as iterators of terminator-free lines."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Self

from ..errors import InvalidArgumentError, SourceContractError
from ..runtime.logging import StructuredLogger, get_logger
from ..threading import CancellationToken
from ._sources import AsyncLineSource, LineSource
from ._state import IterationState

__all__ = [
    "AsyncLineIterator",
    "LineIterator",
    "aiter_lines",
    "iter_lines",
]

_logger: StructuredLogger = get_logger(
    "pullio.iterators.lines",
    context={"component": "line_iterator"},
)


def _strip_terminator(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith(("\n", "\r")):
        return line[:-1]
    return line


@dataclass(slots=True, eq=False, kw_only=True)
class _LineCursor:
    _terminated: bool = True
    _line_number: int = field(default=0, init=False)
    _state: IterationState = field(default=IterationState.IDLE, init=False)

    @property
    def state(self) -> IterationState:
        """Current lifecycle state."""
        return self._state

    @property
    def line_number(self) -> int:
        """Number of lines produced so far."""
        return self._line_number

    def _begin_fetch(self) -> None:
        if self._state is IterationState.FETCHING:
            msg = "next line requested while a read is already in flight"
            raise RuntimeError(msg)
        self._state = IterationState.FETCHING

    def _accept(self, line: object) -> str | None:
        ended = line == "" if self._terminated else line is None
        if ended:
            self._finish(IterationState.EXHAUSTED)
            return None
        if not isinstance(line, str):
            self._finish(IterationState.FAULTED)
            marker = "''" if self._terminated else "None"
            msg = (
                f"Source returned {line!r} from readline; expected a str, "
                f"or {marker} at end of input."
            )
            raise SourceContractError(msg)
        self._line_number += 1
        self._state = IterationState.EMITTING
        return _strip_terminator(line) if self._terminated else line

    def _finish(self, state: IterationState) -> None:
        if self._state.terminal:
            return
        self._state = state
        _logger.debug(
            f"line iteration {state.value}",
            event=f"iteration.{state.value}",
            context={"line_number": self._line_number},
        )

    def close(self) -> None:
        """End the iteration early. Safe to call more than once."""
        if self._state is IterationState.FETCHING:
            msg = "cannot close while a read is in flight"
            raise RuntimeError(msg)
        self._finish(IterationState.EXHAUSTED)


@dataclass(slots=True, eq=False, kw_only=True)
class LineIterator(_LineCursor):
    """Blocking iterator over the lines of a :class:`LineSource`.

    Each ``next()`` performs exactly one ``readline()``. Lines are returned
    without their terminator, and blank lines come back as ``""``. A source
    that answers with neither a ``str`` nor its end marker faults the
    iteration with :class:`SourceContractError`. This
    variant never consults a cancellation token: a blocking read offers no
    point at which to observe one.
    """

    _source: LineSource

    @classmethod
    def over(cls, source: LineSource, *, terminated: bool = True) -> Self:
        """Create an iterator over ``source``.

        Args:
            source: The line source. Never closed by the iterator.
            terminated: ``True`` for text-file readers whose lines keep their
                terminator and which return ``""`` at the end. ``False`` for
                readers that strip terminators and return ``None`` at the end;
                their lines are yielded unchanged and ``""`` is a blank line.

        Raises:
            InvalidArgumentError: If ``source`` is ``None``.
        """
        if source is None:
            msg = "source must not be None."
            raise InvalidArgumentError(msg)
        return cls(_source=source, _terminated=terminated)

    def __iter__(self) -> Self:
        return self

    def __next__(self) -> str:
        if self._state.terminal:
            raise StopIteration
        self._begin_fetch()
        try:
            raw = self._source.readline()
        except BaseException:
            self._finish(IterationState.FAULTED)
            raise
        line = self._accept(raw)
        if line is None:
            raise StopIteration
        return line

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
class AsyncLineIterator(_LineCursor):
    """Suspending iterator over the lines of an :class:`AsyncLineSource`.

    Before every read the token (when given) is consulted; once it is
    cancelled the sequence ends quietly instead of raising. A read that is
    already awaiting the source is not interrupted.
    """

    _source: AsyncLineSource
    _token: CancellationToken | None = None

    @classmethod
    def over(
        cls,
        source: AsyncLineSource,
        *,
        token: CancellationToken | None = None,
        terminated: bool = True,
    ) -> Self:
        """Create an iterator over ``source``.

        ``terminated`` selects the end marker as in :meth:`LineIterator.over`.

        Raises:
            InvalidArgumentError: If ``source`` is ``None``.
        """
        if source is None:
            msg = "source must not be None."
            raise InvalidArgumentError(msg)
        return cls(_source=source, _token=token, _terminated=terminated)

    def __aiter__(self) -> Self:
        return self

    async def __anext__(self) -> str:
        if self._state.terminal:
            raise StopAsyncIteration
        if self._token is not None and self._token.is_cancelled():
            self._finish(IterationState.CANCELLED)
            raise StopAsyncIteration
        self._begin_fetch()
        try:
            raw = await self._source.readline()
        except asyncio.CancelledError:
            self._finish(IterationState.CANCELLED)
            raise
        except BaseException:
            self._finish(IterationState.FAULTED)
            raise
        line = self._accept(raw)
        if line is None:
            raise StopAsyncIteration
        return line

    async def aclose(self) -> None:
        """End the iteration early."""
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


def iter_lines(source: LineSource, *, terminated: bool = True) -> LineIterator:
    """Iterate the lines of ``source``, validating it immediately."""
    return LineIterator.over(source, terminated=terminated)


def aiter_lines(
    source: AsyncLineSource,
    *,
    token: CancellationToken | None = None,
    terminated: bool = True,
) -> AsyncLineIterator:
    """Asynchronously iterate the lines of ``source``.

    The sequence ends without error once ``token`` is cancelled.
    """
    return AsyncLineIterator.over(source, token=token, terminated=terminated)
