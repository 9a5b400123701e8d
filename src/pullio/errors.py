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

"""Base exception hierarchy for :mod:`pullio`."""

from __future__ import annotations


class PullioError(Exception):
    """Base class for all pullio exceptions.

    Errors raised by the wrapped sources are never converted into
    ``PullioError``; they reach the consumer unchanged. Only problems detected
    by pullio itself use this hierarchy.

    Example:
        Catch any pullio-specific error::

            try:
                for value in iter_bytes(stream, buffer_size=size):
                    consume(value)
            except PullioError as e:
                logger.error("Iteration setup failed: %s", e)

    Note:
        Subclasses also inherit from a standard exception type (``ValueError``
        or ``RuntimeError``) so generic handlers keep working.
    """


class InvalidArgumentError(PullioError, ValueError):
    """Raised when an iterator or pool receives an unusable argument.

    Raised synchronously, before any read is issued against the source.
    Common causes:

    - ``None`` passed as the source, reader, or pool
    - A non-positive ``buffer_size``
    - A zero-length or read-only buffer supplied for in-place reads
    - A buffer returned to a pool that could not have handed it out

    Example:
        Rejecting a bad buffer size up front::

            try:
                iterator = iter_bytes(stream, buffer_size=0)
            except InvalidArgumentError:
                iterator = iter_bytes(stream)
    """


class SourceContractError(PullioError, RuntimeError):
    """Raised when a source reports an impossible read count.

    A byte source must return an integer between zero and the length of the
    buffer it was handed. Negative counts, counts larger than the buffer, and
    ``None`` (the "would block" answer of non-blocking raw streams) all violate
    that contract and fault the iteration.
    """


class BufferPoolError(PullioError, RuntimeError):
    """Raised when a buffer pool detects a lease handled more than once.

    Returning the same buffer twice would let two iterations share one region
    of memory, so pools that track their leases refuse the second return.
    """


__all__ = [
    "BufferPoolError",
    "InvalidArgumentError",
    "PullioError",
    "SourceContractError",
]
