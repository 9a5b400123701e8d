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

"""Buffer pool protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class BufferPool(Protocol):
    """Protocol for renting reusable byte buffers.

    Every buffer obtained from :meth:`rent` must be handed back through
    :meth:`return_` exactly once, and must not be touched afterwards.
    Implementations must be safe to use from several threads at once.
    """

    def rent(self, minimum_length: int) -> bytearray:
        """Rent a buffer holding at least ``minimum_length`` bytes.

        The buffer may be longer than requested and its contents are
        unspecified.

        Raises:
            InvalidArgumentError: If ``minimum_length`` is not positive.
        """
        ...

    def return_(self, buffer: bytearray, *, clear: bool = False) -> None:
        """Return a previously rented buffer.

        Args:
            buffer: The buffer obtained from :meth:`rent`.
            clear: Zero the buffer before it becomes available again.
        """
        ...


__all__ = [
    "BufferPool",
]
