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

from __future__ import annotations

from typing import Protocol, runtime_checkable


class CancelledException(Exception):
    """A byte iterator observed a cancelled token before reading its source."""


@runtime_checkable
class CancellationToken(Protocol):
    """What an iterator needs from a cancellation signal.

    Iterators only ever poll, and only between source reads. Byte iterators
    call :meth:`check` and let :class:`CancelledException` escape to the
    consumer; the suspending line iterator calls :meth:`is_cancelled` and ends
    its sequence quietly. Who cancels, and how, is up to the implementation.
    """

    def is_cancelled(self) -> bool: ...

    def check(self) -> None: ...


__all__ = [
    "CancellationToken",
    "CancelledException",
]
