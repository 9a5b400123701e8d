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

"""Iteration lifecycle states."""

from __future__ import annotations

from enum import Enum
from typing import Final


class IterationState(Enum):
    """Lifecycle of a single iteration.

    IDLE: Constructed, nothing pulled yet
    FETCHING: A read against the source is in flight
    EMITTING: Between pulls, with the source still open for more reads
    EXHAUSTED: The source reported end of input, or the iterator was closed
    CANCELLED: Cancellation was observed
    FAULTED: The source raised or broke its contract
    """

    IDLE = "idle"
    FETCHING = "fetching"
    EMITTING = "emitting"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"
    FAULTED = "faulted"

    @property
    def terminal(self) -> bool:
        """True once the iteration can produce no further elements."""
        return self in TERMINAL_STATES


TERMINAL_STATES: Final[frozenset[IterationState]] = frozenset(
    {IterationState.EXHAUSTED, IterationState.CANCELLED, IterationState.FAULTED}
)

__all__ = [
    "TERMINAL_STATES",
    "IterationState",
]
