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

import threading
from dataclasses import dataclass, field

from ._types import CancelledException


@dataclass(slots=True, eq=False)
class SimpleCancellationToken:
    """Settable cancellation flag for one or more iterations.

    The flag is a :class:`threading.Event`, so a control thread may cancel
    while a worker thread or an event loop is pulling elements. Tokens made
    with :meth:`child` also see their ancestors' cancellation, which lets a
    caller stop a whole group of iterations or just one of them::

        group = SimpleCancellationToken()
        lines = aiter_lines(reader, token=group.child())
        chunks = iter_bytes(stream, token=group.child())
        group.cancel()  # both stop before their next read
    """

    _parent: SimpleCancellationToken | None = field(default=None, repr=False)
    _flag: threading.Event = field(
        default_factory=threading.Event, init=False, repr=False
    )

    def cancel(self) -> None:
        """Mark this token, and every token derived from it, as cancelled."""
        self._flag.set()

    def is_cancelled(self) -> bool:
        token: SimpleCancellationToken | None = self
        while token is not None:
            if token._flag.is_set():
                return True
            token = token._parent
        return False

    def check(self) -> None:
        """Raise :class:`CancelledException` if this token is cancelled."""
        if self.is_cancelled():
            raise CancelledException("iteration cancelled before the next read")

    def child(self) -> SimpleCancellationToken:
        """Return a token that can be cancelled alone or through this one."""
        return SimpleCancellationToken(_parent=self)


__all__ = [
    "SimpleCancellationToken",
]
