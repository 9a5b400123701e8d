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

"""Cooperative cancellation primitives.

Iterators accept any object satisfying :class:`CancellationToken`. The
:class:`SimpleCancellationToken` implementation is thread-safe, so a token can
be cancelled from a control thread while another thread consumes a sequence.

Example::

    from pullio.threading import SimpleCancellationToken

    token = SimpleCancellationToken()
    lines = aiter_lines(reader, token=token)
    token.cancel()  # the next pull ends the sequence
"""

from __future__ import annotations

from pullio.threading._cancellation import SimpleCancellationToken
from pullio.threading._types import CancellationToken, CancelledException

__all__ = [
    "CancellationToken",
    "CancelledException",
    "SimpleCancellationToken",
]
