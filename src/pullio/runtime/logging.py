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

"""Debug events emitted by pullio.

Iterators and pools report ``buffer.leased``, ``buffer.released``,
``iteration.<state>`` and ``pool.trimmed`` at DEBUG level. Each record gets an
``event`` attribute and a ``context`` dict, so handlers and ``caplog`` can
match on them without parsing messages. pullio installs no handlers; the host
application decides where records go.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from typing import Any, override

__all__ = [
    "StructuredLogger",
    "get_logger",
]


class StructuredLogger(logging.LoggerAdapter[logging.Logger]):
    """Adapter whose calls must name an ``event``.

    ``context`` given at construction is attached to every record; a
    ``context=`` mapping passed to a single call is layered on top of it.
    """

    def __init__(
        self,
        logger: logging.Logger,
        *,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(logger, dict(context or {}))

    @override
    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        event = kwargs.pop("event", None)
        if not isinstance(event, str) or not event:
            raise TypeError("pullio log calls must name an event.")
        call_context = kwargs.pop("context", None) or {}
        if not isinstance(call_context, Mapping):
            raise TypeError("context must be a mapping.")
        fields: dict[str, object] = {**(self.extra or {}), **call_context}
        kwargs["extra"] = {"event": event, "context": fields}
        return msg, kwargs


def get_logger(
    name: str, *, context: Mapping[str, object] | None = None
) -> StructuredLogger:
    """Return a :class:`StructuredLogger` over ``logging.getLogger(name)``."""
    return StructuredLogger(logging.getLogger(name), context=context)
