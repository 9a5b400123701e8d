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

"""Configuration for iterator chunk sizes and buffer pools."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Final

from .errors import InvalidArgumentError

DEFAULT_BUFFER_SIZE: Final[int] = 4096
DEFAULT_MAX_BUFFERS_PER_BUCKET: Final[int] = 50
DEFAULT_MAX_POOLED_LENGTH: Final[int] = 1 << 20
MIN_POOLED_LENGTH: Final[int] = 16

ENV_BUFFER_SIZE = "PULLIO_BUFFER_SIZE"
ENV_POOL_MAX_BUFFERS = "PULLIO_POOL_MAX_BUFFERS"
ENV_POOL_MAX_LENGTH = "PULLIO_POOL_MAX_LENGTH"

_ENV_FIELDS: Final[dict[str, str]] = {
    ENV_BUFFER_SIZE: "buffer_size",
    ENV_POOL_MAX_BUFFERS: "max_buffers_per_bucket",
    ENV_POOL_MAX_LENGTH: "max_pooled_length",
}

_FIELD_MINIMUMS: Final[dict[str, int]] = {
    "buffer_size": 1,
    "max_buffers_per_bucket": 0,
    "max_pooled_length": MIN_POOLED_LENGTH,
}

__all__ = [
    "DEFAULT_BUFFER_SIZE",
    "DEFAULT_MAX_BUFFERS_PER_BUCKET",
    "DEFAULT_MAX_POOLED_LENGTH",
    "MIN_POOLED_LENGTH",
    "ConfigError",
    "IteratorConfig",
    "load_config",
]


class ConfigError(InvalidArgumentError):
    """Raised when pullio configuration values are invalid."""


@dataclass(frozen=True, slots=True)
class IteratorConfig:
    """Resolved chunk size and pool limits.

    ``buffer_size`` is the number of bytes requested per read.
    ``max_buffers_per_bucket`` caps how many idle buffers a pool keeps for each
    size class; ``0`` disables retention. ``max_pooled_length`` bounds the
    largest buffer a pool retains and may not be below ``MIN_POOLED_LENGTH``.
    """

    buffer_size: int = DEFAULT_BUFFER_SIZE
    max_buffers_per_bucket: int = DEFAULT_MAX_BUFFERS_PER_BUCKET
    max_pooled_length: int = DEFAULT_MAX_POOLED_LENGTH

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            minimum = _FIELD_MINIMUMS[item.name]
            if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
                msg = f"{item.name} must be an integer >= {minimum} (got {value!r})."
                raise ConfigError(msg)


def load_config(
    mapping: Mapping[str, object] | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> IteratorConfig:
    """Resolve an :class:`IteratorConfig`.

    Values are layered: built-in defaults, then ``mapping`` (keys mirror the
    field names), then the ``PULLIO_BUFFER_SIZE``, ``PULLIO_POOL_MAX_BUFFERS``
    and ``PULLIO_POOL_MAX_LENGTH`` environment variables.

    Parameters
    ----------
    mapping:
        Optional in-memory overrides, typically loaded by the host application.
    env:
        Optional environment mapping. Defaults to :data:`os.environ`.
    """

    env_map = os.environ if env is None else env
    config = IteratorConfig()

    if mapping is not None:
        known = {item.name for item in fields(IteratorConfig)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            msg = f"Unknown configuration keys: {', '.join(unknown)}"
            raise ConfigError(msg)
        config = replace(config, **dict(mapping))  # type: ignore[arg-type]

    overrides: dict[str, int] = {}
    for env_name, field_name in _ENV_FIELDS.items():
        raw = env_map.get(env_name)
        if raw is None:
            continue
        try:
            overrides[field_name] = int(raw.strip())
        except ValueError:
            msg = f"{env_name} must be an integer (got {raw!r})."
            raise ConfigError(msg) from None

    return replace(config, **overrides) if overrides else config
