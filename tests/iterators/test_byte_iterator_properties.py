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

"""Property-based tests for the byte chunk iterator."""

from __future__ import annotations

import pytest
from hypothesis import given, settings, strategies as st

from pullio import InvalidArgumentError, iter_bytes
from pullio.buffers import SharedBufferPool, TrackingBufferPool
from tests.helpers import ForbiddenByteSource, ScriptedByteSource

# ============================================================================
# Chunking is transparent
# ============================================================================


@given(
    payload=st.binary(max_size=2048),
    buffer_size=st.integers(min_value=1, max_value=512),
    read_sizes=st.lists(st.integers(min_value=1, max_value=600), max_size=20),
)
@settings(max_examples=200)
def test_output_matches_source_for_any_chunking(
    payload: bytes, buffer_size: int, read_sizes: list[int]
) -> None:
    """Every byte comes out once, in order, however the source splits reads."""

    source = ScriptedByteSource(payload, read_sizes=read_sizes)
    produced = bytes(iter_bytes(source, buffer_size=buffer_size))
    assert produced == payload
    assert all(requested == buffer_size for requested in source.requested)


@given(buffer_size=st.integers(max_value=0))
def test_non_positive_buffer_size_never_reads(buffer_size: int) -> None:
    """Construction fails before the source is touched."""

    pool = TrackingBufferPool()
    with pytest.raises(InvalidArgumentError):
        iter_bytes(ForbiddenByteSource(), buffer_size=buffer_size, pool=pool)
    assert pool.rent_count == 0


@given(
    payload=st.binary(min_size=1, max_size=256),
    buffer_size=st.integers(min_value=1, max_value=64),
    data=st.data(),
)
def test_buffer_returned_exactly_once_after_early_stop(
    payload: bytes, buffer_size: int, data: st.DataObject
) -> None:
    """Stopping at any point still returns the single rented buffer."""

    pool = TrackingBufferPool()
    stop_after = data.draw(st.integers(min_value=0, max_value=len(payload)))
    with iter_bytes(
        ScriptedByteSource(payload), buffer_size=buffer_size, pool=pool
    ) as iterator:
        for taken, _ in enumerate(iterator, start=1):
            if taken >= stop_after:
                break
    assert pool.rent_count <= 1
    assert pool.return_count == pool.rent_count
    assert pool.outstanding == 0


@given(
    payload=st.binary(min_size=1, max_size=256),
    buffer_size=st.integers(min_value=1, max_value=64),
    fail_after=st.integers(min_value=0, max_value=8),
)
def test_buffer_returned_exactly_once_after_source_error(
    payload: bytes, buffer_size: int, fail_after: int
) -> None:
    pool = TrackingBufferPool()
    source = ScriptedByteSource(payload, fail_after=fail_after)
    produced: list[int] = []
    try:
        for value in iter_bytes(source, buffer_size=buffer_size, pool=pool):
            produced.append(value)
    except OSError:
        pass
    assert bytes(produced) == payload[: len(produced)]
    assert pool.rent_count == 1
    assert pool.return_count == 1


# ============================================================================
# Round trip around chunk edges
# ============================================================================


@pytest.mark.parametrize("buffer_size", [1, 7, 16, 4096])
@pytest.mark.parametrize(
    "length_of",
    [
        lambda n: 0,
        lambda n: 1,
        lambda n: n - 1,
        lambda n: n,
        lambda n: n + 1,
        lambda n: 2 * n,
        lambda n: 5 * n,
        lambda n: 5 * n + 3,
    ],
    ids=["empty", "one", "n-1", "n", "n+1", "2n", "5n", "5n+3"],
)
def test_round_trip_at_chunk_boundaries(buffer_size: int, length_of: object) -> None:
    length = length_of(buffer_size)  # type: ignore[operator]
    payload = bytes(index % 251 for index in range(length))
    pool = SharedBufferPool()
    assert bytes(iter_bytes(ScriptedByteSource(payload), buffer_size=buffer_size, pool=pool)) == payload
    assert pool.idle_count() == 1
