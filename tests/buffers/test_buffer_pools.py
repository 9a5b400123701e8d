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

"""Tests for buffer pools and scoped leases."""

from __future__ import annotations

import logging
import threading

import pytest

from pullio.buffers import (
    SHARED_BUFFER_POOL,
    BufferPool,
    SharedBufferPool,
    TrackingBufferPool,
    lease,
)
from pullio.config import IteratorConfig
from pullio.errors import BufferPoolError, InvalidArgumentError


class TestSharedBufferPool:
    """Tests for SharedBufferPool."""

    @pytest.mark.parametrize(
        ("requested", "expected"),
        [(1, 16), (16, 16), (17, 32), (1000, 1024), (4096, 4096), (4097, 8192)],
    )
    def test_rent_rounds_up_to_size_class(self, requested: int, expected: int) -> None:
        pool = SharedBufferPool()
        assert len(pool.rent(requested)) == expected

    def test_returned_buffer_is_reused(self) -> None:
        pool = SharedBufferPool()
        buffer = pool.rent(100)
        pool.return_(buffer)
        assert pool.idle_count() == 1
        assert pool.rent(120) is buffer
        assert pool.idle_count() == 0

    def test_different_size_class_gets_new_buffer(self) -> None:
        pool = SharedBufferPool()
        buffer = pool.rent(100)
        pool.return_(buffer)
        assert pool.rent(200) is not buffer

    def test_oversized_rent_is_not_pooled(self) -> None:
        pool = SharedBufferPool(max_pooled_length=64)
        buffer = pool.rent(65)
        assert len(buffer) == 65
        pool.return_(buffer)
        assert pool.idle_count() == 0

    def test_bucket_limit_drops_extra_buffers(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        pool = SharedBufferPool(max_buffers_per_bucket=1)
        first, second = pool.rent(16), pool.rent(16)
        pool.return_(first)
        with caplog.at_level(logging.DEBUG, logger="pullio.buffers.shared"):
            pool.return_(second)
        assert pool.idle_count() == 1
        assert [getattr(record, "event", None) for record in caplog.records] == [
            "pool.trimmed"
        ]

    def test_clear_zeroes_buffer(self) -> None:
        pool = SharedBufferPool()
        buffer = pool.rent(16)
        buffer[:] = b"\xff" * 16
        pool.return_(buffer, clear=True)
        assert buffer == bytearray(16)

    @pytest.mark.parametrize("length", [0, -5, True, 1.5])
    def test_rent_rejects_bad_length(self, length: object) -> None:
        with pytest.raises(InvalidArgumentError):
            SharedBufferPool().rent(length)  # type: ignore[arg-type]

    def test_return_rejects_foreign_length(self) -> None:
        with pytest.raises(InvalidArgumentError, match="not rented"):
            SharedBufferPool().return_(bytearray(100))

    def test_return_rejects_non_bytearray(self) -> None:
        with pytest.raises(InvalidArgumentError, match="bytearray"):
            SharedBufferPool().return_(b"x" * 16)  # type: ignore[arg-type]

    def test_rejects_negative_bucket_limit(self) -> None:
        with pytest.raises(InvalidArgumentError):
            SharedBufferPool(max_buffers_per_bucket=-1)

    @pytest.mark.parametrize(
        ("max_pooled_length", "largest"),
        [(16, 16), (31, 16), (1000, 512), (1024, 1024), (1025, 1024)],
    )
    def test_largest_size_class_never_exceeds_limit(
        self, max_pooled_length: int, largest: int
    ) -> None:
        pool = SharedBufferPool(max_pooled_length=max_pooled_length)
        assert pool.largest_bucket_length == largest

    def test_request_between_largest_class_and_limit_is_not_retained(self) -> None:
        pool = SharedBufferPool(max_pooled_length=1000)
        buffer = pool.rent(1000)
        assert len(buffer) == 1000
        pool.return_(buffer)
        assert pool.idle_count() == 0
        kept = pool.rent(512)
        pool.return_(kept)
        assert pool.idle_count() == 1

    @pytest.mark.parametrize("max_pooled_length", [0, 15, True])
    def test_rejects_pooled_length_below_smallest_class(
        self, max_pooled_length: object
    ) -> None:
        with pytest.raises(InvalidArgumentError, match="max_pooled_length"):
            SharedBufferPool(max_pooled_length=max_pooled_length)  # type: ignore[arg-type]

    def test_from_config(self) -> None:
        config = IteratorConfig(max_buffers_per_bucket=3, max_pooled_length=256)
        pool = SharedBufferPool.from_config(config)
        assert pool.max_buffers_per_bucket == 3
        assert pool.largest_bucket_length == 256

    def test_shared_pool_satisfies_protocol(self) -> None:
        assert isinstance(SHARED_BUFFER_POOL, BufferPool)
        assert isinstance(SHARED_BUFFER_POOL, SharedBufferPool)

    def test_concurrent_rent_and_return(self) -> None:
        pool = SharedBufferPool(max_buffers_per_bucket=4)
        errors: list[BaseException] = []
        barrier = threading.Barrier(8)

        def worker() -> None:
            try:
                barrier.wait()
                for _ in range(200):
                    buffer = pool.rent(512)
                    buffer[0] = 1
                    pool.return_(buffer)
            except BaseException as error:  # pragma: no cover - surfaced below
                errors.append(error)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10.0)

        assert errors == []
        assert 1 <= pool.idle_count() <= 4


class TestTrackingBufferPool:
    """Tests for TrackingBufferPool."""

    def test_records_rents_and_returns(self) -> None:
        pool = TrackingBufferPool()
        first = pool.rent(10)
        second = pool.rent(3)
        assert len(first) == 10
        assert pool.rented_lengths == (10, 3)
        assert pool.outstanding == 2
        pool.return_(second)
        pool.return_(first, clear=True)
        assert pool.return_count == 2
        assert pool.cleared_returns == 1
        assert pool.outstanding == 0

    def test_double_return_raises(self) -> None:
        pool = TrackingBufferPool()
        buffer = pool.rent(4)
        pool.return_(buffer)
        with pytest.raises(BufferPoolError):
            pool.return_(buffer)

    def test_foreign_buffer_raises(self) -> None:
        with pytest.raises(BufferPoolError):
            TrackingBufferPool().return_(bytearray(4))

    def test_satisfies_protocol(self) -> None:
        assert isinstance(TrackingBufferPool(), BufferPool)


class TestLease:
    """Tests for the lease() context manager."""

    def test_returns_on_normal_exit(self) -> None:
        pool = TrackingBufferPool()
        with lease(pool, 8) as buffer:
            assert len(buffer) == 8
            assert pool.outstanding == 1
        assert pool.outstanding == 0

    def test_returns_on_error(self) -> None:
        pool = TrackingBufferPool()
        with pytest.raises(KeyError):
            with lease(pool, 8):
                raise KeyError("boom")
        assert pool.return_count == 1

    def test_clear_is_forwarded(self) -> None:
        pool = TrackingBufferPool()
        with lease(pool, 4, clear=True) as buffer:
            buffer[:] = b"abcd"
        assert buffer == bytearray(4)
        assert pool.cleared_returns == 1
