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

"""Tests for cancellation tokens."""

from __future__ import annotations

import asyncio
import io
import threading

import pytest

from pullio import aiter_lines, iter_bytes
from pullio.threading import (
    CancellationToken,
    CancelledException,
    SimpleCancellationToken,
)
from tests.helpers import AsyncScriptedLineSource


class TestSimpleCancellationToken:
    """Tests for SimpleCancellationToken."""

    def test_not_cancelled_initially(self) -> None:
        token = SimpleCancellationToken()
        assert not token.is_cancelled()
        token.check()

    def test_cancel_sets_flag(self) -> None:
        token = SimpleCancellationToken()
        token.cancel()
        assert token.is_cancelled()

    def test_check_raises_when_cancelled(self) -> None:
        token = SimpleCancellationToken()
        token.cancel()
        with pytest.raises(CancelledException, match="cancelled"):
            token.check()

    def test_child_follows_parent(self) -> None:
        parent = SimpleCancellationToken()
        child = parent.child()
        assert not child.is_cancelled()
        parent.cancel()
        assert child.is_cancelled()

    def test_child_cancel_does_not_affect_parent(self) -> None:
        parent = SimpleCancellationToken()
        child = parent.child()
        child.cancel()
        assert child.is_cancelled()
        assert not parent.is_cancelled()

    def test_cancel_from_another_thread(self) -> None:
        token = SimpleCancellationToken()
        thread = threading.Thread(target=token.cancel)
        thread.start()
        thread.join(timeout=5.0)
        assert token.is_cancelled()

    def test_satisfies_protocol(self) -> None:
        assert isinstance(SimpleCancellationToken(), CancellationToken)

    def test_grandchild_follows_root(self) -> None:
        root = SimpleCancellationToken()
        grandchild = root.child().child()
        root.cancel()
        assert grandchild.is_cancelled()


class _Countdown:
    """Token that reports cancellation after a fixed number of polls."""

    def __init__(self, polls: int) -> None:
        self.remaining = polls

    def is_cancelled(self) -> bool:
        self.remaining -= 1
        return self.remaining < 0

    def check(self) -> None:
        if self.is_cancelled():
            raise CancelledException("countdown elapsed")


class TestCustomTokens:
    """Iterators only need is_cancelled() and check() from a token."""

    def test_minimal_token_satisfies_protocol(self) -> None:
        assert isinstance(_Countdown(1), CancellationToken)

    def test_byte_iterator_polls_check_before_each_read(self) -> None:
        iterator = iter_bytes(io.BytesIO(b"abcdef"), buffer_size=2, token=_Countdown(2))
        produced: list[int] = []
        with pytest.raises(CancelledException, match="countdown"):
            for value in iterator:
                produced.append(value)
        assert bytes(produced) == b"abcd"

    def test_line_iterator_polls_is_cancelled_before_each_read(self) -> None:
        source = AsyncScriptedLineSource(["a\n", "b\n", "c\n"])
        iterator = aiter_lines(source, token=_Countdown(1))

        async def collect() -> list[str]:
            return [line async for line in iterator]

        assert asyncio.run(collect()) == ["a"]
        assert source.read_calls == 1
