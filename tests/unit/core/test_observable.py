"""Unit tests for the Observable mixin."""

from __future__ import annotations

import pytest

from forkly.core.observable import Observable


pytestmark = pytest.mark.unit


class Counter(Observable):
    def __init__(self) -> None:
        super().__init__()
        self.value = 0

    def increment(self) -> None:
        self.value += 1
        self._notify()


class TestObservable:
    """Tests for subscribe and notify."""

    def test_notifies_with_self(self):
        """Should call subscribers with the observable."""
        counter = Counter()
        seen: list[int] = []
        counter.subscribe(lambda c: seen.append(c.value))

        counter.increment()
        counter.increment()

        assert seen == [1, 2]

    def test_unsubscribe(self):
        """Should stop notifying after unsubscribe, which is idempotent."""
        counter = Counter()
        seen: list[int] = []
        unsubscribe = counter.subscribe(lambda c: seen.append(c.value))

        unsubscribe()
        unsubscribe()
        counter.increment()

        assert seen == []

    def test_failing_subscriber_is_isolated(self, log_messages):
        """Should keep notifying other subscribers and log the failure."""
        counter = Counter()
        seen: list[int] = []

        def broken(_):
            raise RuntimeError("boom")

        counter.subscribe(broken)
        counter.subscribe(lambda c: seen.append(c.value))

        counter.increment()

        assert seen == [1]
        assert any(
            r["message"] == "Subscriber raised during notification" for r in log_messages
        )

    def test_subscriber_may_unsubscribe_during_notify(self):
        """Should tolerate subscribers removing themselves."""
        counter = Counter()
        seen: list[str] = []
        unsubscribe = None

        def once(_):
            seen.append("once")
            unsubscribe()

        unsubscribe = counter.subscribe(once)
        counter.subscribe(lambda _: seen.append("always"))

        counter.increment()
        counter.increment()

        assert seen == ["once", "always", "always"]
