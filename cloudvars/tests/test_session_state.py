import pytest

from cloudvars.network import OutboundQueue, SessionState, SessionTracker, ValueStore, compute_backoff


def test_session_transitions():
    tracker = SessionTracker()
    assert tracker.state is SessionState.CONNECTING
    tracker.transition(SessionState.CONNECTING)
    tracker.transition(SessionState.OPEN)
    assert tracker.is_open
    tracker.transition(SessionState.CONNECTING)
    tracker.transition(SessionState.CLOSED)
    assert tracker.is_closed


@pytest.mark.parametrize("target", list(SessionState))
def test_closed_is_absorbing(target):
    tracker = SessionTracker(state=SessionState.CLOSED)
    with pytest.raises(ValueError):
        tracker.transition(target)


def test_open_cannot_reopen():
    tracker = SessionTracker(state=SessionState.OPEN)
    with pytest.raises(ValueError):
        tracker.transition(SessionState.OPEN)


@pytest.mark.parametrize("attempts", range(0, 9))
@pytest.mark.parametrize("sample", [0.0, 0.25, 0.999999])
def test_backoff_bounds(attempts, sample):
    delay = compute_backoff(attempts, lambda: sample)
    assert 0 <= delay < 2000 * min(attempts + 1, 5)


def test_backoff_ceiling_is_ten_seconds():
    assert compute_backoff(50, lambda: 1.0) == 10000
    assert compute_backoff(0, lambda: 1.0, base_delay_ms=100, max_multiplier=3) == 100
    assert compute_backoff(7, lambda: 0.5, base_delay_ms=100, max_multiplier=3) == 150


def test_value_store_write_through():
    store = ValueStore()
    assert store.get("☁ a") is None
    store.set("☁ a", 1)
    store.set("☁ a", "one")
    assert store.get("☁ a") == "one"
    assert "☁ a" in store
    assert len(store) == 1
    snapshot = store.snapshot()
    snapshot["☁ b"] = 2
    assert "☁ b" not in store


def test_outbound_queue_drains_in_order_once():
    queue = OutboundQueue()
    for frame in ("a", "b", "c"):
        queue.push(frame)
    assert list(queue) == ["a", "b", "c"]
    assert queue.drain() == ["a", "b", "c"]
    assert len(queue) == 0
    assert queue.drain() == []
