"""
Unit tests for the trace cooldown gate.
"""

import threading

import pytest

from diskpressure.alerting.gate import TraceGate, TraceGateState, try_acquire_gate


@pytest.mark.unit
class TestTryAcquireGate:
    """Test cases for the pure gate function."""

    def test_first_acquire_granted(self):
        decision, state = try_acquire_gate(TraceGateState(), 100.0, 60.0)

        assert decision.granted
        assert decision.elapsed is None
        assert state.last_capture_time == 100.0

    def test_denied_within_cooldown(self):
        state = TraceGateState(last_capture_time=100.0)

        decision, new_state = try_acquire_gate(state, 130.0, 60.0)

        assert not decision.granted
        assert decision.elapsed == pytest.approx(30.0)
        assert decision.remaining == pytest.approx(30.0)
        assert new_state is state

    def test_granted_after_cooldown(self):
        state = TraceGateState(last_capture_time=100.0)

        decision, new_state = try_acquire_gate(state, 161.0, 60.0)

        assert decision.granted
        assert decision.elapsed == pytest.approx(61.0)
        assert new_state.last_capture_time == 161.0

    def test_granted_exactly_at_cooldown(self):
        decision, _ = try_acquire_gate(TraceGateState(last_capture_time=0.0), 60.0, 60.0)

        assert decision.granted

    def test_zero_cooldown_always_grants(self):
        state = TraceGateState(last_capture_time=5.0)

        decision, _ = try_acquire_gate(state, 5.0, 0.0)

        assert decision.granted


@pytest.mark.unit
class TestTraceGate:
    """Test cases for the locked TraceGate wrapper."""

    def test_cooldown_sequence(self):
        gate = TraceGate(60.0)

        assert gate.try_acquire(0.0).granted
        assert not gate.try_acquire(30.0).granted
        assert gate.try_acquire(61.0).granted
        assert gate.last_capture_time == 61.0

    def test_denial_does_not_move_last_capture_time(self):
        gate = TraceGate(60.0)
        gate.try_acquire(0.0)

        gate.try_acquire(30.0)
        gate.try_acquire(59.0)

        assert gate.last_capture_time == 0.0
        assert gate.state == TraceGateState(last_capture_time=0.0)

    def test_single_flight_under_concurrency(self):
        gate = TraceGate(60.0)
        barrier = threading.Barrier(8)
        results = []
        lock = threading.Lock()

        def worker():
            barrier.wait()
            decision = gate.try_acquire(10.0)
            with lock:
                results.append(decision.granted)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1

    def test_negative_cooldown_rejected(self):
        with pytest.raises(ValueError):
            TraceGate(-1.0)
