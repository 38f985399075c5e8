"""
Unit tests for the sliding-window alert state machine.
"""

import pytest

from diskpressure.alerting.window import (
    AlertWindow,
    AlertWindowSet,
    WindowState,
    evaluate_qualification,
    update_window,
)


@pytest.mark.unit
class TestUpdateWindow:
    """Test cases for the pure update_window function."""

    def test_newest_first(self, test_utils):
        s1 = test_utils.create_sample("D", 1.0, 3)
        s2 = test_utils.create_sample("D", 2.0, 1)

        window = update_window(update_window((), s1, 3), s2, 3)

        assert window == (s2, s1)

    def test_length_never_exceeds_capacity(self, test_utils):
        window = ()
        for t in range(10):
            window = update_window(window, test_utils.create_sample("D", float(t), 5), 3)
            assert len(window) <= 3

        assert [s.timestamp for s in window] == [9.0, 8.0, 7.0]

    def test_input_window_is_not_modified(self, test_utils):
        s1 = test_utils.create_sample("D", 1.0, 3)
        window = (s1,)

        update_window(window, test_utils.create_sample("D", 2.0, 3), 3)

        assert window == (s1,)

    def test_rejects_out_of_order_sample(self, test_utils):
        window = (test_utils.create_sample("D", 5.0, 3),)

        with pytest.raises(ValueError, match="Out-of-order"):
            update_window(window, test_utils.create_sample("D", 4.0, 3), 3)

    def test_equal_timestamp_is_accepted(self, test_utils):
        window = (test_utils.create_sample("D", 5.0, 3),)

        assert len(update_window(window, test_utils.create_sample("D", 5.0, 3), 3)) == 2

    def test_rejects_other_instance(self, test_utils):
        window = (test_utils.create_sample("D", 1.0, 3),)

        with pytest.raises(ValueError):
            update_window(window, test_utils.create_sample("E", 2.0, 3), 3)

    def test_rejects_non_positive_capacity(self, test_utils):
        with pytest.raises(ValueError):
            update_window((), test_utils.create_sample("D", 1.0, 3), 0)


@pytest.mark.unit
class TestEvaluateQualification:
    """Test cases for evaluate_qualification."""

    def test_empty_window_not_qualified(self):
        assert evaluate_qualification((), 3) is False

    def test_partial_window_not_qualified(self, test_utils):
        window = (test_utils.create_sample("D", 2.0, 9), test_utils.create_sample("D", 1.0, 9))

        assert evaluate_qualification(window, 3) is False

    def test_full_window_all_over_threshold(self, test_utils):
        window = tuple(test_utils.create_sample("D", float(t), 3) for t in (3, 2, 1))

        assert evaluate_qualification(window, 3) is True

    def test_one_normal_sample_unqualifies(self, test_utils):
        values = [3, 1, 3]
        window = tuple(
            test_utils.create_sample("D", float(3 - i), v) for i, v in enumerate(values)
        )

        assert evaluate_qualification(window, 3) is False

    def test_threshold_is_inclusive(self, test_utils):
        window = tuple(test_utils.create_sample("D", float(t), 2.0) for t in (2, 1))

        assert evaluate_qualification(window, 2) is True

    def test_capacity_one(self, test_utils):
        assert evaluate_qualification((test_utils.create_sample("D", 1.0, 2.0),), 1) is True
        assert evaluate_qualification((test_utils.create_sample("D", 1.0, 1.9),), 1) is False


@pytest.mark.unit
class TestAlertWindow:
    """Test cases for the stateful AlertWindow."""

    def test_qualifies_after_required_recurrence(self, test_utils):
        # threshold=2, recurrence=3, samples [1, 3, 3, 3]
        window = AlertWindow("D", 3)
        states = [
            window.update(test_utils.create_sample("D", float(t), v))
            for t, v in enumerate([1, 3, 3, 3])
        ]

        assert states == [
            WindowState.BUILDING,
            WindowState.BUILDING,
            WindowState.BUILDING,
            WindowState.QUALIFIED,
        ]

    def test_normal_sample_returns_to_building(self, test_utils):
        window = AlertWindow("D", 2)
        window.update(test_utils.create_sample("D", 1.0, 5))
        window.update(test_utils.create_sample("D", 2.0, 5))
        assert window.qualified

        assert window.update(test_utils.create_sample("D", 3.0, 0)) is WindowState.BUILDING

    def test_stays_qualified_while_saturated(self, test_utils):
        window = AlertWindow("D", 2)
        for t in range(6):
            window.update(test_utils.create_sample("D", float(t), 8))
            if t >= 1:
                assert window.state is WindowState.QUALIFIED

    def test_clear(self, test_utils):
        window = AlertWindow("D", 1)
        window.update(test_utils.create_sample("D", 1.0, 8))

        window.clear()

        assert len(window) == 0
        assert window.state is WindowState.BUILDING

    def test_rejects_other_instance_on_empty_window(self, test_utils):
        window = AlertWindow("sda", 2)

        with pytest.raises(ValueError):
            window.update(test_utils.create_sample("sdb", 1.0, 5))

        assert len(window) == 0

    def test_repr(self, test_utils):
        window = AlertWindow("sda", 2)
        window.update(test_utils.create_sample("sda", 1.0, 4))

        assert repr(window) == "AlertWindow('sda', building, [4])"


@pytest.mark.unit
class TestAlertWindowSet:
    """Test cases for the per-instance window collection."""

    def test_windows_created_lazily(self, test_utils):
        windows = AlertWindowSet(3)
        assert len(windows) == 0

        windows.update("sda", test_utils.create_sample("sda", 1.0, 1))

        assert "sda" in windows
        assert windows.instances() == ["sda"]

    def test_instances_are_independent(self, test_utils):
        windows = AlertWindowSet(2)
        for t in range(2):
            windows.update_all(
                [
                    test_utils.create_sample("sda", float(t), 5),
                    test_utils.create_sample("sdb", float(t), 0),
                ]
            )

        assert windows.qualifying_instances() == ["sda"]
        assert windows.window("sdb").state is WindowState.BUILDING

    def test_qualifying_instances_keep_first_seen_order(self, test_utils):
        windows = AlertWindowSet(1)
        windows.update_all(
            [
                test_utils.create_sample("sdb", 1.0, 5),
                test_utils.create_sample("sda", 1.0, 5),
            ]
        )

        assert windows.qualifying_instances() == ["sdb", "sda"]

    def test_out_of_order_sample_is_dropped(self, test_utils):
        windows = AlertWindowSet(2)
        windows.update("sda", test_utils.create_sample("sda", 10.0, 5))

        state = windows.update("sda", test_utils.create_sample("sda", 9.0, 5))

        assert state is WindowState.BUILDING
        assert len(windows.window("sda")) == 1

    def test_sample_for_other_instance_is_dropped(self, test_utils):
        windows = AlertWindowSet(1)

        state = windows.update("sda", test_utils.create_sample("sdb", 1.0, 5))

        assert state is WindowState.BUILDING
        assert len(windows.window("sda")) == 0
        assert windows.qualifying_instances() == []

    def test_missing_tick_leaves_window_untouched(self, test_utils):
        windows = AlertWindowSet(3)
        windows.update_all([test_utils.create_sample("sda", 1.0, 5)])

        windows.update_all([])

        assert len(windows.window("sda")) == 1

    def test_reset_clears_every_window(self, test_utils):
        windows = AlertWindowSet(1)
        windows.update_all(
            [
                test_utils.create_sample("sda", 1.0, 5),
                test_utils.create_sample("sdb", 1.0, 5),
            ]
        )
        assert len(windows.qualifying_instances()) == 2

        windows.reset()

        assert windows.qualifying_instances() == []
        assert all(len(windows.window(name)) == 0 for name in windows.instances())

    def test_invalid_recurrence(self):
        with pytest.raises(ValueError):
            AlertWindowSet(0)
