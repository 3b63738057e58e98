"""Unit tests for dynamic goal redistribution and goal progress"""

import pytest
from datetime import date
from motorista_real.domain.models import GoalType, TransactionCategory, TransactionOrigin, User
from motorista_real.domain.projection import compute_dynamic_goal, goal_progress, resolve_base_goal

TODAY = date(2024, 3, 4)  # March has 31 days -> 28 remaining including today


@pytest.fixture
def history(txn_factory):
    """Day 1 beats the goal, day 2 is idle, day 3 nets R$ 130"""
    return [
        txn_factory(TransactionCategory.UBER, 250.0, date(2024, 3, 1)),
        txn_factory(TransactionCategory.UBER, 150.0, date(2024, 3, 3)),
        txn_factory(TransactionCategory.FOOD, 20.0, date(2024, 3, 3)),
    ]


def test_deficit_spread_over_remaining_days(history):
    goal = compute_dynamic_goal(200.0, history, TODAY)

    assert goal.accumulated_deficit == pytest.approx(200.0 + 70.0)
    assert goal.remaining_days == 28
    assert goal.dynamic_goal == pytest.approx(200.0 + 270.0 / 28)
    assert goal.is_diluted is True


def test_deficit_conservation(history):
    goal = compute_dynamic_goal(200.0, history, TODAY)
    assert (goal.dynamic_goal - goal.base_goal) * goal.remaining_days == pytest.approx(goal.accumulated_deficit)


def test_surplus_does_not_offset_other_days(history, txn_factory):
    """Beating the goal on day 1 by a lot leaves the other days' deficit untouched"""
    richer = history + [txn_factory(TransactionCategory.PARTICULAR, 1000.0, date(2024, 3, 1))]

    assert compute_dynamic_goal(200.0, richer, TODAY).accumulated_deficit == pytest.approx(270.0)


def test_more_past_earnings_never_raise_the_goal(history, txn_factory):
    before = compute_dynamic_goal(200.0, history, TODAY)
    after = compute_dynamic_goal(
        200.0,
        history + [txn_factory(TransactionCategory.INDRIVER, 120.0, date(2024, 3, 2))],
        TODAY,
    )

    assert after.dynamic_goal <= before.dynamic_goal
    assert after.accumulated_deficit == pytest.approx(150.0)


def test_today_and_other_months_are_ignored(txn_factory):
    txns = [
        txn_factory(TransactionCategory.FUEL, 500.0, TODAY),
        txn_factory(TransactionCategory.FUEL, 500.0, date(2024, 2, 28)),
    ]
    goal = compute_dynamic_goal(100.0, txns, date(2024, 3, 2))

    # Only March 1 (idle) counts
    assert goal.accumulated_deficit == pytest.approx(100.0)


def test_first_day_of_month_has_no_deficit():
    goal = compute_dynamic_goal(200.0, [], date(2024, 3, 1))

    assert goal.accumulated_deficit == 0
    assert goal.remaining_days == 31
    assert goal.dynamic_goal == 200.0
    assert goal.is_diluted is False


def test_scheduled_rows_do_not_create_deficit(txn_factory):
    txns = [
        txn_factory(TransactionCategory.UBER, 200.0, date(2024, 3, 1)),
        txn_factory(TransactionCategory.FINANCING, 1500.0, date(2024, 3, 1), origin=TransactionOrigin.SCHEDULED),
    ]

    assert compute_dynamic_goal(200.0, txns, date(2024, 3, 2)).accumulated_deficit == 0


def test_filters_by_vehicle(txn_factory):
    txns = [txn_factory(TransactionCategory.UBER, 200.0, date(2024, 3, 1), vehicle_id="other")]

    goal = compute_dynamic_goal(200.0, txns, date(2024, 3, 2), vehicle_id="v1")

    assert goal.accumulated_deficit == pytest.approx(200.0)


def test_zero_goal_short_circuits(history):
    goal = compute_dynamic_goal(0.0, history, TODAY)

    assert goal.dynamic_goal == 0
    assert goal.is_diluted is False


def test_small_deficit_is_not_diluted(txn_factory):
    txns = [txn_factory(TransactionCategory.UBER, 197.0, date(2024, 3, 1))]
    goal = compute_dynamic_goal(200.0, txns, date(2024, 3, 2))

    assert goal.accumulated_deficit == pytest.approx(3.0)
    assert goal.is_diluted is False


def test_last_day_of_month_takes_whole_deficit():
    goal = compute_dynamic_goal(100.0, [], date(2024, 2, 29))

    assert goal.remaining_days == 1
    assert goal.dynamic_goal == pytest.approx(100.0 + 28 * 100.0)


def test_goal_progress_clamping():
    half = goal_progress(100.0, 200.0)
    assert half.raw_percent == pytest.approx(50.0)
    assert half.progress_percent == pytest.approx(50.0)

    loss = goal_progress(-50.0, 200.0)
    assert loss.raw_percent == pytest.approx(-25.0)
    assert loss.display_percent == 0
    assert loss.progress_percent == 0

    beaten = goal_progress(300.0, 200.0)
    assert beaten.display_percent == pytest.approx(150.0)
    assert beaten.progress_percent == 100.0


def test_goal_progress_without_goal():
    progress = goal_progress(500.0, 0.0)
    assert progress.raw_percent == 0
    assert progress.progress_percent == 0


def test_resolve_base_goal(vehicle_factory):
    user = User(uid="u1", email="a@b.c", name="a", daily_goal=200.0)
    vehicle = vehicle_factory(custom_daily_goal=250.0)

    assert resolve_base_goal(user, vehicle) == 250.0
    assert resolve_base_goal(user, vehicle_factory()) == 200.0
    assert resolve_base_goal(user, None) == 200.0

    user.goal_type = GoalType.GLOBAL
    assert resolve_base_goal(user, vehicle) == 200.0
