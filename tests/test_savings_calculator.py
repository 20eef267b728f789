from datetime import datetime, timedelta

import pytest

from app.services.savings_calculator import (
    SavingsTimeline,
    calculate_required_monthly_savings,
    calculate_savings_timeline,
    format_timeline,
)

NOW = datetime(2025, 1, 15, 9, 30)


@pytest.mark.parametrize(
    "price, salary, percentage",
    [(1000, 0, 20), (1000, 5000, 0), (0, 5000, 20), (1000, -1, 20)],
)
def test_timeline_needs_positive_inputs(price, salary, percentage):
    assert calculate_savings_timeline(price, salary, percentage, now=NOW) is None


def test_timeline_for_remaining_amount():
    timeline = calculate_savings_timeline(3500, 5000, 20, saved_amount=500, now=NOW)

    assert timeline.monthly_savings_amount == 1000
    assert timeline.months_to_save == 3
    assert timeline.days_to_save == 90
    assert timeline.estimated_completion_date == datetime(2025, 4, 15, 9, 30)


def test_partial_month_rounds_completion_up():
    timeline = calculate_savings_timeline(2500, 5000, 20, now=NOW)

    assert timeline.months_to_save == 2.5
    assert timeline.days_to_save == 75
    assert timeline.estimated_completion_date == datetime(2025, 4, 15, 9, 30)


def test_completion_date_clamps_to_month_end():
    timeline = calculate_savings_timeline(1000, 5000, 20, now=datetime(2025, 1, 31))

    assert timeline.estimated_completion_date == datetime(2025, 2, 28)


def test_goal_already_reached():
    timeline = calculate_savings_timeline(1000, 5000, 20, saved_amount=1200, now=NOW)

    assert timeline.months_to_save == 0
    assert timeline.days_to_save == 0
    assert timeline.estimated_completion_date == NOW
    assert format_timeline(timeline) == "Goal already reached!"


@pytest.mark.parametrize(
    "months, days, expected",
    [
        (14.2, 426, "1 year and 2 months"),
        (25, 750, "2 years and 1 month"),
        (1.5, 45, "1 month"),
        (0.5, 15, "15 days"),
    ],
)
def test_format_timeline(months, days, expected):
    timeline = SavingsTimeline(
        months_to_save=months,
        days_to_save=days,
        estimated_completion_date=NOW,
        monthly_savings_amount=100,
    )

    assert format_timeline(timeline) == expected


def test_required_monthly_savings_spreads_remaining_amount():
    required = calculate_required_monthly_savings(3500, NOW + timedelta(days=90), saved_amount=500, now=NOW)

    assert required == pytest.approx(1000)


def test_required_monthly_savings_for_past_target_is_none():
    assert calculate_required_monthly_savings(3500, NOW - timedelta(days=1), now=NOW) is None
