"""Savings timeline calculations for products.

Amounts are in the profile's currency. A month is counted as 30 days for
day estimates; completion dates use calendar months.
"""
from dataclasses import dataclass
from datetime import datetime
import math

from dateutil.relativedelta import relativedelta

from app.utils.clock import utcnow

DAYS_PER_MONTH = 30


@dataclass(frozen=True)
class SavingsTimeline:
    months_to_save: float
    days_to_save: int
    estimated_completion_date: datetime
    monthly_savings_amount: float


def calculate_savings_timeline(
    price: float,
    monthly_salary: float,
    savings_percentage: float,
    saved_amount: float = 0.0,
    now: datetime | None = None,
) -> SavingsTimeline | None:
    """How long it takes to save the rest of a product's price.

    Returns None when salary, savings percentage or price is not positive.
    """
    if monthly_salary <= 0 or savings_percentage <= 0 or price <= 0:
        return None

    now = now or utcnow()
    monthly_savings_amount = monthly_salary * savings_percentage / 100
    remaining = max(0.0, price - saved_amount)

    if remaining <= 0:
        return SavingsTimeline(
            months_to_save=0,
            days_to_save=0,
            estimated_completion_date=now,
            monthly_savings_amount=monthly_savings_amount,
        )

    months_to_save = remaining / monthly_savings_amount
    return SavingsTimeline(
        months_to_save=round(months_to_save, 2),
        days_to_save=math.ceil(months_to_save * DAYS_PER_MONTH),
        estimated_completion_date=now + relativedelta(months=math.ceil(months_to_save)),
        monthly_savings_amount=monthly_savings_amount,
    )


def calculate_required_monthly_savings(
    price: float,
    target_date: datetime,
    saved_amount: float = 0.0,
    now: datetime | None = None,
) -> float | None:
    """Monthly amount needed to finish saving by target_date, or None if it has passed."""
    now = now or utcnow()
    months_until_target = (target_date - now).total_seconds() / (DAYS_PER_MONTH * 24 * 60 * 60)
    if months_until_target <= 0:
        return None

    remaining = max(0.0, price - saved_amount)
    return remaining / months_until_target


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def format_timeline(timeline: SavingsTimeline) -> str:
    if timeline.months_to_save == 0:
        return "Goal already reached!"

    years = int(timeline.months_to_save // 12)
    months = int(timeline.months_to_save % 12)

    if years > 0:
        return f"{_plural(years, 'year')} and {_plural(months, 'month')}"
    if months > 0:
        return _plural(months, "month")
    return f"{timeline.days_to_save} days"
