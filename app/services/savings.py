"""Savings log queries and per-period analytics."""
from collections import defaultdict
from datetime import datetime, timedelta
import logging

from sqlalchemy.orm import Session

from app.models.product import Product
from app.models.savings_log import SavingsLog
from app.services.errors import ProductNotFound, SavingsLogNotFound
from app.utils.clock import Clock, from_iso, to_iso, utcnow

logger = logging.getLogger(__name__)

PERIOD_KEYS = {
    "day": lambda value: value.strftime("%Y-%m-%d"),
    "week": lambda value: "{0}-W{1:02d}".format(*value.isocalendar()),
    "month": lambda value: value.strftime("%Y-%m"),
}
DEFAULT_ANALYTICS_WINDOW = timedelta(days=30)


def get_user_product(db: Session, user_id: str, product_id: str) -> Product:
    product = db.query(Product).filter(Product.id == product_id, Product.user_id == user_id).first()
    if product is None:
        raise ProductNotFound()
    return product


def get_user_savings_log(db: Session, user_id: str, log_id: str) -> SavingsLog:
    log = db.query(SavingsLog).filter(SavingsLog.id == log_id, SavingsLog.user_id == user_id).first()
    if log is None:
        raise SavingsLogNotFound()
    return log


def _filtered_logs(
    db: Session,
    user_id: str,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    savings_type: str | None = None,
    product_id: str | None = None,
):
    query = db.query(SavingsLog).filter(SavingsLog.user_id == user_id)
    if start_date:
        query = query.filter(SavingsLog.date >= to_iso(start_date))
    if end_date:
        query = query.filter(SavingsLog.date <= to_iso(end_date))
    if savings_type:
        query = query.filter(SavingsLog.type == savings_type)
    if product_id:
        query = query.filter(SavingsLog.product_id == product_id)
    return query


def get_user_savings_logs(
    db: Session,
    user_id: str,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    savings_type: str | None = None,
    product_id: str | None = None,
    limit: int = 100,
) -> list[SavingsLog]:
    """Savings logs for a user, newest first."""
    return (
        _filtered_logs(db, user_id, start_date, end_date, savings_type, product_id)
        .order_by(SavingsLog.date.desc())
        .limit(limit)
        .all()
    )


def get_savings_analytics(
    db: Session,
    user_id: str,
    period: str = "month",
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    clock: Clock = utcnow,
) -> dict:
    """Totals per savings type, and per period bucket and type.

    Without a date range the last 30 days are used.
    """
    now = clock()
    if start_date is None and end_date is None:
        start_date = now - DEFAULT_ANALYTICS_WINDOW
    period_key = PERIOD_KEYS[period]

    logs = _filtered_logs(db, user_id, start_date, end_date).all()

    buckets = defaultdict(lambda: {"total_amount": 0.0, "count": 0})
    totals = {"money": 0.0, "gold": 0.0, "entries": 0}
    for log in logs:
        key = (period_key(from_iso(log.date)), log.type)
        buckets[key]["total_amount"] += log.amount
        buckets[key]["count"] += 1
        totals[log.type] += log.amount
        totals["entries"] += 1

    logger.debug(f"Aggregated {len(logs)} savings logs into {len(buckets)} buckets for user {user_id}")

    return {
        "period": period,
        "start_date": to_iso(start_date) if start_date else None,
        "end_date": to_iso(end_date or now),
        "totals": totals,
        "by_period": [
            {"period": bucket_period, "type": savings_type, **values}
            for (bucket_period, savings_type), values in sorted(buckets.items())
        ],
    }
