"""Savings log API endpoints."""
from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_clock, get_current_user, get_db
from app.models.savings_log import SavingsLog
from app.models.user import User
from app.schemas.auth import MessageResponse
from app.schemas.savings_log import (
    AnalyticsPeriod,
    SavingsAnalyticsResponse,
    SavingsLogCreate,
    SavingsLogCreatedResponse,
    SavingsLogListResponse,
    SavingsType,
)
from app.services.savings import (
    get_savings_analytics,
    get_user_product,
    get_user_savings_log,
    get_user_savings_logs,
)
from app.utils.clock import Clock, to_iso

router = APIRouter(prefix="/savings-logs", tags=["savings"])


@router.post("", response_model=SavingsLogCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_savings_log(
    log_data: SavingsLogCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
):
    """Record a contribution, optionally against one of the user's products."""
    if log_data.product_id:
        get_user_product(db, current_user.id, log_data.product_id)

    savings_log = SavingsLog(
        user_id=current_user.id,
        amount=log_data.amount,
        type=log_data.type,
        product_id=log_data.product_id or None,
        note=log_data.note.strip() if log_data.note else None,
        date=to_iso(log_data.date or clock()),
    )
    db.add(savings_log)
    db.commit()
    db.refresh(savings_log)
    return SavingsLogCreatedResponse(message="Savings log created successfully", savings_log=savings_log)


@router.get("", response_model=SavingsLogListResponse)
def list_savings_logs(
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    type: SavingsType | None = Query(None, description="money or gold"),
    product_id: str | None = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List savings logs with optional filters, newest first."""
    logs = get_user_savings_logs(
        db,
        current_user.id,
        start_date=start_date,
        end_date=end_date,
        savings_type=type,
        product_id=product_id,
        limit=limit,
    )
    return SavingsLogListResponse(savings_logs=logs)


@router.get("/analytics", response_model=SavingsAnalyticsResponse)
def savings_analytics(
    period: AnalyticsPeriod = Query("month"),
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
):
    """Savings totals grouped by day, ISO week or month."""
    analytics = get_savings_analytics(
        db,
        current_user.id,
        period=period,
        start_date=start_date,
        end_date=end_date,
        clock=clock,
    )
    return SavingsAnalyticsResponse(analytics=analytics)


@router.delete("/{log_id}", response_model=MessageResponse)
def delete_savings_log(
    log_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    savings_log = get_user_savings_log(db, current_user.id, log_id)
    db.delete(savings_log)
    db.commit()
    return MessageResponse(message="Savings log deleted successfully")
