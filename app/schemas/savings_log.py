"""Savings log schemas."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

SavingsType = Literal["money", "gold"]
AnalyticsPeriod = Literal["day", "week", "month"]


class SavingsLogCreate(BaseModel):
    amount: float = Field(..., ge=0)
    type: SavingsType = "money"
    product_id: str | None = None
    note: str | None = Field(None, max_length=500)
    date: datetime | None = None


class ProductSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    price: float


class SavingsLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    amount: float
    type: SavingsType
    product_id: str | None = None
    product: ProductSummary | None = None
    note: str | None = None
    date: str
    created_at: str


class SavingsLogCreatedResponse(BaseModel):
    message: str
    savings_log: SavingsLogResponse


class SavingsLogListResponse(BaseModel):
    savings_logs: list[SavingsLogResponse]


class SavingsTotals(BaseModel):
    money: float
    gold: float
    entries: int


class PeriodBucket(BaseModel):
    period: str
    type: SavingsType
    total_amount: float
    count: int


class SavingsAnalytics(BaseModel):
    period: AnalyticsPeriod
    start_date: str | None = None
    end_date: str
    totals: SavingsTotals
    by_period: list[PeriodBucket]


class SavingsAnalyticsResponse(BaseModel):
    analytics: SavingsAnalytics
