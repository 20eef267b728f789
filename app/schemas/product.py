"""Product schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    price: float = Field(..., ge=0)
    monthly_savings: float = Field(0, ge=0)
    is_wishlisted: bool = False
    saved_amount: float = Field(0, ge=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Product name is required")
        return value


class ProductUpdate(BaseModel):
    """Partial product update; omitted fields keep their value."""

    name: str | None = Field(None, min_length=1, max_length=200)
    price: float | None = Field(None, ge=0)
    monthly_savings: float | None = Field(None, ge=0)
    is_wishlisted: bool | None = None
    saved_amount: float | None = Field(None, ge=0)


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    name: str
    price: float
    monthly_savings: float
    is_wishlisted: bool
    saved_amount: float
    created_at: str
    updated_at: str


class ProductListResponse(BaseModel):
    products: list[ProductResponse]


class ProductMessageResponse(BaseModel):
    message: str
    product: ProductResponse


class SavingsTimelineResponse(BaseModel):
    """How long until a product is paid for at the profile's savings rate."""

    product_id: str
    remaining_amount: float
    currency: str
    months_to_save: float | None = None
    days_to_save: int | None = None
    estimated_completion_date: datetime | None = None
    monthly_savings_amount: float | None = None
    summary: str | None = None
    required_monthly_savings: float | None = None
