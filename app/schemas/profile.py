"""Profile schemas."""
from pydantic import BaseModel, ConfigDict, Field


class ProfileResponse(BaseModel):
    """Savings profile response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    monthly_salary: float
    currency: str
    monthly_savings_percentage: float
    created_at: str
    updated_at: str


class ProfileUpdate(BaseModel):
    """Partial profile update; omitted fields keep their value."""

    monthly_salary: float | None = Field(None, ge=0)
    currency: str | None = Field(None, min_length=1, max_length=10)
    monthly_savings_percentage: float | None = Field(None, ge=0, le=100)
