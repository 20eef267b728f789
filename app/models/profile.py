"""Savings profile model."""
import uuid

from sqlalchemy import Column, Float, ForeignKey, String
from sqlalchemy.orm import relationship

from app.database import Base
from app.utils.clock import now_iso


class Profile(Base):
    """Per-user savings preferences, created alongside the account."""

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)
    monthly_salary = Column(Float, nullable=False, default=0.0)
    currency = Column(String(10), nullable=False, default="USD")
    monthly_savings_percentage = Column(Float, nullable=False, default=20.0)
    created_at = Column(String(26), default=now_iso)
    updated_at = Column(String(26), default=now_iso, onupdate=now_iso)

    user = relationship("User", back_populates="profile")
