"""Savings log model."""
import uuid

from sqlalchemy import Column, Float, ForeignKey, Index, String
from sqlalchemy.orm import relationship

from app.database import Base
from app.utils.clock import now_iso

SAVINGS_TYPES = ("money", "gold")


class SavingsLog(Base):
    """One contribution, in currency or in grams of gold."""

    __tablename__ = "savings_logs"
    __table_args__ = (
        Index("ix_savings_logs_user_date", "user_id", "date"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="SET NULL"))
    amount = Column(Float, nullable=False)  # currency units or gold grams, see type
    type = Column(String(10), nullable=False, default="money")
    note = Column(String(500))
    date = Column(String(26), nullable=False, default=now_iso)
    created_at = Column(String(26), default=now_iso)
    updated_at = Column(String(26), default=now_iso, onupdate=now_iso)

    # Relationships
    user = relationship("User", back_populates="savings_logs")
    product = relationship("Product", back_populates="savings_logs")
