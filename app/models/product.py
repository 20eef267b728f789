"""Savings goal product model."""
import uuid

from sqlalchemy import Column, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from app.database import Base
from app.utils.clock import now_iso


class Product(Base):
    """Something a user is saving up for."""

    __tablename__ = "products"
    __table_args__ = (
        Index("ix_products_user_created", "user_id", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    price = Column(Float, nullable=False)
    monthly_savings = Column(Float, nullable=False, default=0.0)
    is_wishlisted = Column(Integer, nullable=False, default=0)  # SQLite boolean
    saved_amount = Column(Float, nullable=False, default=0.0)
    created_at = Column(String(26), default=now_iso)
    updated_at = Column(String(26), default=now_iso, onupdate=now_iso)

    # Relationships
    user = relationship("User", back_populates="products")
    savings_logs = relationship("SavingsLog", back_populates="product")
