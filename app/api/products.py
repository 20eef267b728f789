"""Products API endpoints."""
from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_clock, get_current_user, get_db
from app.api.profile import get_or_create_profile
from app.models.product import Product
from app.models.user import User
from app.schemas.auth import MessageResponse
from app.schemas.product import (
    ProductCreate,
    ProductListResponse,
    ProductMessageResponse,
    ProductResponse,
    ProductUpdate,
    SavingsTimelineResponse,
)
from app.services.savings import get_user_product
from app.services.savings_calculator import (
    calculate_required_monthly_savings,
    calculate_savings_timeline,
    format_timeline,
)
from app.utils.clock import Clock, to_naive_utc

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ProductListResponse)
def list_products(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """All of the user's products, newest first."""
    products = (
        db.query(Product)
        .filter(Product.user_id == current_user.id)
        .order_by(Product.created_at.desc())
        .all()
    )
    return ProductListResponse(products=products)


@router.get("/wishlisted", response_model=ProductListResponse)
def list_wishlisted_products(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    products = (
        db.query(Product)
        .filter(Product.user_id == current_user.id, Product.is_wishlisted == 1)
        .order_by(Product.created_at.desc())
        .all()
    )
    return ProductListResponse(products=products)


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_user_product(db, current_user.id, product_id)


@router.post("", response_model=ProductMessageResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = Product(
        user_id=current_user.id,
        name=product_data.name,
        price=product_data.price,
        monthly_savings=product_data.monthly_savings,
        is_wishlisted=1 if product_data.is_wishlisted else 0,
        saved_amount=product_data.saved_amount,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return ProductMessageResponse(message="Product created successfully", product=product)


@router.put("/{product_id}", response_model=ProductMessageResponse)
def update_product(
    product_id: str,
    product_data: ProductUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update any subset of a product's fields."""
    product = get_user_product(db, current_user.id, product_id)
    for field, value in product_data.model_dump(exclude_unset=True, exclude_none=True).items():
        if field == "is_wishlisted":
            value = 1 if value else 0
        setattr(product, field, value)
    db.commit()
    db.refresh(product)
    return ProductMessageResponse(message="Product updated successfully", product=product)


@router.delete("/{product_id}", response_model=MessageResponse)
def delete_product(
    product_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a product. Savings logs that pointed at it are kept, unlinked."""
    product = get_user_product(db, current_user.id, product_id)
    db.delete(product)
    db.commit()
    return MessageResponse(message="Product deleted successfully")


@router.patch("/{product_id}/wishlist", response_model=ProductMessageResponse)
def toggle_wishlist(
    product_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = get_user_product(db, current_user.id, product_id)
    product.is_wishlisted = 0 if product.is_wishlisted else 1
    db.commit()
    db.refresh(product)
    return ProductMessageResponse(message="Wishlist status updated", product=product)


@router.get("/{product_id}/timeline", response_model=SavingsTimelineResponse)
def get_savings_timeline(
    product_id: str,
    target_date: datetime | None = Query(None, description="Optional date to finish saving by"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
):
    """Estimate when the product is paid for from the profile's salary and savings rate."""
    product = get_user_product(db, current_user.id, product_id)
    profile = get_or_create_profile(db, current_user)
    db.commit()

    now = clock()
    response = SavingsTimelineResponse(
        product_id=product.id,
        remaining_amount=max(0.0, product.price - product.saved_amount),
        currency=profile.currency,
    )

    timeline = calculate_savings_timeline(
        price=product.price,
        monthly_salary=profile.monthly_salary,
        savings_percentage=profile.monthly_savings_percentage,
        saved_amount=product.saved_amount,
        now=now,
    )
    if timeline is not None:
        response.months_to_save = timeline.months_to_save
        response.days_to_save = timeline.days_to_save
        response.estimated_completion_date = timeline.estimated_completion_date
        response.monthly_savings_amount = timeline.monthly_savings_amount
        response.summary = format_timeline(timeline)

    if target_date is not None:
        response.required_monthly_savings = calculate_required_monthly_savings(
            price=product.price,
            target_date=to_naive_utc(target_date),
            saved_amount=product.saved_amount,
            now=now,
        )

    return response
