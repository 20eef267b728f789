"""Profile API endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.models.profile import Profile
from app.models.user import User
from app.schemas.profile import ProfileResponse, ProfileUpdate

router = APIRouter(prefix="/profile", tags=["profile"])


def get_or_create_profile(db: Session, user: User) -> Profile:
    """Get the user's profile, creating a default one for older accounts."""
    profile = db.query(Profile).filter(Profile.user_id == user.id).first()
    if profile is None:
        profile = Profile(user_id=user.id)
        db.add(profile)
        db.flush()
    return profile


@router.get("", response_model=ProfileResponse)
def get_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get the current user's savings profile."""
    profile = get_or_create_profile(db, current_user)
    db.commit()
    db.refresh(profile)
    return profile


@router.put("", response_model=ProfileResponse)
def update_profile(
    profile_data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update salary, currency or savings percentage."""
    profile = get_or_create_profile(db, current_user)
    for field, value in profile_data.model_dump(exclude_unset=True, exclude_none=True).items():
        if field == "currency":
            value = value.strip().upper()
        setattr(profile, field, value)
    db.commit()
    db.refresh(profile)
    return profile
