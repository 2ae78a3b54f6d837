"""Public author profiles."""

import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.database import get_db
from src.models import User
from src.schemas import ProfileOut
from src import posts as post_service

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profiles", tags=["Profiles"])


@router.get("/{username}", response_model=ProfileOut)
def get_profile(username: str, db: Session = Depends(get_db)):
    """
    Get a user's public fields and their published posts.

    Args:
        username: Username of the profile owner
        db: Database session

    Returns:
        ProfileOut: Public user fields and published posts, newest first

    Raises:
        HTTPException: 404 if the user does not exist
    """
    logger.info(f"Fetching profile: {username}")

    user = db.query(User).filter(User.username == username).first()
    if not user:
        logger.warning(f"Profile not found: {username}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="not_found"
        )

    return {
        "user": user,
        "posts": post_service.list_published_by_author(db, user.id)
    }
