"""Posts router for public browsing and authoring."""

import logging
from typing import Any, List
from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.database import get_db
from src.models import User
from src.schemas import PostCreate, PostOut, PublicPostOut
from src.auth import get_current_user
from src import posts as post_service

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["Posts"])


@router.get("", response_model=List[PublicPostOut])
def list_posts(db: Session = Depends(get_db)):
    """
    List published posts, newest first, each with its author.

    Args:
        db: Database session

    Returns:
        List[PublicPostOut]: Published posts
    """
    logger.info("Fetching published posts")
    posts = post_service.list_published(db)
    logger.info(f"Found {len(posts)} published posts")
    return posts


# Registered before /{slug} so "me" is not read as a slug
@router.get("/me/all", response_model=List[PostOut])
def list_my_posts(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List all posts of the authenticated user, drafts included.

    Args:
        current_user: Authenticated user
        db: Database session

    Returns:
        List[PostOut]: The caller's posts, most recently updated first
    """
    logger.info(f"Fetching own posts for user {current_user.id}")
    return post_service.list_own(db, current_user.id)


@router.get("/{slug}", response_model=PublicPostOut)
def get_post(slug: str, db: Session = Depends(get_db)):
    """
    Get a single published post by slug.

    Raises:
        HTTPException: 404 if no published post has this slug
    """
    logger.info(f"Fetching post by slug: {slug}")
    post = post_service.get_published_by_slug(db, slug)
    if not post:
        logger.warning(f"Published post not found: {slug}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="not_found"
        )
    return post


@router.post("", status_code=status.HTTP_201_CREATED, response_model=PostOut)
def create_post(
    post_data: PostCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create a post. published=false stores it as a draft.

    Args:
        post_data: Title, Markdown content, published flag, cover image URL
        current_user: Authenticated user
        db: Database session

    Returns:
        PostOut: The created post
    """
    return post_service.create_post(db, current_user, post_data)


@router.put("/{post_id}", response_model=PostOut)
def update_post(
    post_id: int,
    update_data: Any = Body(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update a post owned by the caller.

    The body (title, content, published, saveAsDraft, cover_image) is
    validated only after ownership is confirmed.

    Raises:
        HTTPException: 404 if missing, 403 if not the owner
    """
    return post_service.update_post(db, post_id, current_user.id, update_data)
