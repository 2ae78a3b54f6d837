"""Post service: slugs, Markdown rendering, and post persistence rules."""

import logging
from typing import Any, Callable, List, Optional
import bleach
import markdown
from fastapi import HTTPException, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from slugify import slugify
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from src.models import Post, User
from src.schemas import PostCreate, PostUpdate

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_SLUG = "post"
SLUG_RETRY_ATTEMPTS = 3

MARKDOWN_EXTENSIONS = ["fenced_code", "tables"]

ALLOWED_TAGS = frozenset([
    "p", "br", "hr",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "blockquote", "pre", "code",
    "em", "strong", "b", "i", "s", "del",
    "ul", "ol", "li",
    "table", "thead", "tbody", "tr", "th", "td",
    "a", "img",
])

ALLOWED_ATTRIBUTES = {
    "a": ["href", "name", "title"],
    "img": ["src", "alt", "title"],
}

ALLOWED_PROTOCOLS = frozenset(["http", "https", "mailto"])


def slugify_title(title: Optional[str]) -> str:
    """Lowercase, ASCII-normalize and hyphenate a title; empty results become 'post'."""
    return slugify(title or "") or DEFAULT_SLUG


def _slug_taken(db: Session, slug: str, exclude_post_id: Optional[int]) -> bool:
    query = db.query(Post.id).filter(Post.slug == slug)
    if exclude_post_id is not None:
        query = query.filter(Post.id != exclude_post_id)
    return query.first() is not None


def make_unique_slug(db: Session, title: str, exclude_post_id: Optional[int] = None) -> str:
    """
    Derive a slug from the title that no other post holds.

    Candidates are tried in order: base, base-1, base-2, ... so the same
    title always yields the same sequence.

    Args:
        db: Database session
        title: Post title
        exclude_post_id: Post being renamed, whose own slug is not a collision

    Returns:
        str: First free slug
    """
    base_slug = slugify_title(title)
    slug = base_slug
    counter = 1
    while _slug_taken(db, slug, exclude_post_id):
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug


def render_markdown(content: str) -> str:
    """
    Render Markdown to HTML and sanitize it against a strict allow-list.

    Disallowed tags are stripped and links or images with unsafe protocols
    lose their URL.

    Args:
        content: Raw Markdown

    Returns:
        str: Sanitized HTML
    """
    html = markdown.markdown(content or "", extensions=MARKDOWN_EXTENSIONS)
    return bleach.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
    )


def _commit_with_retry(db: Session, apply_changes: Callable[[], Post]) -> Post:
    """
    Apply changes and commit, re-running the slug search on a unique-constraint race.

    apply_changes must be safe to call again after a rollback.
    """
    for attempt in range(1, SLUG_RETRY_ATTEMPTS + 1):
        post = apply_changes()
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Slug collision on commit (attempt {attempt}/{SLUG_RETRY_ATTEMPTS}): {e.orig}")
            continue
        db.refresh(post)
        return post

    logger.error("Giving up on slug after repeated collisions")
    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="slug_conflict"
    )


def list_published(db: Session) -> List[Post]:
    """Return published posts, newest first, with authors loaded."""
    return (
        db.query(Post)
        .options(joinedload(Post.author))
        .filter(Post.published.is_(True))
        .order_by(Post.created_at.desc(), Post.id.desc())
        .all()
    )


def get_published_by_slug(db: Session, slug: str) -> Optional[Post]:
    """Return the published post with this slug, or None. Drafts are not found."""
    return (
        db.query(Post)
        .options(joinedload(Post.author))
        .filter(Post.slug == slug, Post.published.is_(True))
        .first()
    )


def list_own(db: Session, author_id: int) -> List[Post]:
    """Return every post of the author, drafts included, most recently updated first."""
    return (
        db.query(Post)
        .filter(Post.author_id == author_id)
        .order_by(Post.updated_at.desc(), Post.id.desc())
        .all()
    )


def list_published_by_author(db: Session, author_id: int) -> List[Post]:
    return (
        db.query(Post)
        .filter(Post.author_id == author_id, Post.published.is_(True))
        .order_by(Post.created_at.desc(), Post.id.desc())
        .all()
    )


def create_post(db: Session, author: User, data: PostCreate) -> Post:
    """
    Create a post for the author.

    Args:
        db: Database session
        author: Owner of the new post
        data: Validated post fields

    Returns:
        Post: The stored post
    """
    logger.info(f"Creating post '{data.title}' for user {author.id}")
    html_content = render_markdown(data.content)

    def apply_changes() -> Post:
        post = Post(
            author_id=author.id,
            title=data.title,
            slug=make_unique_slug(db, data.title),
            content=data.content,
            html_content=html_content,
            cover_image=data.cover_image or None,
        )
        post.set_published(data.published)
        db.add(post)
        return post

    post = _commit_with_retry(db, apply_changes)
    logger.info(f"Post created: id={post.id}, slug={post.slug}, published={post.published}")
    return post


def update_post(db: Session, post_id: int, author_id: int, payload: Any) -> Post:
    """
    Update a post owned by the caller.

    The ownership check runs before the payload is validated, so a caller
    who does not own the post gets 403 whatever they sent. The slug is
    re-derived only when the title changes and the HTML only when content is
    sent. An explicit published flag wins over saveAsDraft.

    Args:
        db: Database session
        post_id: Post to update
        author_id: Id of the authenticated caller
        payload: Raw request body, validated against PostUpdate

    Returns:
        Post: The updated post

    Raises:
        HTTPException: 404 if the post does not exist, 403 if the caller does not own it
        RequestValidationError: If the payload does not match PostUpdate
    """
    logger.info(f"Updating post {post_id} for user {author_id}")

    post = db.query(Post).filter(Post.id == post_id).first()
    if not post:
        logger.warning(f"Post not found: {post_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="not_found"
        )

    if post.author_id != author_id:
        logger.warning(f"User {author_id} attempted to update post {post_id} owned by {post.author_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="forbidden"
        )

    try:
        patch = PostUpdate.model_validate(payload if payload is not None else {})
    except ValidationError as e:
        raise RequestValidationError(e.errors())

    html_content = render_markdown(patch.content) if patch.content is not None else None

    def apply_changes() -> Post:
        if patch.title is not None and patch.title != post.title:
            post.title = patch.title
            post.slug = make_unique_slug(db, patch.title, exclude_post_id=post.id)
            logger.debug(f"Renamed post {post_id}, new slug {post.slug}")

        if patch.content is not None:
            post.content = patch.content
            post.html_content = html_content

        if patch.cover_image:
            post.cover_image = patch.cover_image

        if patch.published is not None:
            post.set_published(patch.published)
        elif patch.save_as_draft is True:
            post.set_published(False)

        return post

    post = _commit_with_retry(db, apply_changes)
    logger.info(f"Post {post_id} updated successfully")
    return post
