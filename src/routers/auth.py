"""Authentication router for user signup and login."""

import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.database import get_db
from src.models import User
from src.schemas import UserSignup, UserLogin, SignupResponse, Token
from src.auth import hash_password, verify_password, create_access_token
from src.captcha import verify_captcha
from src.validators import password_problems

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=SignupResponse)
def signup(user_data: UserSignup, db: Session = Depends(get_db)):
    """
    Register a new user.

    Args:
        user_data: Signup data (username, email, password, captcha proof)
        db: Database session

    Returns:
        SignupResponse: Confirmation with the new user's id and username

    Raises:
        HTTPException: If the password is weak, the captcha fails, or the
            username or email is already taken
    """
    logger.info(f"Signup attempt for username: {user_data.username}")

    problems = password_problems(user_data.password)
    if problems:
        logger.warning(f"Signup rejected: weak password - {user_data.username}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=problems
        )

    if not verify_captcha(user_data.captcha_proof):
        logger.warning(f"Signup rejected: captcha failed - {user_data.username}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="captcha_failed"
        )

    # Check username and email in one query
    existing_user = db.query(User).filter(
        or_(User.email == user_data.email, User.username == user_data.username)
    ).first()
    if existing_user:
        logger.warning(f"Signup rejected: username or email taken - {user_data.username}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="username_or_email_taken"
        )

    new_user = User(
        username=user_data.username,
        email=user_data.email,
        password_hash=hash_password(user_data.password),
        display_name=user_data.username
    )

    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same username or email
        db.rollback()
        logger.warning(f"Signup rejected on commit: username or email taken - {user_data.username}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="username_or_email_taken"
        )
    db.refresh(new_user)

    logger.info(f"User registered successfully: {new_user.username} (id={new_user.id})")
    return {
        "message": "signup_success",
        "user": {"id": new_user.id, "username": new_user.username}
    }


@router.post("/login", response_model=Token)
def login(user_data: UserLogin, db: Session = Depends(get_db)):
    """
    Authenticate a user by email or username and return a JWT.

    A missing account and a wrong password produce the same response.

    Args:
        user_data: Login data (identifier, password, captcha proof)
        db: Database session

    Returns:
        Token: JWT bearer token valid for seven days

    Raises:
        HTTPException: If the captcha fails or the credentials are invalid
    """
    logger.info(f"Login attempt for identifier: {user_data.identifier}")

    if not verify_captcha(user_data.captcha_proof):
        logger.warning(f"Login rejected: captcha failed - {user_data.identifier}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="captcha_failed"
        )

    invalid_credentials = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="invalid_credentials"
    )

    user = db.query(User).filter(
        or_(User.email == user_data.identifier, User.username == user_data.identifier)
    ).first()
    if not user:
        logger.warning(f"Login failed: user not found - {user_data.identifier}")
        raise invalid_credentials

    if not verify_password(user_data.password, user.password_hash):
        logger.warning(f"Login failed: invalid password - {user_data.identifier}")
        raise invalid_credentials

    token = create_access_token(user.id)

    logger.info(f"User logged in successfully: {user.username}")
    return {"token": token}
