"""Pydantic schemas for request and response validation."""

from datetime import datetime
from typing import List, Optional
from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator

from src.validators import is_blank


# Auth Schemas
class UserSignup(BaseModel):
    """Schema for user signup request."""

    username: str
    email: EmailStr
    password: str
    captcha_proof: Optional[str] = Field(
        None,
        validation_alias=AliasChoices('captchaProof', 'recaptchaToken')
    )

    @field_validator('username')
    @classmethod
    def username_min_length(cls, v: str) -> str:
        """Strip the username and require at least 3 characters."""
        v = v.strip()
        if len(v) < 3:
            raise ValueError('Username must be at least 3 characters')
        return v


class UserLogin(BaseModel):
    """Schema for user login request. The identifier is an email or a username."""

    identifier: str
    password: str
    captcha_proof: Optional[str] = Field(
        None,
        validation_alias=AliasChoices('captchaProof', 'recaptchaToken')
    )

    @field_validator('identifier')
    @classmethod
    def identifier_not_empty(cls, v: str) -> str:
        """Validate that identifier is not empty."""
        if is_blank(v):
            raise ValueError('Identifier cannot be empty')
        return v.strip()

    @field_validator('password')
    @classmethod
    def password_not_empty(cls, v: str) -> str:
        """Validate that password is not empty."""
        if not v:
            raise ValueError('Password cannot be empty')
        return v


class SignupUser(BaseModel):
    id: int
    username: str


class SignupResponse(BaseModel):
    """Schema for a successful signup."""

    message: str
    user: SignupUser


class Token(BaseModel):
    """Schema for JWT token response."""

    token: str


# Post Schemas
class PostCreate(BaseModel):
    """Schema for post creation request."""

    title: str
    content: str
    published: bool = False
    cover_image: Optional[str] = None

    @field_validator('title')
    @classmethod
    def title_not_empty(cls, v: str) -> str:
        """Validate that title is not empty."""
        if is_blank(v):
            raise ValueError('Title cannot be empty')
        return v.strip()


class PostUpdate(BaseModel):
    """Schema for post update request. Every field is optional."""

    title: Optional[str] = None
    content: Optional[str] = None
    published: Optional[bool] = None
    save_as_draft: Optional[bool] = Field(
        None,
        validation_alias=AliasChoices('saveAsDraft', 'save_as_draft')
    )
    cover_image: Optional[str] = None

    @field_validator('title')
    @classmethod
    def blank_title_is_unset(cls, v: Optional[str]) -> Optional[str]:
        """A blank title leaves the stored title untouched."""
        if is_blank(v):
            return None
        return v.strip()


class AuthorOut(BaseModel):
    """Public projection of a post author. Never carries email or password hash."""

    id: int
    username: str
    display_name: Optional[str] = None

    class Config:
        from_attributes = True


class PostOut(BaseModel):
    """Schema for a post as returned to its owner or in profiles."""

    id: int
    author_id: int
    title: str
    slug: str
    content: str
    html_content: Optional[str] = None
    published: bool
    is_draft: bool
    cover_image: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PublicPostOut(PostOut):
    """Schema for a published post joined with its author."""

    author: AuthorOut


# Profile Schemas
class ProfileUser(BaseModel):
    username: str
    display_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


class ProfileOut(BaseModel):
    """Schema for a public profile with its published posts."""

    user: ProfileUser
    posts: List[PostOut]


# Upload Schemas
class UploadUrlRequest(BaseModel):
    """Schema for presigned upload URL request."""

    filename: Optional[str] = None
    content_type: Optional[str] = Field(
        None,
        validation_alias=AliasChoices('contentType', 'content_type')
    )


class UploadUrlResponse(BaseModel):
    """Schema for presigned upload URL response."""

    url: str
    key: str
    public_url: str = Field(serialization_alias='publicUrl')
