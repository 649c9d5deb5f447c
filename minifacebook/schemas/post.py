# minifacebook/schemas/post.py
from datetime import datetime
from typing import Optional
from pydantic import Field, HttpUrl
from .base import BaseSchema


class PostCreateIn(BaseSchema):
    content: str = Field(..., min_length=1, max_length=5000)
    image_url: Optional[HttpUrl] = None


class PostOut(BaseSchema):
    post_id: int
    author_id: int
    author_name: str
    content: str
    image_url: Optional[str] = None
    like_count: int
    comment_count: int
    liked_by_me: bool = False
    created_at: datetime


class LikeIn(BaseSchema):
    liked: bool


class LikeOut(BaseSchema):
    post_id: int
    liked: bool
    like_count: int


class CommentCreateIn(BaseSchema):
    content: str = Field(..., min_length=1, max_length=2000)


class CommentOut(BaseSchema):
    comment_id: int
    post_id: int
    author_id: int
    author_name: str
    content: str
    created_at: datetime
