from typing import Dict, List, Optional, Set

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy import select, func, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from minifacebook.core.auth import get_current_account_id, get_current_account_id_optional
from minifacebook.core.db import get_db
from minifacebook.core.errors import Forbidden, NotFound
from minifacebook.models.comment import Comment
from minifacebook.models.like import Like
from minifacebook.models.post import Post
from minifacebook.schemas.common import Page
from minifacebook.schemas.post import PostCreateIn, PostOut, LikeIn, LikeOut

router = APIRouter(prefix="/api/posts", tags=["posts"])


# ---------- helpers ----------
def to_post_out(p: Post, like_count: int, comment_count: int, liked_by_me: bool = False) -> PostOut:
    return PostOut(
        post_id=p.id,
        author_id=p.author_id,
        author_name=p.author.name if p.author else "",
        content=p.content,
        image_url=p.image_url,
        like_count=like_count,
        comment_count=comment_count,
        liked_by_me=liked_by_me,
        created_at=p.created_at,
    )


def count_by_post(db: Session, model, post_ids: List[int]) -> Dict[int, int]:
    if not post_ids:
        return {}
    rows = db.execute(
        select(model.post_id, func.count())
        .where(model.post_id.in_(post_ids))
        .group_by(model.post_id)
    ).all()
    return {pid: n for pid, n in rows}


def liked_post_ids(db: Session, me: Optional[int], post_ids: List[int]) -> Set[int]:
    if me is None or not post_ids:
        return set()
    return set(
        db.execute(
            select(Like.post_id).where(Like.user_id == me, Like.post_id.in_(post_ids))
        ).scalars().all()
    )


def get_post_or_404(db: Session, post_id: int) -> Post:
    p = db.get(Post, post_id)
    if not p:
        raise NotFound("Post not found", code="post_not_found")
    return p


def like_count_of(db: Session, post_id: int) -> int:
    return db.scalar(select(func.count()).select_from(Like).where(Like.post_id == post_id)) or 0


# ---------- 게시물 작성 ----------
@router.post("", response_model=PostOut, status_code=status.HTTP_201_CREATED)
def create_post(
    body: PostCreateIn,
    db: Session = Depends(get_db),
    me: int = Depends(get_current_account_id),
):
    p = Post(
        author_id=me,
        content=body.content,
        image_url=str(body.image_url) if body.image_url else None,
    )
    db.add(p)
    db.commit()
    db.refresh(p)
    return to_post_out(p, like_count=0, comment_count=0)


# ---------- 피드 (토큰 optional) ----------
@router.get("", response_model=Page[PostOut])
def list_posts(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    me: Optional[int] = Depends(get_current_account_id_optional),
):
    total = db.scalar(select(func.count()).select_from(Post)) or 0
    rows = db.execute(
        select(Post)
        .order_by(desc(Post.created_at), desc(Post.id))
        .offset((page - 1) * size)
        .limit(size)
    ).scalars().all()

    ids = [p.id for p in rows]
    likes = count_by_post(db, Like, ids)
    comments = count_by_post(db, Comment, ids)
    mine = liked_post_ids(db, me, ids)

    data = [
        to_post_out(p, likes.get(p.id, 0), comments.get(p.id, 0), p.id in mine)
        for p in rows
    ]
    return Page[PostOut](page=page, size=size, total=total, data=data)


# ---------- 게시물 상세 ----------
@router.get("/{post_id}", response_model=PostOut)
def get_post(
    post_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    me: Optional[int] = Depends(get_current_account_id_optional),
):
    p = get_post_or_404(db, post_id)
    likes = count_by_post(db, Like, [p.id])
    comments = count_by_post(db, Comment, [p.id])
    return to_post_out(p, likes.get(p.id, 0), comments.get(p.id, 0), p.id in liked_post_ids(db, me, [p.id]))


# ---------- 게시물 삭제 (작성자만) ----------
@router.delete("/{post_id}", status_code=status.HTTP_200_OK)
def delete_post(
    post_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    me: int = Depends(get_current_account_id),
):
    p = get_post_or_404(db, post_id)
    if p.author_id != me:
        raise Forbidden("Only the author can delete this post")

    db.delete(p)
    db.commit()
    return {"postId": post_id}


# ---------- 좋아요 토글 ----------
@router.put("/{post_id}/like", response_model=LikeOut)
def set_like(
    body: LikeIn,
    post_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    me: int = Depends(get_current_account_id),
):
    p = get_post_or_404(db, post_id)
    like = db.get(Like, (me, p.id))

    # 이미 같은 상태면 no-op
    if body.liked and not like:
        db.add(Like(user_id=me, post_id=p.id))
    elif not body.liked and like:
        db.delete(like)
    try:
        db.commit()
    except IntegrityError:
        # 동시 요청이 먼저 좋아요를 넣음 → 결과는 같음
        db.rollback()

    return LikeOut(post_id=p.id, liked=body.liked, like_count=like_count_of(db, p.id))
