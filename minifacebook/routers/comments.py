from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from minifacebook.core.auth import get_current_account_id
from minifacebook.core.db import get_db
from minifacebook.core.errors import Forbidden, NotFound
from minifacebook.models.comment import Comment
from minifacebook.routers.posts import get_post_or_404
from minifacebook.schemas.common import Page
from minifacebook.schemas.post import CommentCreateIn, CommentOut

router = APIRouter(prefix="/api/posts/{post_id}/comments", tags=["comments"])


def to_comment_out(c: Comment) -> CommentOut:
    return CommentOut(
        comment_id=c.id,
        post_id=c.post_id,
        author_id=c.author_id,
        author_name=c.author.name if c.author else "",
        content=c.content,
        created_at=c.created_at,
    )


@router.get("", response_model=Page[CommentOut])
def list_comments(
    post_id: int = Path(..., ge=1),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    get_post_or_404(db, post_id)

    q = select(Comment).where(Comment.post_id == post_id)
    total = db.scalar(select(func.count()).select_from(q.subquery())) or 0
    rows = db.execute(
        q.order_by(Comment.created_at, Comment.id).offset((page - 1) * size).limit(size)
    ).scalars().all()

    return Page[CommentOut](page=page, size=size, total=total, data=[to_comment_out(c) for c in rows])


@router.post("", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
def add_comment(
    body: CommentCreateIn,
    post_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    me: int = Depends(get_current_account_id),
):
    get_post_or_404(db, post_id)

    c = Comment(post_id=post_id, author_id=me, content=body.content)
    db.add(c)
    db.commit()
    db.refresh(c)
    return to_comment_out(c)


@router.delete("/{comment_id}", status_code=status.HTTP_200_OK)
def delete_comment(
    post_id: int = Path(..., ge=1),
    comment_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    me: int = Depends(get_current_account_id),
):
    c = db.get(Comment, comment_id)
    if not c or c.post_id != post_id:
        raise NotFound("Comment not found", code="comment_not_found")
    if c.author_id != me:
        raise Forbidden("Only the author can delete this comment")

    db.delete(c)
    db.commit()
    return {"commentId": comment_id}
