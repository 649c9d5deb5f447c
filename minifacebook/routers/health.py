# minifacebook/routers/health.py
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from minifacebook.core.db import get_db
from minifacebook.core.errors import DependencyFailure

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        raise DependencyFailure("database unreachable") from e
    return {"status": "ok", "database": "ok"}
