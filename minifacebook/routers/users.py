from fastapi import APIRouter, Depends

from minifacebook.core.auth import get_current_user
from minifacebook.models.user import User
from minifacebook.schemas.user import AccountOut

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me", response_model=AccountOut)
def get_me(me: User = Depends(get_current_user)):
    return AccountOut(
        user_id=me.id,
        name=me.name,
        email=me.email,
        verified=me.verified,
        created_at=me.created_at,
    )
