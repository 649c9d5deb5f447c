# minifacebook/schemas/user.py
from datetime import datetime
from .base import BaseSchema


class AccountOut(BaseSchema):
    user_id: int
    name: str
    email: str
    verified: bool
    created_at: datetime
