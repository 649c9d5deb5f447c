from minifacebook.models.user import User
from minifacebook.models.post import Post
from minifacebook.models.like import Like
from minifacebook.models.comment import Comment

__all__ = ["User", "Post", "Like", "Comment"]
