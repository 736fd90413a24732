from .user import Role, RoleEnum, User
from .post import Post
from .post_meta import PostMeta

__all__ = [
    "Role",
    "RoleEnum",
    "User",
    "Post",
    "PostMeta",
]
