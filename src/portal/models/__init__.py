from .base import Base
from .user import ASSIGNABLE_ROLES, Role, User

__all__ = ["Base", "User", "Role", "ASSIGNABLE_ROLES"]
