"""Process-wide stores shared across activities."""

from .authorized_users import AuthorizedUserStore
from .user_directory import UserDirectory

__all__ = ["AuthorizedUserStore", "UserDirectory"]
