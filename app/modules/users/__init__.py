"""User domain package exports."""

from .models import User, UserRole
from .service import UserService

__all__ = ["User", "UserRole", "UserService"]
