"""
Account Domain Entities

All domain entities organized by model.
"""

from .enums import UserStatus
from .user import User

__all__ = [
    # Enums
    "UserStatus",
    # Entities
    "User",
]
