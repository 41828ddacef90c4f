"""
Account Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserStatus(str, Enum):
    """User account status"""

    pending = "pending"
    active = "active"
    inactive = "inactive"
    suspended = "suspended"
