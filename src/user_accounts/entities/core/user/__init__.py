"""User entity module.

This module contains all User-related classes organized by responsibility:
- User: Domain entity and its validation rules
- UserTable: Database persistence model, owning side of the profile link
- UserRepository: Data access layer
"""

from .entity import USER_RULES, User
from .repository import UserRepository
from .table import UserTable

__all__ = ["User", "UserTable", "UserRepository", "USER_RULES"]
