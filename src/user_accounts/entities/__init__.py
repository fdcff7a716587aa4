"""Entities module with hybrid entity-centric structure.

Each entity has its own package containing:
- entity.py: Domain model, validation rules and discovery marker
- table.py: Database persistence model
- repository.py: Data access layer
"""

from .core.profile import Profile, ProfileRepository, ProfileTable
from .core.user import User, UserRepository, UserTable

__all__ = [
    "User",
    "UserTable",
    "UserRepository",
    "Profile",
    "ProfileTable",
    "ProfileRepository",
]
