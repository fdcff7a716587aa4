"""Profile entity module.

This module contains all Profile-related classes organized by responsibility:
- Profile: Domain entity
- ProfileTable: Database persistence model, inverse side of the user link
- ProfileRepository: Read-only data access
"""

from .entity import PROFILE_RULES, Profile
from .repository import ProfileRepository
from .table import ProfileTable

__all__ = ["Profile", "ProfileTable", "ProfileRepository", "PROFILE_RULES"]
