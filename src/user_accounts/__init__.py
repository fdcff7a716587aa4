"""User accounts domain package.

This package contains the User and Profile entities, the validation and
ownership rules they present to storage, and the schema catalog that
indexes discoverable entity definitions.
"""

__version__ = "0.1.0"
