"""Shared pytest fixtures and helpers for account tests."""

from .core import *  # noqa: F401,F403
