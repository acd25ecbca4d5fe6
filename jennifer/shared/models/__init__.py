"""Shared domain models for the Jennifer relay."""
from .conversation import Role, Turn

__all__ = [
    "Role",
    "Turn",
]
