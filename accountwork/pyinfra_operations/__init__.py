"""PyInfra operations for declarative account management."""

from .accounts import account

__all__ = ["account"]
