"""PyInfra facts used to detect account-management capabilities on remote hosts."""

from .accounts import OsFamily, PasswordAgingTool, UseraddSystemFlag, detect_on_host

__all__ = [
    "OsFamily",
    "PasswordAgingTool",
    "UseraddSystemFlag",
    "detect_on_host",
]
