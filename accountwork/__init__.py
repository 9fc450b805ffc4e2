"""
Accountwork - Declarative user accounts rendered into precise commands.

Describe what an account should look like; Accountwork works out which
useradd, usermod, userdel and chage invocations reach that state on the
current platform:
- Capabilities are detected once per host (system accounts, password aging)
- Each attribute maps to its flag, with per-platform quirks in one table
- Plans are plain argument lists, ready for any process runner or pyinfra
"""

from .capabilities import detect, get_capabilities, reset_capabilities
from .differ import AccountDiff, diff_account
from .errors import AccountworkError, ConfigurationError, InvalidAccountSpecError
from .flags import PROPERTY_FLAGS, FlagMapper
from .models import (
    AccountSpec,
    CommandPlan,
    Ensure,
    PlatformCapabilities,
    ToolPaths,
    Transition,
)
from .settings import AccountworkSettings, get_settings, reload_settings
from .synthesizer import (
    CommandSynthesizer,
    build_create,
    build_delete,
    build_modify_attribute,
    build_password_policy,
)

__version__ = "0.1.0"
__all__ = [
    "AccountDiff",
    "AccountSpec",
    "AccountworkError",
    "AccountworkSettings",
    "CommandPlan",
    "CommandSynthesizer",
    "ConfigurationError",
    "Ensure",
    "FlagMapper",
    "InvalidAccountSpecError",
    "PROPERTY_FLAGS",
    "PlatformCapabilities",
    "ToolPaths",
    "Transition",
    "build_create",
    "build_delete",
    "build_modify_attribute",
    "build_password_policy",
    "detect",
    "diff_account",
    "get_capabilities",
    "get_settings",
    "reload_settings",
    "reset_capabilities",
]
