"""Translation of individual account attributes into command-line flags."""

import logging
from collections.abc import Mapping
from typing import Any

from .errors import InvalidAccountSpecError
from .models import AccountSpec, PlatformCapabilities
from .quirks import home_management_false_flag

logger = logging.getLogger(__name__)

# Declared properties and the useradd/usermod flag each one maps to
PROPERTY_FLAGS: dict[str, str] = {
    "uid": "-u",
    "gid": "-g",
    "comment": "-c",
    "home": "-d",
    "shell": "-s",
    "groups": "-G",
}

# Flags understood by the password aging tool
PASSWORD_AGE_FLAGS: dict[str, str] = {
    "password_min_age": "-m",
    "password_max_age": "-M",
}


def format_value(value: Any) -> str:
    """Render an attribute value as a single argument token."""
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(str(v) for v in value)
    return str(value)


class FlagMapper:
    """Maps account attributes to flag tokens for a given platform.

    Every method returns a fresh list; callers concatenate them in the order
    the command requires.

    Args:
        caps: Detected platform capabilities
        property_flags: Table of generic attribute → flag
    """

    def __init__(
        self,
        caps: PlatformCapabilities,
        property_flags: Mapping[str, str] | None = None,
    ):
        self.caps = caps
        self.property_flags = dict(PROPERTY_FLAGS if property_flags is None else property_flags)

    def flags_for(self, attribute: str, value: Any) -> list[str]:
        """Tokens contributed by one attribute.

        Args:
            attribute: Attribute name
            value: Desired value

        Returns:
            Ordered tokens, empty if the attribute contributes nothing

        Raises:
            InvalidAccountSpecError: For ``ensure`` or a negative password age
        """
        if attribute == "ensure":
            raise InvalidAccountSpecError("'ensure' is a lifecycle state, not a flag")

        if attribute == "allow_duplicate_uid":
            return ["-o"] if value else []

        if attribute == "is_system_account":
            if value and self.caps.supports_system_flag:
                return ["-r"]
            if value:
                logger.debug("System account requested but platform has no system flag")
            return []

        if attribute == "manage_home_directory":
            if value:
                return ["-m"]
            override = home_management_false_flag(self.caps)
            return [override] if override else []

        if attribute == "expiry_date":
            # one combined token, as the tools have always received it
            return [f"-e {value}"] if value is not None else []

        if attribute in PASSWORD_AGE_FLAGS:
            if value is None:
                return []
            if value < 0:
                raise InvalidAccountSpecError(f"{attribute} must be >= 0, got {value}")
            return [PASSWORD_AGE_FLAGS[attribute], str(value)]

        flag = self.property_flags.get(attribute)
        if flag is None:
            logger.debug(f"No flag declared for attribute '{attribute}', skipping")
            return []
        if value is None:
            return []
        return [flag, format_value(value)]

    def property_flags_for(self, spec: AccountSpec) -> list[str]:
        tokens = []
        for attribute, value in spec.declared_attributes():
            tokens.extend(self.flags_for(attribute, value))
        return tokens

    def duplicate_uid_flags(self, spec: AccountSpec) -> list[str]:
        return self.flags_for("allow_duplicate_uid", spec.allow_duplicate_uid)

    def home_management_flags(self, spec: AccountSpec) -> list[str]:
        return self.flags_for("manage_home_directory", spec.manage_home_directory)

    def expiry_flags(self, spec: AccountSpec) -> list[str]:
        return self.flags_for("expiry_date", spec.expiry_date)

    def system_account_flags(self, spec: AccountSpec) -> list[str]:
        return self.flags_for("is_system_account", spec.is_system_account)

    def has_flag(self, attribute: str) -> bool:
        return attribute in self.property_flags
