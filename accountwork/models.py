"""
Accountwork models - Pydantic models for declared accounts and command plans.
"""

import shlex
from collections.abc import Iterator
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Attributes handled by dedicated rules rather than the property table
SPECIAL_ATTRIBUTES = frozenset(
    {
        "name",
        "ensure",
        "allow_duplicate_uid",
        "is_system_account",
        "manage_home_directory",
        "password_min_age",
        "password_max_age",
        "expiry_date",
    }
)

PASSWORD_AGE_ATTRIBUTES = ("password_min_age", "password_max_age")

# A single external command: executable placeholder followed by its arguments
CommandInvocation = list[str]


class Ensure(str, Enum):
    """Target lifecycle state of an account."""

    PRESENT = "present"
    ABSENT = "absent"


class Transition(str, Enum):
    """Lifecycle transition rendered by a plan."""

    CREATE = "create"
    MODIFY = "modify"
    DELETE = "delete"
    NONE = "none"


class AccountSpec(BaseModel):
    """Desired state of an operating-system user account.

    Fields up to ``groups`` are generic properties translated through the
    property flag table, in the order declared here. Any keyword not declared
    below is kept as an extra attribute and rendered after them.

    Examples:
        >>> AccountSpec(name="deploy", uid=1500, shell="/bin/bash", groups=["wheel"])
        >>> AccountSpec(name="nginx", is_system_account=True, shell="/sbin/nologin")
    """

    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)
    ensure: Ensure = Ensure.PRESENT

    uid: int | None = None
    gid: int | str | None = None
    comment: str | None = None
    home: str | None = None
    shell: str | None = None
    groups: list[str] | None = None

    allow_duplicate_uid: bool = False
    is_system_account: bool = False
    manage_home_directory: bool = False
    password_min_age: int | None = Field(default=None, ge=0)
    password_max_age: int | None = Field(default=None, ge=0)
    expiry_date: str | None = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$")

    def declared_attributes(self) -> Iterator[tuple[str, Any]]:
        """Yield every set, non-special attribute in declaration order.

        Declared fields come first, followed by extra attributes in the order
        they were passed.

        Yields:
            (attribute name, value) tuples
        """
        for field_name in type(self).model_fields:
            if field_name in SPECIAL_ATTRIBUTES:
                continue
            value = getattr(self, field_name)
            if value is not None:
                yield field_name, value

        for field_name, value in (self.model_extra or {}).items():
            if field_name not in SPECIAL_ATTRIBUTES and value is not None:
                yield field_name, value

    @property
    def has_password_policy(self) -> bool:
        return self.password_min_age is not None or self.password_max_age is not None


class PlatformCapabilities(BaseModel):
    """Optional account-management features of the host platform.

    Detected once and shared read-only by every synthesis call.
    """

    model_config = ConfigDict(frozen=True)

    supports_system_flag: bool = False
    supports_password_aging: bool = False
    operating_system_family: str = ""


class ToolPaths(BaseModel):
    """Executables placed as the first token of each invocation."""

    model_config = ConfigDict(frozen=True)

    add: str = "useradd"
    modify: str = "usermod"
    delete: str = "userdel"
    password: str = "chage"


class CommandPlan(BaseModel):
    """Ordered invocations realizing one lifecycle transition."""

    transition: Transition
    invocations: list[CommandInvocation] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.invocations

    def to_shell(self) -> list[str]:
        """Render each invocation as a shell-quoted command line.

        Returns:
            One command string per invocation
        """
        return [shlex.join(invocation) for invocation in self.invocations]

    def __len__(self) -> int:
        return len(self.invocations)
