"""
Command synthesis for account lifecycle transitions.

Turns an AccountSpec and the detected PlatformCapabilities into the exact
argument lists for the add, modify, delete and password aging tools. Nothing
here executes a process; callers hand the invocations to whatever runs them.

Create:   [add]    + properties + dup-uid + home + expiry + system + [name]
          [passwd] + (-m min) + (-M max) + [name]          (optional second step)
Modify:   [modify] + flag value (+ -o for uid changes) + [name]
Delete:   [delete] + (-r when the home directory is managed) + [name]
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from .errors import InvalidAccountSpecError
from .flags import PASSWORD_AGE_FLAGS, FlagMapper
from .models import (
    PASSWORD_AGE_ATTRIBUTES,
    AccountSpec,
    CommandInvocation,
    CommandPlan,
    Ensure,
    PlatformCapabilities,
    ToolPaths,
    Transition,
)

logger = logging.getLogger(__name__)

# Parameters that only shape account creation and cannot be changed later
CREATE_ONLY_ATTRIBUTES = frozenset(
    {"name", "ensure", "allow_duplicate_uid", "is_system_account", "manage_home_directory"}
)


class CommandSynthesizer:
    """Builds command invocations for one platform.

    Instances hold only immutable inputs, so one synthesizer can serve any
    number of accounts from any thread.

    Args:
        caps: Detected platform capabilities
        tools: Executable placeholders for the four account tools
        property_flags: Optional replacement for the property flag table
    """

    def __init__(
        self,
        caps: PlatformCapabilities,
        tools: ToolPaths | None = None,
        property_flags: Mapping[str, str] | None = None,
    ):
        self.caps = caps
        self.tools = tools or ToolPaths()
        self.mapper = FlagMapper(caps, property_flags)

    def build_create(self, spec: AccountSpec) -> CommandInvocation:
        self._check_password_ages(spec)
        return (
            [self.tools.add]
            + self.mapper.property_flags_for(spec)
            + self.mapper.duplicate_uid_flags(spec)
            + self.mapper.home_management_flags(spec)
            + self.mapper.expiry_flags(spec)
            + self.mapper.system_account_flags(spec)
            + [spec.name]
        )

    def build_modify_attribute(
        self, spec: AccountSpec, attribute: str, value: Any
    ) -> CommandInvocation | None:
        """Build the invocation changing a single attribute.

        Args:
            spec: Desired account state
            attribute: Name of the changed attribute
            value: Its new value

        Returns:
            The invocation, or None when the platform cannot manage the
            attribute (password ages without a password aging tool)

        Raises:
            InvalidAccountSpecError: If the attribute cannot be modified or
                the value is not valid for it
        """
        if attribute in CREATE_ONLY_ATTRIBUTES:
            raise InvalidAccountSpecError(f"Attribute '{attribute}' cannot be modified")
        if attribute != "expiry_date" and attribute not in PASSWORD_AGE_FLAGS:
            if not self.mapper.has_flag(attribute):
                raise InvalidAccountSpecError(f"No flag known for attribute '{attribute}'")

        value = self._validated_value(spec, attribute, value)
        if value is None:
            raise InvalidAccountSpecError(f"Attribute '{attribute}' needs a value to be modified")

        if attribute in PASSWORD_AGE_FLAGS:
            if not self.caps.supports_password_aging:
                logger.debug(f"Skipping {attribute}: password aging not supported")
                return None
            return [self.tools.password] + self.mapper.flags_for(attribute, value) + [spec.name]

        tokens = self.mapper.flags_for(attribute, value)
        if attribute == "uid":
            tokens += self.mapper.duplicate_uid_flags(spec)

        return [self.tools.modify] + tokens + [spec.name]

    def build_delete(self, spec: AccountSpec) -> CommandInvocation:
        # -r on userdel removes the home directory
        remove_home = ["-r"] if spec.manage_home_directory else []
        return [self.tools.delete] + remove_home + [spec.name]

    def build_password_policy(self, spec: AccountSpec) -> CommandInvocation | None:
        """Build the password aging invocation.

        Returns:
            The invocation, or None when no age is set or the platform has
            no password aging tool
        """
        self._check_password_ages(spec)
        if not spec.has_password_policy:
            return None
        if not self.caps.supports_password_aging:
            logger.debug(f"Password aging unsupported, not applying policy for {spec.name}")
            return None

        tokens = [self.tools.password]
        for attribute in PASSWORD_AGE_ATTRIBUTES:
            tokens += self.mapper.flags_for(attribute, getattr(spec, attribute))
        return tokens + [spec.name]

    def plan_create(self, spec: AccountSpec) -> CommandPlan:
        invocations = [self.build_create(spec)]
        policy = self.build_password_policy(spec)
        if policy is not None:
            invocations.append(policy)
        return CommandPlan(transition=Transition.CREATE, invocations=invocations)

    def plan_modify(self, spec: AccountSpec, changes: Mapping[str, Any]) -> CommandPlan:
        invocations = []
        for attribute, value in changes.items():
            invocation = self.build_modify_attribute(spec, attribute, value)
            if invocation is not None:
                invocations.append(invocation)
        return CommandPlan(transition=Transition.MODIFY, invocations=invocations)

    def plan_delete(self, spec: AccountSpec) -> CommandPlan:
        return CommandPlan(transition=Transition.DELETE, invocations=[self.build_delete(spec)])

    def plan(
        self,
        spec: AccountSpec,
        current_ensure: Ensure,
        changes: Mapping[str, Any] | None = None,
    ) -> CommandPlan:
        """Render the transition from the current to the desired state.

        Args:
            spec: Desired account state
            current_ensure: Whether the account exists now
            changes: Attributes that differ, for present → present

        Returns:
            CommandPlan for the selected transition
        """
        current_ensure = Ensure(current_ensure)

        if spec.ensure == Ensure.ABSENT:
            if current_ensure == Ensure.ABSENT:
                plan = CommandPlan(transition=Transition.NONE)
            else:
                plan = self.plan_delete(spec)
        elif current_ensure == Ensure.ABSENT:
            plan = self.plan_create(spec)
        else:
            plan = self.plan_modify(spec, changes or {})

        logger.info(
            f"Planned {plan.transition.value} for {spec.name}: {len(plan)} invocation(s)"
        )
        return plan

    @staticmethod
    def _validated_value(spec: AccountSpec, attribute: str, value: Any) -> Any:
        # extra attributes carry no declared type
        if attribute not in AccountSpec.model_fields:
            return value
        try:
            checked = AccountSpec.model_validate({"name": spec.name, attribute: value})
        except ValidationError as e:
            raise InvalidAccountSpecError(
                f"Invalid value for '{attribute}': {value!r} ({e.errors()[0]['msg']})"
            ) from e
        return getattr(checked, attribute)

    @staticmethod
    def _check_password_ages(spec: AccountSpec) -> None:
        for attribute in PASSWORD_AGE_ATTRIBUTES:
            value = getattr(spec, attribute)
            if value is not None and value < 0:
                raise InvalidAccountSpecError(f"{attribute} must be >= 0, got {value}")


def build_create(
    spec: AccountSpec, caps: PlatformCapabilities, tools: ToolPaths | None = None
) -> CommandInvocation:
    return CommandSynthesizer(caps, tools).build_create(spec)


def build_modify_attribute(
    spec: AccountSpec,
    caps: PlatformCapabilities,
    attribute: str,
    value: Any,
    tools: ToolPaths | None = None,
) -> CommandInvocation | None:
    return CommandSynthesizer(caps, tools).build_modify_attribute(spec, attribute, value)


def build_delete(
    spec: AccountSpec, caps: PlatformCapabilities, tools: ToolPaths | None = None
) -> CommandInvocation:
    return CommandSynthesizer(caps, tools).build_delete(spec)


def build_password_policy(
    spec: AccountSpec, caps: PlatformCapabilities, tools: ToolPaths | None = None
) -> CommandInvocation | None:
    return CommandSynthesizer(caps, tools).build_password_policy(spec)
