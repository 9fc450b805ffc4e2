"""
Differ module for comparing a declared account with the one on the host.

The current state is a mapping shaped like one entry of pyinfra's
``server.Users`` fact, or None when the account does not exist.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .models import AccountSpec, Ensure

logger = logging.getLogger(__name__)

# Attributes outside declared_attributes() that can still drift
_SPECIAL_DIFFABLE = ("password_min_age", "password_max_age", "expiry_date")


@dataclass
class AccountDiff:
    """
    Result of comparing desired and current account state.

    Attributes:
        current_ensure: Whether the account exists now
        changes: Attributes whose desired value differs, in declaration order
    """

    current_ensure: Ensure
    changes: dict[str, Any] = field(default_factory=dict)

    @property
    def has_changes(self) -> bool:
        return bool(self.changes)


def _differs(attribute: str, desired: Any, current: Mapping[str, Any]) -> bool:
    actual = current.get(attribute)
    if attribute == "groups":
        return set(desired) != set(actual or [])
    if attribute == "gid":
        # gid may be declared by number or by group name
        return str(desired) not in (str(actual), str(current.get("group")))
    return str(desired) != str(actual)


def diff_account(spec: AccountSpec, current: Mapping[str, Any] | None) -> AccountDiff:
    """
    Compute which attributes must change to reach the declared state.

    Attributes missing from the current state are not compared.

    Args:
        spec: Desired account state
        current: Current account entry, or None if the account is absent

    Returns:
        AccountDiff for the account
    """
    if current is None:
        return AccountDiff(current_ensure=Ensure.ABSENT)

    diff = AccountDiff(current_ensure=Ensure.PRESENT)
    if spec.ensure == Ensure.ABSENT:
        return diff

    candidates = list(spec.declared_attributes())
    candidates += [
        (attribute, getattr(spec, attribute))
        for attribute in _SPECIAL_DIFFABLE
        if getattr(spec, attribute) is not None
    ]

    for attribute, desired in candidates:
        if attribute not in current:
            continue
        if _differs(attribute, desired, current):
            logger.debug(
                f"{spec.name}.{attribute}: {current.get(attribute)!r} -> {desired!r}"
            )
            diff.changes[attribute] = desired

    return diff
