"""Platform-specific deviations in account tool flags.

Each quirk is a lookup table keyed by lower-cased operating system family, so
supporting a new platform means adding an entry rather than a new branch.
"""

import logging
from collections.abc import Iterable

from .models import PlatformCapabilities

logger = logging.getLogger(__name__)

REDHAT_FAMILY = "RedHat"

# os-release identifiers that belong to the Redhat family
REDHAT_IDENTITIES = frozenset(
    {
        "redhat",
        "rhel",
        "centos",
        "fedora",
        "rocky",
        "almalinux",
        "ol",
        "oraclelinux",
        "scientific",
        "amzn",
        "amazon",
    }
)

# useradd on these families creates a home directory unless told not to
HOME_MANAGEMENT_FALSE_FLAGS: dict[str, str] = {
    identity: "-M" for identity in REDHAT_IDENTITIES
}

# Families whose useradd has no system account flag
SYSTEM_FLAG_UNSUPPORTED = frozenset({"solaris", "sunos", "hp-ux"})


def home_management_false_flag(caps: PlatformCapabilities) -> str | None:
    """Token to pass when the home directory must not be managed.

    Args:
        caps: Detected platform capabilities

    Returns:
        The override token, or None when omitting the flag is enough
    """
    return HOME_MANAGEMENT_FALSE_FLAGS.get(caps.operating_system_family.lower())


def system_flag_supported(family: str) -> bool:
    return family.lower() not in SYSTEM_FLAG_UNSUPPORTED


def normalize_family(ids: Iterable[str]) -> str:
    """Map os-release identifiers (ID followed by ID_LIKE) to a family name.

    Args:
        ids: Identifiers in priority order

    Returns:
        "RedHat" for any Redhat derivative, otherwise the first identifier,
        or an empty string when none is given
    """
    ids = [i.strip().lower() for i in ids if i and i.strip()]
    if any(i in REDHAT_IDENTITIES for i in ids):
        logger.debug(f"Identifiers {ids} resolved to the {REDHAT_FAMILY} family")
        return REDHAT_FAMILY
    return ids[0] if ids else ""
