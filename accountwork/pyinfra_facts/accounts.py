"""PyInfra facts for account-management capabilities.

These facts gather, on a target host, the same information the local
detector reads, and share its parsing.
"""

import shlex

from pyinfra.api import FactBase

from ..capabilities import os_release_family, parse_os_release, parse_useradd_help
from ..models import PlatformCapabilities
from ..quirks import system_flag_supported


class UseraddSystemFlag(FactBase):
    """Check whether useradd accepts the system account flag.

    Returns:
        True if ``useradd --help`` lists ``-r``/``--system``

    Example:
        if host.get_fact(UseraddSystemFlag):
            print("System accounts supported")
    """

    def command(self, useradd: str = "useradd") -> str:
        """Generate command printing useradd help.

        Args:
            useradd: useradd executable

        Returns:
            Command string to execute
        """
        return f"{shlex.quote(useradd)} --help 2>&1 || true"

    def process(self, output: list[str]) -> bool:
        return parse_useradd_help("\n".join(output or []))


class PasswordAgingTool(FactBase):
    """Check whether the password aging tool is installed.

    Returns:
        True if the tool resolves on PATH
    """

    def command(self, chage: str = "chage") -> str:
        return f"command -v {shlex.quote(chage)} >/dev/null 2>&1 && echo 'true' || echo 'false'"

    def process(self, output: list[str]) -> bool:
        if not output:
            return False
        return "true" in "".join(output).lower()


class OsFamily(FactBase):
    """Get the operating system family of the host.

    Returns:
        "RedHat" for Redhat derivatives, otherwise the os-release ID, falling
        back to ``uname -s`` when os-release is missing

    Example:
        family = host.get_fact(OsFamily)
    """

    command = "cat /etc/os-release 2>/dev/null || uname -s"

    def process(self, output: list[str]) -> str:
        if not output:
            return ""
        data = parse_os_release("\n".join(output))
        if data:
            return os_release_family(data)
        # uname output
        return output[0].strip()


def detect_on_host(host, useradd: str = "useradd", chage: str = "chage") -> PlatformCapabilities:
    """Assemble the capabilities of a pyinfra host from its facts.

    Args:
        host: pyinfra host
        useradd: useradd executable on the host
        chage: password aging executable on the host

    Returns:
        PlatformCapabilities for the host
    """
    family = host.get_fact(OsFamily) or ""
    supports_system_flag = system_flag_supported(family) and bool(
        host.get_fact(UseraddSystemFlag, useradd=useradd)
    )
    return PlatformCapabilities(
        supports_system_flag=supports_system_flag,
        supports_password_aging=bool(host.get_fact(PasswordAgingTool, chage=chage)),
        operating_system_family=family,
    )
