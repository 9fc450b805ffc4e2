"""
Capability detection for the host's account-management toolchain.

Detection only reads: it looks up executables on PATH, asks useradd for its
help text and reads /etc/os-release. A missing tool or a failing probe means
the capability is reported as unsupported, never an error.
"""

import logging
import platform
import re
import shutil
import subprocess
from pathlib import Path

from .errors import ConfigurationError
from .models import PlatformCapabilities, ToolPaths
from .quirks import normalize_family, system_flag_supported
from .settings import AccountworkSettings, get_settings

logger = logging.getLogger(__name__)

OS_RELEASE_PATH = Path("/etc/os-release")

_SYSTEM_FLAG_PATTERN = re.compile(r"(?:^|\s)(?:-r\b|--system\b)", re.MULTILINE)


def parse_useradd_help(text: str | None) -> bool:
    """Check whether useradd help output advertises the system account flag."""
    if not text:
        return False
    return bool(_SYSTEM_FLAG_PATTERN.search(text))


def parse_os_release(text: str | None) -> dict[str, str]:
    """Parse os-release KEY=value lines.

    Args:
        text: Contents of an os-release file

    Returns:
        Mapping of keys to unquoted values
    """
    data = {}
    for line in (text or "").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        data[key.strip()] = value.strip().strip("\"'")
    return data


def os_release_family(data: dict[str, str]) -> str:
    ids = [data.get("ID", "")] + data.get("ID_LIKE", "").split()
    return normalize_family(ids)


def _detect_family() -> str:
    try:
        family = os_release_family(
            parse_os_release(OS_RELEASE_PATH.read_text(encoding="utf-8", errors="replace"))
        )
    except OSError as e:
        logger.debug(f"Could not read {OS_RELEASE_PATH}: {e}")
        family = ""
    return family or platform.system()


def _probe_system_flag(useradd: str, timeout: float) -> bool:
    path = shutil.which(useradd)
    if path is None:
        logger.debug(f"{useradd} not found on PATH")
        return False
    try:
        result = subprocess.run(
            [path, "--help"],
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"Probing {path} --help failed: {e}")
        return False
    return parse_useradd_help((result.stdout or "") + (result.stderr or ""))


def detect(
    tools: ToolPaths | None = None,
    os_family: str | None = None,
    timeout: float | None = None,
) -> PlatformCapabilities:
    """
    Inspect the local host and report which optional features it supports.

    Args:
        tools: Account tool executables (defaults from settings)
        os_family: Operating system family override (defaults from settings)
        timeout: Seconds allowed for the useradd probe

    Returns:
        PlatformCapabilities for this host
    """
    try:
        settings = get_settings()
    except ConfigurationError as e:
        logger.warning(f"{e}; detecting with default settings")
        settings = AccountworkSettings.model_construct()
    tools = tools or settings.tool_paths()
    timeout = settings.detect_timeout if timeout is None else timeout

    family = os_family or settings.os_family or _detect_family()
    supports_system_flag = system_flag_supported(family) and _probe_system_flag(
        tools.add, timeout
    )
    supports_password_aging = shutil.which(tools.password) is not None

    caps = PlatformCapabilities(
        supports_system_flag=supports_system_flag,
        supports_password_aging=supports_password_aging,
        operating_system_family=family,
    )
    logger.info(
        f"Detected platform {family or 'unknown'}: "
        f"system_flag={supports_system_flag}, password_aging={supports_password_aging}"
    )
    return caps


# Process-wide detection result
_capabilities: PlatformCapabilities | None = None


def get_capabilities() -> PlatformCapabilities:
    """
    Get the capabilities of this host, detecting them on first call.

    Returns:
        Cached PlatformCapabilities instance
    """
    global _capabilities
    if _capabilities is None:
        _capabilities = detect()
    return _capabilities


def reset_capabilities() -> None:
    """Forget the cached detection result."""
    global _capabilities
    _capabilities = None
