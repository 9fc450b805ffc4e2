"""Tests for local capability detection."""

import subprocess

import pytest

from accountwork import capabilities
from accountwork.capabilities import (
    detect,
    get_capabilities,
    os_release_family,
    parse_os_release,
    parse_useradd_help,
    reset_capabilities,
)
from accountwork.models import PlatformCapabilities, ToolPaths

SHADOW_HELP = """Usage: useradd [options] LOGIN

Options:
  -m, --create-home             create the user's home directory
  -M, --no-create-home          do not create the user's home directory
  -o, --non-unique              allow to create users with duplicate
                                (non-unique) UID
  -r, --system                  create a system account
  -R, --root CHROOT_DIR         directory to chroot into
"""

OLD_HELP = """usage: useradd [-u uid [-o]] [-g group] [-G group[,group...]]
               [-d home] [-s shell] [-c comment] [-m [-k template]]
"""

ROCKY_OS_RELEASE = """NAME="Rocky Linux"
VERSION="9.3 (Blue Onyx)"
ID="rocky"
ID_LIKE="rhel centos fedora"
# comment line
PRETTY_NAME="Rocky Linux 9.3 (Blue Onyx)"
"""

UBUNTU_OS_RELEASE = """NAME="Ubuntu"
ID=ubuntu
ID_LIKE=debian
"""


@pytest.fixture
def tools_on_path(monkeypatch):
    """Pretend every account tool is installed under /usr/sbin."""
    monkeypatch.setattr(capabilities.shutil, "which", lambda name: f"/usr/sbin/{name}")


@pytest.fixture
def useradd_help(monkeypatch):
    """Answer useradd --help with the given text; records the calls made."""
    calls = []

    def install(text):
        def fake_run(args, **kwargs):
            calls.append(args)
            return subprocess.CompletedProcess(args, 0, stdout=text, stderr="")

        monkeypatch.setattr(capabilities.subprocess, "run", fake_run)
        return calls

    return install


def test_parse_useradd_help():
    assert parse_useradd_help(SHADOW_HELP) is True
    assert parse_useradd_help("  --system  create a system account") is True
    assert parse_useradd_help(OLD_HELP) is False
    assert parse_useradd_help("") is False
    assert parse_useradd_help(None) is False


def test_parse_os_release():
    data = parse_os_release(ROCKY_OS_RELEASE)
    assert data["ID"] == "rocky"
    assert data["ID_LIKE"] == "rhel centos fedora"
    assert data["NAME"] == "Rocky Linux"
    assert "# comment line" not in data
    assert parse_os_release(None) == {}


def test_os_release_family():
    assert os_release_family(parse_os_release(ROCKY_OS_RELEASE)) == "RedHat"
    assert os_release_family(parse_os_release(UBUNTU_OS_RELEASE)) == "ubuntu"


def test_detect_full_platform(tools_on_path, useradd_help):
    calls = useradd_help(SHADOW_HELP)

    caps = detect(os_family="debian")

    assert caps == PlatformCapabilities(
        supports_system_flag=True,
        supports_password_aging=True,
        operating_system_family="debian",
    )
    assert calls == [["/usr/sbin/useradd", "--help"]]


def test_detect_uses_configured_tools(monkeypatch, useradd_help):
    calls = useradd_help(SHADOW_HELP)
    monkeypatch.setattr(
        capabilities.shutil, "which", lambda name: name if name.startswith("/opt/") else None
    )

    caps = detect(
        tools=ToolPaths(add="/opt/bin/useradd", password="/opt/bin/chage"),
        os_family="debian",
    )

    assert calls == [["/opt/bin/useradd", "--help"]]
    assert caps.supports_password_aging is True


def test_detect_without_system_flag(tools_on_path, useradd_help):
    useradd_help(OLD_HELP)
    assert detect(os_family="debian").supports_system_flag is False


def test_detect_missing_tools(monkeypatch, useradd_help):
    calls = useradd_help(SHADOW_HELP)
    monkeypatch.setattr(capabilities.shutil, "which", lambda name: None)

    caps = detect(os_family="debian")

    assert caps.supports_system_flag is False
    assert caps.supports_password_aging is False
    assert calls == []


@pytest.mark.parametrize(
    "error", [subprocess.TimeoutExpired(["useradd"], 5), PermissionError("denied")]
)
def test_detect_probe_failure_reports_unsupported(monkeypatch, tools_on_path, error):
    def failing_run(args, **kwargs):
        raise error

    monkeypatch.setattr(capabilities.subprocess, "run", failing_run)
    assert detect(os_family="debian").supports_system_flag is False


def test_detect_family_without_system_flag(tools_on_path, useradd_help):
    calls = useradd_help(SHADOW_HELP)
    caps = detect(os_family="Solaris")
    assert caps.supports_system_flag is False
    assert calls == []


def test_detect_reads_os_release(monkeypatch, tmp_path, tools_on_path, useradd_help):
    useradd_help(SHADOW_HELP)
    os_release = tmp_path / "os-release"
    os_release.write_text(ROCKY_OS_RELEASE)
    monkeypatch.setattr(capabilities, "OS_RELEASE_PATH", os_release)

    assert detect().operating_system_family == "RedHat"


def test_detect_falls_back_to_platform(monkeypatch, tmp_path, tools_on_path, useradd_help):
    useradd_help(SHADOW_HELP)
    monkeypatch.setattr(capabilities, "OS_RELEASE_PATH", tmp_path / "missing")
    monkeypatch.setattr(capabilities.platform, "system", lambda: "Darwin")

    assert detect().operating_system_family == "Darwin"


def test_detect_family_from_settings(monkeypatch, tools_on_path, useradd_help):
    from accountwork.settings import reload_settings

    useradd_help(SHADOW_HELP)
    monkeypatch.setenv("AW_OS_FAMILY", "CentOS")
    reload_settings()

    caps = detect()
    assert caps.operating_system_family == "CentOS"


def test_get_capabilities_detects_once(monkeypatch):
    calls = []

    def fake_detect():
        calls.append(1)
        return PlatformCapabilities(operating_system_family="debian")

    monkeypatch.setattr(capabilities, "detect", fake_detect)

    first = get_capabilities()
    second = get_capabilities()
    assert first is second
    assert len(calls) == 1

    reset_capabilities()
    get_capabilities()
    assert len(calls) == 2


def test_detect_reads_non_utf8_os_release(monkeypatch, tmp_path, tools_on_path, useradd_help):
    useradd_help(SHADOW_HELP)
    os_release = tmp_path / "os-release"
    os_release.write_bytes(b'ID=rhel\nNAME="R\xe9d"\n')
    monkeypatch.setattr(capabilities, "OS_RELEASE_PATH", os_release)

    assert detect().operating_system_family == "RedHat"


def test_detect_non_utf8_useradd_help(monkeypatch, tools_on_path):
    raw = b"  -r, --system                cr\xe9er un compte syst\xe8me\n"

    def latin1_run(args, **kwargs):
        # decode the way subprocess does for text mode
        stdout = raw.decode("utf-8", kwargs.get("errors", "strict"))
        return subprocess.CompletedProcess(args, 0, stdout=stdout, stderr="")

    monkeypatch.setattr(capabilities.subprocess, "run", latin1_run)
    assert detect(os_family="debian").supports_system_flag is True


def test_detect_with_invalid_settings(monkeypatch, tools_on_path):
    timeouts = []

    def fake_run(args, **kwargs):
        timeouts.append(kwargs["timeout"])
        return subprocess.CompletedProcess(args, 0, stdout=SHADOW_HELP, stderr="")

    monkeypatch.setattr(capabilities.subprocess, "run", fake_run)
    monkeypatch.setenv("AW_DETECT_TIMEOUT", "abc")

    caps = detect(os_family="debian")

    assert caps.supports_system_flag is True
    assert caps.supports_password_aging is True
    assert timeouts == [5.0]
