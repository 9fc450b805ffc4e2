"""
Pytest configuration and fixtures for Accountwork tests.
"""

import os

import pytest

from accountwork import settings as settings_module
from accountwork.capabilities import reset_capabilities
from accountwork.models import AccountSpec, PlatformCapabilities, ToolPaths


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Isolate tests from AW_* variables and cached detection results."""
    for key in list(os.environ):
        if key.upper().startswith("AW_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(settings_module, "_settings", None)
    reset_capabilities()
    yield
    reset_capabilities()


@pytest.fixture
def tools():
    """Resolved tool paths as a package manager would install them."""
    return ToolPaths(
        add="/usr/sbin/useradd",
        modify="/usr/sbin/usermod",
        delete="/usr/sbin/userdel",
        password="/usr/bin/chage",
    )


@pytest.fixture
def full_caps():
    """A Debian-like platform with every optional feature."""
    return PlatformCapabilities(
        supports_system_flag=True,
        supports_password_aging=True,
        operating_system_family="debian",
    )


@pytest.fixture
def bare_caps():
    """A platform with no optional features."""
    return PlatformCapabilities(
        supports_system_flag=False,
        supports_password_aging=False,
        operating_system_family="some OS",
    )


@pytest.fixture
def redhat_caps():
    return PlatformCapabilities(
        supports_system_flag=True,
        supports_password_aging=True,
        operating_system_family="RedHat",
    )


@pytest.fixture
def myuser():
    return AccountSpec(name="myuser")
