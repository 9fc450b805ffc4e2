"""PyInfra operations for user accounts.

This module provides a PyInfra operation that converges a user account
to its declared state using useradd, usermod, userdel and chage.
"""

from typing import Any

from pydantic import ValidationError
from pyinfra import host
from pyinfra.api import operation
from pyinfra.api.exceptions import OperationError
from pyinfra.facts.server import Users

from ..differ import diff_account
from ..errors import AccountworkError
from ..models import AccountSpec, Ensure, ToolPaths
from ..pyinfra_facts.accounts import detect_on_host
from ..synthesizer import CommandSynthesizer


@operation()
def account(
    user: str,
    present: bool = True,
    uid: int | None = None,
    gid: int | str | None = None,
    comment: str | None = None,
    home: str | None = None,
    shell: str | None = None,
    groups: list[str] | None = None,
    system: bool = False,
    manage_home: bool = False,
    allow_dupe: bool = False,
    password_min_age: int | None = None,
    password_max_age: int | None = None,
    expiry: str | None = None,
    tools: ToolPaths | None = None,
    **kwargs: Any,
):
    """Add, modify or remove a user account.

    Args:
        user: Account name
        present: Whether the account should exist
        uid: Numeric user id
        gid: Primary group, by id or name
        comment: GECOS comment
        home: Home directory path
        shell: Login shell
        groups: Supplementary groups
        system: Create a system account where the platform supports it
        manage_home: Create the home directory on add, remove it on delete
        allow_dupe: Allow a non-unique uid
        password_min_age: Minimum days between password changes
        password_max_age: Maximum days a password stays valid
        expiry: Account expiry date (YYYY-MM-DD)
        tools: Account tool executables on the host
        **kwargs: Additional global operation arguments (_sudo, etc.)

    Example:
        account(
            user="deploy",
            uid=1500,
            shell="/bin/bash",
            groups=["wheel"],
            manage_home=True,
            password_max_age=90,
        )
    """
    tools = tools or ToolPaths()

    try:
        spec = AccountSpec(
            name=user,
            ensure=Ensure.PRESENT if present else Ensure.ABSENT,
            uid=uid,
            gid=gid,
            comment=comment,
            home=home,
            shell=shell,
            groups=groups,
            is_system_account=system,
            manage_home_directory=manage_home,
            allow_duplicate_uid=allow_dupe,
            password_min_age=password_min_age,
            password_max_age=password_max_age,
            expiry_date=expiry,
        )
    except ValidationError as e:
        raise OperationError(f"Invalid account {user}: {e}") from e

    caps = detect_on_host(host, useradd=tools.add, chage=tools.password)
    current = (host.get_fact(Users) or {}).get(user)
    diff = diff_account(spec, current)

    try:
        plan = CommandSynthesizer(caps, tools).plan(spec, diff.current_ensure, diff.changes)
    except AccountworkError as e:
        raise OperationError(str(e)) from e

    if plan.is_empty:
        host.noop(f"User {user} is already in the desired state")
        return

    yield from plan.to_shell()
