"""
Accountwork CLI - Render account lifecycle commands for this host.
"""

import logging

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .capabilities import detect
from .errors import AccountworkError
from .models import AccountSpec, CommandPlan, PlatformCapabilities
from .settings import get_settings
from .synthesizer import CommandSynthesizer

# Setup
app = typer.Typer(
    name="accountwork",
    help="Plan user account commands from declared attributes",
    add_completion=False,
)
console = Console()

_INTEGER_ATTRIBUTES = ("uid", "password_min_age", "password_max_age")


def configure_logging():
    """Configure logging based on settings."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# Configure logging on module import
configure_logging()


def _resolve_capabilities(os_family: str | None) -> PlatformCapabilities:
    return detect(tools=get_settings().tool_paths(), os_family=os_family)


def _build_spec(name: str, **attributes) -> AccountSpec:
    return AccountSpec(
        name=name, **{k: v for k, v in attributes.items() if v is not None}
    )


def _print_plan(plan: CommandPlan, caps: PlatformCapabilities) -> None:
    console.print(
        Panel.fit(
            f"[bold cyan]Accountwork {plan.transition.value.capitalize()}[/bold cyan]\n"
            f"Platform: {escape(caps.operating_system_family or 'unknown')}",
            border_style="cyan",
        )
    )
    if plan.is_empty:
        console.print("[dim]Nothing to do[/dim]")
        return
    for line in plan.to_shell():
        console.print(line, markup=False, highlight=False, soft_wrap=True)


def _handle_command_error(e: Exception, command_type: str) -> None:
    """Handle command errors with appropriate formatting.

    Args:
        e: Exception that occurred
        command_type: Type of command (for error message context)

    Raises:
        SystemExit: Always exits with code 1
    """
    console.print(
        f"\n[bold red]✗ {command_type.capitalize()} failed:[/bold red] {escape(str(e))}",
        soft_wrap=True,
    )
    raise typer.Exit(code=1)


def _parse_changes(assignments: list[str]) -> dict:
    """Parse ``attribute=value`` pairs into an ordered change mapping."""
    changes = {}
    for assignment in assignments:
        attribute, sep, value = assignment.partition("=")
        if not sep or not attribute:
            raise typer.BadParameter(
                f"Expected attribute=value, got '{assignment}'", param_hint="--set"
            )
        if attribute in _INTEGER_ATTRIBUTES:
            try:
                changes[attribute] = int(value)
            except ValueError:
                raise typer.BadParameter(
                    f"{attribute} must be an integer, got '{value}'", param_hint="--set"
                )
        elif attribute == "groups":
            changes[attribute] = [g for g in value.split(",") if g]
        else:
            changes[attribute] = value
    return changes


@app.command()
def capabilities(
    os_family: str = typer.Option(
        None, "--os-family", help="Operating system family (overrides detection)"
    ),
):
    """Show the account-management features detected on this host."""
    caps = _resolve_capabilities(os_family)

    table = Table(title="Platform capabilities")
    table.add_column("Capability", style="cyan")
    table.add_column("Value")
    table.add_row("Operating system family", caps.operating_system_family or "unknown")
    table.add_row("System account flag", "yes" if caps.supports_system_flag else "no")
    table.add_row("Password aging", "yes" if caps.supports_password_aging else "no")
    console.print(table)


@app.command()
def create(
    name: str = typer.Argument(..., help="Account name"),
    uid: int = typer.Option(None, "--uid", help="Numeric user id"),
    gid: str = typer.Option(None, "--gid", help="Primary group id or name"),
    comment: str = typer.Option(None, "--comment", help="GECOS comment"),
    home: str = typer.Option(None, "--home", help="Home directory"),
    shell: str = typer.Option(None, "--shell", help="Login shell"),
    group: list[str] | None = typer.Option(
        None, "--group", "-G", help="Supplementary group (repeatable)"
    ),
    allow_dupe: bool = typer.Option(False, "--allow-dupe", help="Allow a non-unique uid"),
    system: bool = typer.Option(False, "--system", help="Create a system account"),
    manage_home: bool = typer.Option(False, "--manage-home", help="Create the home directory"),
    password_min_age: int = typer.Option(None, "--password-min-age", help="Minimum password age in days"),
    password_max_age: int = typer.Option(None, "--password-max-age", help="Maximum password age in days"),
    expiry: str = typer.Option(None, "--expiry", help="Expiry date (YYYY-MM-DD)"),
    os_family: str = typer.Option(
        None, "--os-family", help="Operating system family (overrides detection)"
    ),
):
    """Print the commands that create an account."""
    try:
        spec = _build_spec(
            name,
            uid=uid,
            gid=gid,
            comment=comment,
            home=home,
            shell=shell,
            groups=list(group) if group else None,
            allow_duplicate_uid=allow_dupe,
            is_system_account=system,
            manage_home_directory=manage_home,
            password_min_age=password_min_age,
            password_max_age=password_max_age,
            expiry_date=expiry,
        )
        caps = _resolve_capabilities(os_family)
        plan = CommandSynthesizer(caps, get_settings().tool_paths()).plan_create(spec)
    except (AccountworkError, ValidationError) as e:
        _handle_command_error(e, "create")

    _print_plan(plan, caps)


@app.command()
def modify(
    name: str = typer.Argument(..., help="Account name"),
    assignments: list[str] = typer.Option(
        ..., "--set", help="Changed attribute as attribute=value (repeatable)"
    ),
    allow_dupe: bool = typer.Option(False, "--allow-dupe", help="Allow a non-unique uid"),
    os_family: str = typer.Option(
        None, "--os-family", help="Operating system family (overrides detection)"
    ),
):
    """Print one command per changed attribute."""
    changes = _parse_changes(assignments)
    try:
        spec = _build_spec(name, allow_duplicate_uid=allow_dupe)
        caps = _resolve_capabilities(os_family)
        plan = CommandSynthesizer(caps, get_settings().tool_paths()).plan_modify(spec, changes)
    except (AccountworkError, ValidationError) as e:
        _handle_command_error(e, "modify")

    _print_plan(plan, caps)


@app.command()
def delete(
    name: str = typer.Argument(..., help="Account name"),
    manage_home: bool = typer.Option(False, "--manage-home", help="Also remove the home directory"),
    os_family: str = typer.Option(
        None, "--os-family", help="Operating system family (overrides detection)"
    ),
):
    """Print the command that deletes an account."""
    try:
        spec = _build_spec(name, manage_home_directory=manage_home)
        caps = _resolve_capabilities(os_family)
        plan = CommandSynthesizer(caps, get_settings().tool_paths()).plan_delete(spec)
    except (AccountworkError, ValidationError) as e:
        _handle_command_error(e, "delete")

    _print_plan(plan, caps)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
