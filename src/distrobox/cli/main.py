"""Main CLI implementation using Typer."""

import os
from typing import Any, Callable, List, Optional

import typer
from pydantic import ValidationError
from rich.markup import escape

from distrobox.cli.commands import (
    create,
    host_exec,
    run_export,
    show_compatibility,
    stderr_console,
)
from distrobox.config import ConfigManager
from distrobox.errors import DistroboxError
from distrobox.utils.logging import setup_logging


# Create Typer app
app = typer.Typer(
    name="distrobox",
    help="Distrobox - use any Linux distribution inside your terminal",
    add_completion=False,
)

PASSTHROUGH = {"allow_extra_args": True, "ignore_unknown_options": True}


def _run_cli_command(handler: Callable[..., Any], verbose: bool = False, **kwargs: Any) -> Any:
    """Helper to load configuration and run a CLI command with error handling."""
    try:
        config = ConfigManager().load()
        setup_logging("DEBUG" if verbose or config.verbose else config.log_level)
        return handler(config=config, env=dict(os.environ), **kwargs)
    except DistroboxError as e:
        stderr_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(e.exit_code) from e
    except ValidationError as e:
        message = "; ".join(error["msg"] for error in e.errors())
        stderr_console.print(f"[red]Error:[/red] {escape(message)}")
        raise typer.Exit(1) from e
    except KeyboardInterrupt:
        stderr_console.print("[red]Interrupted[/red]")
        raise typer.Exit(1)


def _confirm_pull(image: str) -> bool:
    return typer.confirm(f"Image {image} not found.\nDo you want to pull the image now?", default=True)


@app.command("create")
def create_command(
    name_arg: Optional[str] = typer.Argument(None, metavar="NAME", help="Container name"),
    image: Optional[str] = typer.Option(None, "--image", "-i", help="Image to use for the container"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Name for the distrobox"),
    home: Optional[str] = typer.Option(None, "--home", "-H", help="Custom home directory for the container"),
    init: bool = typer.Option(False, "--init", "-I", help="Use init system (like systemd) inside the container"),
    root: bool = typer.Option(False, "--root", "-r", help="Launch podman/docker with root privileges"),
    pull: bool = typer.Option(False, "--pull", "-p", help="Pull the image even if it exists locally"),
    yes: bool = typer.Option(False, "--yes", "-Y", help="Non-interactive, pull images without asking"),
    clone: Optional[str] = typer.Option(None, "--clone", "-c", help="Name of the distrobox container to use as base"),
    additional_flags: Optional[List[str]] = typer.Option(
        None, "--additional-flags", "-a", help="Additional flags to pass to the container manager"
    ),
    init_hooks: Optional[str] = typer.Option(None, "--init-hooks", help="Commands to execute at the end of container initialization"),
    pre_init_hooks: Optional[str] = typer.Option(None, "--pre-init-hooks", help="Commands to execute at the start of container initialization"),
    dry_run: bool = typer.Option(False, "--dry-run", "-d", help="Only print the container manager command"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show more verbosity"),
):
    """Create a new distrobox container."""
    _run_cli_command(
        create,
        verbose=verbose,
        confirm_pull=None if yes else _confirm_pull,
        dry_run=dry_run,
        image=image,
        name=name or name_arg,
        home=home,
        init=init,
        root=root,
        pull=pull,
        clone=clone,
        additional_flags=additional_flags,
        init_hooks=init_hooks,
        pre_init_hooks=pre_init_hooks,
    )


def export_command(
    app_name: Optional[str] = typer.Option(None, "--app", "-a", help="Name of the application to export"),
    binary: Optional[str] = typer.Option(None, "--bin", "-b", help="Absolute path of the binary to export"),
    service: Optional[str] = typer.Option(None, "--service", "-s", help="Name of the service to export"),
    delete: bool = typer.Option(False, "--delete", "-d", help="Un-export the application, binary or service"),
    export_path: Optional[str] = typer.Option(None, "--export-path", "-ep", help="Path where to export the binary"),
    export_label: Optional[str] = typer.Option(
        None, "--export-label", "-el", help="Label to add to exported applications, 'none' to disable"
    ),
    extra_flags: str = typer.Option("", "--extra-flags", "-ef", help="Extra flags to add to the command"),
    enter_flags: str = typer.Option("", "--enter-flags", "-nf", help="Flags to add to distrobox-enter"),
    sudo: bool = typer.Option(False, "--sudo", "-S", help="Run the exported item as root inside the container"),
    list_apps: bool = typer.Option(False, "--list-apps", help="List applications exported from this container"),
    list_binaries: bool = typer.Option(False, "--list-binaries", help="List binaries exported from this container"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show more verbosity"),
):
    """Export an application, binary or service from the container to the host."""
    _run_cli_command(
        run_export,
        verbose=verbose,
        app=app_name,
        binary=binary,
        service=service,
        delete=delete,
        export_path=export_path,
        label=export_label,
        extra_flags=extra_flags,
        enter_flags=enter_flags,
        sudo=sudo,
        show_apps=list_apps,
        show_binaries=list_binaries,
    )


def host_exec_command(
    command: Optional[List[str]] = typer.Argument(None, help="Command to run on the host, defaults to your shell"),
):
    """Run a command on the host from inside the container."""
    code = _run_cli_command(host_exec, command=command or [])
    if code:
        raise typer.Exit(code)


@app.command("compatibility")
def compatibility_command(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show more verbosity"),
):
    """List container images known to work with distrobox."""
    _run_cli_command(lambda config, env: show_compatibility(env), verbose=verbose)


app.command("export")(export_command)
app.command("host-exec", context_settings=PASSTHROUGH)(host_exec_command)

# Standalone companions mounted into every container
export_app = typer.Typer(name="distrobox-export", add_completion=False)
export_app.command()(export_command)

host_exec_app = typer.Typer(name="distrobox-host-exec", add_completion=False)
host_exec_app.command(context_settings=PASSTHROUGH)(host_exec_command)


def main():
    """Main entry point for CLI."""
    app()


def export_main():
    """Entry point for distrobox-export."""
    export_app()


def host_exec_main():
    """Entry point for distrobox-host-exec."""
    host_exec_app()
