"""Command implementations for CLI."""

import asyncio
import logging
import os
import subprocess
import sys
from typing import Callable, List, Mapping, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from distrobox.compatibility import CompatibilityList, cache_file
from distrobox.errors import PreconditionError, WrongContextError
from distrobox.exporters import ApplicationExporter, BinaryExporter, ExportAction, ExporterRegistry
from distrobox.host import HostProber
from distrobox.launch import ContainerManager, create_container, detect_manager
from distrobox.models import (
    ApplicationTarget,
    BinaryTarget,
    CreateRequest,
    DistroboxConfig,
    ExportContext,
    ServiceTarget,
)
from distrobox.relay import HostExecRelay
from distrobox.utils.systemd import reload_user_manager


logger = logging.getLogger(__name__)

console = Console()
stderr_console = Console(stderr=True)


def _bin_dir(config: DistroboxConfig, env: Mapping[str, str]) -> str:
    """Default export path, in the host home even when the container has its own."""
    home = env.get("DISTROBOX_HOST_HOME") or env.get("HOME", "")
    return config.export.bin_dir or f"{home}/.local/bin"


def build_create_request(
    config: DistroboxConfig,
    image: Optional[str] = None,
    name: Optional[str] = None,
    home: Optional[str] = None,
    init: bool = False,
    root: bool = False,
    pull: bool = False,
    clone: Optional[str] = None,
    additional_flags: Optional[List[str]] = None,
    init_hooks: Optional[str] = None,
    pre_init_hooks: Optional[str] = None,
    manager: str = "podman",
) -> CreateRequest:
    """Merge command line options over configured defaults."""
    defaults = config.container
    flags = [*defaults.additional_flags, *(additional_flags or [])]
    data = {
        "image": image or ("" if clone else defaults.image or ""),
        "name": name or defaults.name,
        "custom_home": home or defaults.custom_home,
        "rootful": root,
        "init": init,
        "manager": manager,
        "additional_flags": " ".join(flags),
        "init_hooks": init_hooks if init_hooks is not None else defaults.init_hooks,
        "pre_init_hooks": pre_init_hooks if pre_init_hooks is not None else defaults.pre_init_hooks,
        "always_pull": pull or defaults.always_pull,
        "clone": clone,
    }
    request = CreateRequest(**data)

    if not request.custom_home and defaults.home_prefix:
        data["name"] = request.name
        data["custom_home"] = f"{defaults.home_prefix.rstrip('/')}/{request.name}"
        request = CreateRequest(**data)
    return request


def create(
    config: DistroboxConfig,
    env: Mapping[str, str],
    confirm_pull: Optional[Callable[[str], bool]] = None,
    dry_run: bool = False,
    **options,
):
    """Create a container and report the outcome."""
    if os.getuid() == 0 and (env.get("SUDO_USER") or env.get("DOAS_USER")):
        raise PreconditionError(
            "Running distrobox via SUDO or DOAS is not supported. "
            "Instead, please try running: distrobox create --root"
        )

    kind = detect_manager(config.container.manager)
    request = build_create_request(config, manager=kind, **options)
    facts = HostProber().probe_current_user(env)
    manager = ContainerManager(kind, rootful=request.rootful, sudo_program=config.sudo_program, uid=os.getuid())

    if config.non_interactive:
        confirm_pull = None
    outcome = asyncio.run(create_container(manager, request, facts, confirm_pull=confirm_pull, dry_run=dry_run))

    name = outcome.request.name
    enter = f"distrobox enter{' --root' if request.rootful else ''} {name}"
    if outcome.status == "dry-run":
        console.print(outcome.command, markup=False, highlight=False, soft_wrap=True)
    elif outcome.status == "exists":
        console.print(f"Distrobox named '{escape(name)}' already exists.")
        console.print(f"To enter, run:\n\n{escape(enter)}\n")
    elif outcome.status == "declined":
        console.print("Next time, run this command first:")
        console.print(f"\t{kind} pull {escape(request.image)}", markup=False)
    else:
        console.print(f"[green]Distrobox '{escape(name)}' successfully created.[/green]")
        console.print(f"To enter, run:\n\n{escape(enter)}\n")
    return outcome


def build_export_context(
    config: DistroboxConfig,
    env: Mapping[str, str],
    prober: Optional[HostProber] = None,
    enter_flags: str = "",
    extra_flags: str = "",
    sudo: bool = False,
) -> ExportContext:
    """Describe the container we are running in, for the exporters."""
    prober = prober or HostProber()
    if not prober.in_container(env):
        raise WrongContextError("You must run distrobox-export inside a container!")
    if os.getuid() == 0:
        raise PreconditionError("You must not run distrobox-export as root!")

    name = prober.container_name(env)
    if not name:
        raise WrongContextError("Cannot determine the name of this container.")

    home = env.get("HOME", "")
    return ExportContext(
        container_name=name,
        host_home=env.get("DISTROBOX_HOST_HOME") or home,
        rootful=prober.container_is_rootful(),
        enter_path=config.export.enter_path,
        enter_flags=enter_flags,
        extra_flags=extra_flags,
        sudo=sudo,
        host_root=config.paths.host_root,
        container_root=config.paths.container_root,
        container_home=home or None,
    )


async def _reload_services():
    """Reload the user manager; failures only warn."""
    try:
        await reload_user_manager()
    except (OSError, subprocess.CalledProcessError) as e:
        logger.warning(f"Could not reload the user service manager: {e}")
        stderr_console.print("[yellow]Run 'systemctl --user daemon-reload' on the host to pick up the new unit.[/yellow]")


def export(
    context: ExportContext,
    app: Optional[str] = None,
    binary: Optional[str] = None,
    service: Optional[str] = None,
    delete: bool = False,
    export_path: Optional[str] = None,
    label: Optional[str] = None,
):
    """Export or un-export exactly one application, binary or service."""
    chosen = [value for value in (app, binary, service) if value]
    if len(chosen) != 1:
        raise PreconditionError("Invalid arguments, choose exactly one of --app, --bin or --service.")

    if app:
        target = ApplicationTarget(token=app, label=label, delete=delete)
        what = f"Application {app}"
    elif binary:
        if not export_path:
            raise PreconditionError("Missing argument export path.")
        target = BinaryTarget(path=binary, dest_dir=export_path, delete=delete)
        what = f"{binary} from {context.container_name}"
    else:
        target = ServiceTarget(unit=service, delete=delete)
        what = f"Service {service}"

    result = ExporterRegistry(context).export(target)

    if result.action == ExportAction.REMOVED:
        console.print(f"{escape(what)} successfully un-exported.\nOK!")
    elif result.action == ExportAction.UNCHANGED:
        console.print(f"{escape(what)} is already exported.\nOK!")
    else:
        console.print(f"{escape(what)} successfully exported.\nOK!")
        for path in result.paths:
            console.print(f"  [dim]{escape(str(path))}[/dim]")

    if service and result.action != ExportAction.UNCHANGED:
        asyncio.run(_reload_services())
        if not delete:
            unit = result.paths[0].name
            console.print(f"To check the status, run:\n\tsystemctl --user status {escape(unit)}")
    return result


def list_apps(context: ExportContext):
    """Show applications exported from this container."""
    table = Table(title=f"Applications exported from {context.container_name}")
    table.add_column("Name", style="cyan")
    table.add_column("Path", style="dim")

    for entry in ApplicationExporter(context).list_exported():
        table.add_row(entry["name"], entry["path"])

    console.print(table)


def list_binaries(context: ExportContext, export_path: str):
    """Show binaries exported from this container into ``export_path``."""
    table = Table(title=f"Binaries exported from {context.container_name}")
    table.add_column("Name", style="cyan")
    table.add_column("Target", style="magenta")
    table.add_column("Path", style="dim")

    for entry in BinaryExporter(context).list_exported(export_path):
        table.add_row(entry["name"], entry["target"], entry["path"])

    console.print(table)


def host_exec(command: List[str], env: Mapping[str, str], config: DistroboxConfig) -> int:
    """Run ``command`` on the host; returns its exit status."""
    relay = HostExecRelay(HostProber().in_container(env), sudo_program=config.sudo_program)
    return asyncio.run(
        relay.run(
            command,
            cwd=os.getcwd(),
            env=env,
            uid=os.getuid(),
            gid=os.getgid(),
            tty=sys.stdin.isatty() and sys.stdout.isatty(),
        )
    )


def show_compatibility(env: Mapping[str, str]):
    """Print the images known to work."""
    for image in CompatibilityList(cache_file(env)).images():
        console.print(image, markup=False, highlight=False)


def run_export(
    config: DistroboxConfig,
    env: Mapping[str, str],
    app: Optional[str] = None,
    binary: Optional[str] = None,
    service: Optional[str] = None,
    delete: bool = False,
    export_path: Optional[str] = None,
    label: Optional[str] = None,
    extra_flags: str = "",
    enter_flags: str = "",
    sudo: bool = False,
    show_apps: bool = False,
    show_binaries: bool = False,
):
    """Entry point for the export command: listing or exporting."""
    context = build_export_context(config, env, enter_flags=enter_flags, extra_flags=extra_flags, sudo=sudo)
    if show_apps:
        return list_apps(context)
    if show_binaries:
        return list_binaries(context, export_path or _bin_dir(config, env))
    if binary and not export_path:
        export_path = _bin_dir(config, env)
    return export(context, app, binary, service, delete, export_path, label)
