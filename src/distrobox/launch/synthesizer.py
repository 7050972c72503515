"""Launch configuration synthesizer.

Turns a :class:`CreateRequest` and a :class:`HostFacts` snapshot into the
ordered :class:`LaunchPlan` the container manager receives. Pure: no I/O,
same inputs give the same plan.
"""

from pathlib import PurePosixPath

from distrobox.models.host import HostFacts
from distrobox.models.plan import ArgumentGroup, LaunchPlan, Mount
from distrobox.models.request import CreateRequest


ENTRYPOINT_PATH = "/usr/bin/entrypoint"
EXPORT_PATH = "/usr/bin/distrobox-export"
HOST_EXEC_PATH = "/usr/bin/distrobox-host-exec"

HOST_FILES = ("/etc/hosts", "/etc/localtime", "/etc/resolv.conf")
TERMINFO_DIRS = "/usr/share/terminfo:/run/host/usr/share/terminfo"
HOST_HOME_ENV = "DISTROBOX_HOST_HOME"


def _rslave(path: str) -> Mount:
    return Mount(target=path, source=path, options="rslave")


def _add_base(plan: LaunchPlan, request: CreateRequest, facts: HostFacts) -> None:
    """Identity, privileges and labels."""
    plan.add_flag(ArgumentGroup.BASE, "hostname", request.hostname or facts.hostname)
    plan.add_flag(ArgumentGroup.BASE, "name", request.name)
    plan.add_flag(ArgumentGroup.BASE, "privileged")
    plan.add_flag(ArgumentGroup.BASE, "security-opt", "label=disable")
    plan.add_flag(ArgumentGroup.BASE, "security-opt", "apparmor=unconfined")
    plan.add_flag(ArgumentGroup.BASE, "pids-limit", "-1")
    plan.add_flag(ArgumentGroup.BASE, "user", "root:root")
    plan.add_flag(ArgumentGroup.BASE, "label", "manager=distrobox")


def _add_namespaces(plan: LaunchPlan, request: CreateRequest) -> None:
    """IPC and network are always shared; PID only without an init system."""
    plan.add_flag(ArgumentGroup.NAMESPACE, "ipc", "host")
    plan.add_flag(ArgumentGroup.NAMESPACE, "network", "host")
    if not request.init:
        plan.add_flag(ArgumentGroup.NAMESPACE, "pid", "host")


def _add_environment(plan: LaunchPlan, request: CreateRequest, facts: HostFacts, home: str) -> None:
    plan.add_env("SHELL", PurePosixPath(facts.shell).name)
    plan.add_env("HOME", home)
    plan.add_env("container", request.manager)
    plan.add_env("TERMINFO_DIRS", TERMINFO_DIRS)
    plan.add_env("CONTAINER_ID", request.name)
    if request.custom_home:
        plan.add_env(HOST_HOME_ENV, facts.home)


def _add_companion_mounts(plan: LaunchPlan, facts: HostFacts) -> None:
    """Helpers the container needs to re-enter itself and export to the host."""
    companions = (
        (facts.entrypoint_path, ENTRYPOINT_PATH),
        (facts.export_path, EXPORT_PATH),
        (facts.host_exec_path, HOST_EXEC_PATH),
    )
    for source, target in companions:
        if source:
            plan.add_mount(Mount(target=target, source=source, options="ro"))


def _add_host_mounts(plan: LaunchPlan, request: CreateRequest, facts: HostFacts) -> None:
    """Home, root filesystem and device trees, propagating host mount events."""
    if request.custom_home:
        plan.add_mount(_rslave(request.custom_home))
    plan.add_mount(_rslave(facts.home))
    plan.add_mount(Mount(target="/run/host/", source="/", options="rslave"))
    plan.add_mount(_rslave("/dev"))
    plan.add_mount(_rslave("/sys"))
    plan.add_mount(_rslave("/tmp"))


def _add_conditional_mounts(plan: LaunchPlan, request: CreateRequest, facts: HostFacts) -> None:
    """Mounts gated on host facts.

    The host runtime dir is left out of init containers: their own systemd
    user session creates and owns /run/user/<uid>.
    """
    if facts.selinux:
        plan.add_mount(Mount(target="/sys/fs/selinux", kind="volume"))

    # Needs a real filesystem so init systems can set ACLs on it
    plan.add_mount(Mount(target="/var/log/journal", kind="volume"))

    if facts.shm_target:
        plan.add_mount(Mount(target=facts.shm_target, source=facts.shm_target))

    if facts.nix:
        plan.add_mount(_rslave("/nix"))

    if facts.var_home:
        plan.add_mount(_rslave(facts.var_home))

    if facts.runtime_dir and not request.init:
        plan.add_mount(_rslave(facts.runtime_dir))

    for path in HOST_FILES:
        plan.add_mount(Mount(target=path, source=path, options="ro"))


def _add_podman_options(plan: LaunchPlan, request: CreateRequest) -> None:
    plan.add_flag(ArgumentGroup.MANAGER, "ulimit", "host")
    plan.add_flag(ArgumentGroup.MANAGER, "annotation", "run.oci.keep_original_groups=1")
    plan.add_mount(Mount(target="/dev/pts", kind="devpts"), ArgumentGroup.MANAGER)
    if request.init:
        plan.add_flag(ArgumentGroup.MANAGER, "systemd", "always")
    if not request.rootful:
        plan.add_flag(ArgumentGroup.MANAGER, "userns", "keep-id")


def _add_docker_options(plan: LaunchPlan, request: CreateRequest) -> None:
    if not request.init:
        return
    plan.add_flag(ArgumentGroup.MANAGER, "cgroupns", "host")
    plan.add_flag(ArgumentGroup.MANAGER, "stop-signal", "SIGRTMIN+3")
    for target in ("/run", "/run/lock", "/var/lib/journal"):
        plan.add_mount(Mount(target=target, kind="tmpfs"), ArgumentGroup.MANAGER)


def _entrypoint_args(request: CreateRequest, facts: HostFacts, home: str) -> list:
    return [
        "--verbose",
        "--name", facts.username,
        "--user", str(facts.uid),
        "--group", str(facts.gid),
        "--home", home,
        "--init", "1" if request.init else "0",
        "--pre-init-hooks", request.pre_init_hooks,
        "--",
        request.init_hooks,
    ]


def synthesize(request: CreateRequest, facts: HostFacts) -> LaunchPlan:
    """Build the launch plan for ``request`` on a host described by ``facts``.

    The request must already carry a resolved image.
    """
    home = request.custom_home or facts.home
    plan = LaunchPlan(image=request.image, entrypoint=ENTRYPOINT_PATH)

    _add_base(plan, request, facts)
    _add_namespaces(plan, request)
    _add_environment(plan, request, facts, home)
    _add_companion_mounts(plan, facts)
    _add_host_mounts(plan, request, facts)
    _add_conditional_mounts(plan, request, facts)

    if request.manager == "podman":
        _add_podman_options(plan, request)
    else:
        _add_docker_options(plan, request)

    plan.add_raw(request.additional_flags)
    plan.entrypoint_args = _entrypoint_args(request, facts, home)
    return plan
