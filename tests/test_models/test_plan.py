"""Tests for the launch plan model."""

from distrobox.models.plan import ArgumentGroup, LaunchPlan, Mount


class TestMount:
    """Test mount rendering."""

    def test_bind_with_options(self):
        mount = Mount(target="/dev", source="/dev", options="rslave")
        assert mount.render() == ["--volume=/dev:/dev:rslave"]

    def test_bind_without_options(self):
        assert Mount(target="/nix", source="/nix").render() == ["--volume=/nix:/nix"]

    def test_anonymous_volume(self):
        assert Mount(target="/var/log/journal", kind="volume").render() == ["--volume=/var/log/journal"]

    def test_typed_mount(self):
        mount = Mount(target="/dev/pts", kind="devpts")
        assert mount.render() == ["--mount=type=devpts,destination=/dev/pts"]

    def test_key_normalizes_trailing_slash(self):
        assert Mount(target="/run/host/", source="/").key == "/run/host"
        assert Mount(target="/", source="/").key == "/"


class TestLaunchPlan:
    """Test LaunchPlan ordering and uniqueness."""

    def test_duplicate_mount_target_dropped(self):
        plan = LaunchPlan(image="fedora:40")

        assert plan.add_mount(Mount(target="/home/user", source="/home/user", options="rslave"))
        assert not plan.add_mount(Mount(target="/home/user/", source="/elsewhere"))

        assert len(plan.mounts) == 1
        assert plan.mounts[0].source == "/home/user"

    def test_to_args_order(self):
        plan = LaunchPlan(image="fedora:40", entrypoint_args=["--verbose"])
        plan.add_flag(ArgumentGroup.BASE, "name", "devbox")
        plan.add_env("HOME", "/home/user")
        plan.add_mount(Mount(target="/tmp", source="/tmp", options="rslave"))
        plan.add_raw("--cap-add=SYS_PTRACE --device '/dev/fuse'")

        assert plan.to_args() == [
            "--name=devbox",
            "--env=HOME=/home/user",
            "--volume=/tmp:/tmp:rslave",
            "--cap-add=SYS_PTRACE",
            "--device",
            "/dev/fuse",
            "--entrypoint=/usr/bin/entrypoint",
            "fedora:40",
            "--verbose",
        ]

    def test_blank_raw_flags_ignored(self):
        plan = LaunchPlan(image="fedora:40")
        plan.add_raw("   ")
        assert plan.items(ArgumentGroup.ADDITIONAL) == []

    def test_environment_later_wins(self):
        plan = LaunchPlan(image="fedora:40")
        plan.add_env("HOME", "/home/user")
        plan.add_env("HOME", "/srv/devbox")
        assert plan.environment == {"HOME": "/srv/devbox"}
