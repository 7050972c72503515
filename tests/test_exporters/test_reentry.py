"""Tests for the re-entry command contract and line parser."""

from distrobox.exporters.lines import parse
from distrobox.exporters.reentry import is_wrapped, reentry_command, reentry_marker, reentry_prefix
from distrobox.models.export import ExportContext


def _context(**kwargs):
    return ExportContext(container_name="devbox", host_home="/home/alice", **kwargs)


class TestReentry:
    """Test re-entry command construction."""

    def test_prefix_leaves_quote_open(self):
        assert reentry_prefix(_context()) == "distrobox-enter -n devbox -- '"

    def test_rootful_marker(self):
        assert reentry_marker(_context(rootful=True)) == "distrobox-enter --root -n devbox "

    def test_full_command(self):
        context = _context(enter_flags="--no-workdir", extra_flags="--fs", sudo=True)

        assert reentry_command(context, "/usr/bin/mpv") == (
            "distrobox-enter -n devbox --no-workdir -- 'sudo -S /usr/bin/mpv --fs'"
        )

    def test_explicit_extra_flags_override(self):
        context = _context(extra_flags="--fs")
        assert reentry_command(context, "mpv", extra_flags="") == "distrobox-enter -n devbox -- 'mpv'"

    def test_custom_enter_path(self):
        context = _context(enter_path="/usr/local/bin/distrobox-enter")
        assert reentry_marker(context) == "/usr/local/bin/distrobox-enter -n devbox "

    def test_marker_ends_at_name(self):
        other = ExportContext(container_name="dev", host_home="/home/alice")

        assert reentry_marker(other) not in reentry_command(_context(), "mpv")
        assert reentry_marker(other) in reentry_command(other, "mpv")

    def test_is_wrapped(self):
        assert is_wrapped("distrobox-enter -n other -- 'mpv'")
        assert is_wrapped("/opt/distrobox/bin/distrobox-enter -n other -- 'mpv'")
        assert not is_wrapped("mpv %U")


class TestLineFile:
    """Test the ordered key=value view."""

    def test_parse_tracks_groups_and_keys(self):
        entry = parse("# comment\n[Desktop Entry]\nName=mpv\nExec=mpv %U\n\n[Desktop Action new]\nExec=mpv --new\n")

        assert entry.keys() == ["Name", "Exec", "Exec"]
        assert entry.values("Exec") == ["mpv %U", "mpv --new"]
        assert entry.lines[0].key is None
        assert entry.lines[2].group == "Desktop Entry"
        assert entry.lines[-1].group == "Desktop Action new"

    def test_serialize_preserves_text(self):
        text = "[Unit]\nDescription=a=b\n; note\n\n[Service]\nExecStart=/bin/true\n"
        assert parse(text).serialize() == text

    def test_missing_trailing_newline_kept(self):
        assert parse("[Unit]\nDescription=x").serialize() == "[Unit]\nDescription=x"

    def test_value_keeps_equals(self):
        line = parse("Exec=env FOO=bar mpv\n").lines[0]
        assert line.value == "env FOO=bar mpv"
        assert line.with_value("x").raw == "Exec=x"
