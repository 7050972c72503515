"""Tests for the application exporter."""

import pytest

from distrobox.errors import NotExportedError, NotFoundError
from distrobox.exporters.application import ApplicationExporter, split_field_codes
from distrobox.exporters.base import ExportAction, ExportStatus
from distrobox.models.export import ApplicationTarget, ExportContext


MPV_DESKTOP = """[Desktop Entry]
Type=Application
Name=mpv Media Player
Name[de]=mpv Medienabspieler
TryExec=mpv
Exec=mpv --player-operation-mode=pseudo-gui -- %U
Icon=mpv
DBusActivatable=true
Categories=AudioVideo;Player;

[Desktop Action new-window]
Name=New Window
Exec=mpv --new %F
"""


@pytest.fixture
def context(tmp_path):
    """Container with mpv's desktop entry and icon; empty host home."""
    container_root = tmp_path / "container"
    apps = container_root / "usr/share/applications"
    apps.mkdir(parents=True)
    (apps / "mpv.desktop").write_text(MPV_DESKTOP)

    icons = container_root / "usr/share/icons/hicolor/scalable/apps"
    icons.mkdir(parents=True)
    (icons / "mpv.svg").write_text("<svg/>")

    return ExportContext(
        container_name="devbox",
        host_home="/home/alice",
        host_root=tmp_path / "host",
        container_root=container_root,
    )


def _host_apps(context):
    return context.host_root / "home/alice/.local/share/applications"


def _exported(context, name="devbox-mpv.desktop"):
    return (_host_apps(context) / name).read_text()


class TestSplitFieldCodes:
    """Field codes stay outside the re-entry quotes."""

    def test_trailing_code(self):
        assert split_field_codes("mpv --new %F") == ("mpv --new", "%F")

    def test_no_code(self):
        assert split_field_codes("mpv") == ("mpv", "")

    def test_literal_percent_kept(self):
        assert split_field_codes("printf 100%% %u") == ("printf 100%%", "%u")


class TestApplicationExporter:
    """Test desktop entry export."""

    def test_export_naming(self, context):
        """devbox + mpv.desktop gives devbox-mpv.desktop."""
        result = ApplicationExporter(context).apply(ApplicationTarget(token="mpv"))

        assert result.action == ExportAction.EXPORTED
        assert result.paths == [_host_apps(context) / "devbox-mpv.desktop"]

    def test_rewrite(self, context):
        ApplicationExporter(context).present(ApplicationTarget(token="mpv"))

        assert _exported(context) == """[Desktop Entry]
Type=Application
Name=mpv Media Player (on devbox)
Name[de]=mpv Medienabspieler (on devbox)
Exec=distrobox-enter -n devbox -- 'mpv --player-operation-mode=pseudo-gui --' %U
Icon=mpv
Categories=AudioVideo;Player;
StartupWMClass=mpv

[Desktop Action new-window]
Name=New Window (on devbox)
Exec=distrobox-enter -n devbox -- 'mpv --new' %F
"""

    def test_placeholder_outside_quotes_with_extra_flags(self, context):
        context = context.model_copy(update={"extra_flags": "--fs"})
        ApplicationExporter(context).present(ApplicationTarget(token="mpv"))

        assert "Exec=distrobox-enter -n devbox -- 'mpv --new --fs' %F" in _exported(context)

    def test_labels(self, context):
        exporter = ApplicationExporter(context)

        exporter.present(ApplicationTarget(token="mpv", label="none"))
        assert "Name=mpv Media Player\n" in _exported(context)

        exporter.present(ApplicationTarget(token="mpv", label="[dev]"))
        assert "Name=mpv Media Player [dev]\n" in _exported(context)

    def test_export_is_idempotent(self, context):
        exporter = ApplicationExporter(context)
        exporter.present(ApplicationTarget(token="mpv"))
        first = _exported(context)
        exporter.present(ApplicationTarget(token="mpv"))
        second = _exported(context)

        assert second == first
        assert second.count("StartupWMClass=") == 1
        assert second.count("distrobox-enter") == 2

    def test_existing_wm_class_kept(self, context):
        path = context.container_root / "usr/share/applications/mpv.desktop"
        path.write_text(MPV_DESKTOP.replace("Icon=mpv\n", "Icon=mpv\nStartupWMClass=io.mpv.Mpv\n"))

        ApplicationExporter(context).present(ApplicationTarget(token="mpv"))

        text = _exported(context)
        assert "StartupWMClass=io.mpv.Mpv" in text
        assert text.count("StartupWMClass=") == 1

    def test_icon_copied_to_host_tree(self, context):
        ApplicationExporter(context).present(ApplicationTarget(token="mpv"))

        copied = context.host_root / "home/alice/.local/share/icons/hicolor/scalable/apps/mpv.svg"
        assert copied.read_text() == "<svg/>"

    def test_absolute_pixmap_icon_rewritten(self, context):
        pixmaps = context.container_root / "usr/share/pixmaps"
        pixmaps.mkdir(parents=True)
        (pixmaps / "mpv.png").write_text("png")
        path = context.container_root / "usr/share/applications/mpv.desktop"
        path.write_text(MPV_DESKTOP.replace("Icon=mpv", "Icon=/usr/share/pixmaps/mpv.png"))

        ApplicationExporter(context).present(ApplicationTarget(token="mpv"))

        assert "Icon=/home/alice/.local/share/icons/mpv.png\n" in _exported(context)
        assert (context.host_root / "home/alice/.local/share/icons/mpv.png").read_text() == "png"

    def test_filename_match(self, context):
        """Launcher named after the app even when Exec differs."""
        apps = context.container_root / "usr/share/applications"
        (apps / "org.gnome.Calculator.desktop").write_text(
            "[Desktop Entry]\nName=Calculator\nExec=gcalc --mode=basic\n"
        )

        result = ApplicationExporter(context).present(ApplicationTarget(token="calculator"))

        assert [p.name for p in result.paths] == ["devbox-org.gnome.Calculator.desktop"]

    def test_wrapped_descriptors_skipped(self, context):
        apps = context.container_root / "usr/share/applications"
        (apps / "tool.desktop").write_text(
            "[Desktop Entry]\nName=Tool\nExec=distrobox-enter -n other -- 'tool'\n"
        )

        with pytest.raises(NotFoundError):
            ApplicationExporter(context).present(ApplicationTarget(token="tool"))

    def test_not_installed(self, context):
        with pytest.raises(NotFoundError) as exc_info:
            ApplicationExporter(context).present(ApplicationTarget(token="vlc"))

        assert exc_info.value.exit_code == 127

    def test_status(self, context):
        exporter = ApplicationExporter(context)
        target = ApplicationTarget(token="mpv")

        assert exporter.status(target) == ExportStatus.ABSENT
        exporter.present(target)
        assert exporter.status(target) == ExportStatus.EXPORTED


class TestApplicationDelete:
    """Un-export only touches artifacts carrying this container's re-entry command."""

    def test_delete_exported(self, context):
        exporter = ApplicationExporter(context)
        exporter.present(ApplicationTarget(token="mpv"))

        result = exporter.absent(ApplicationTarget(token="mpv", delete=True))

        assert result.action == ExportAction.REMOVED
        assert not (_host_apps(context) / "devbox-mpv.desktop").exists()

    def test_delete_legacy_bare_name(self, context):
        exporter = ApplicationExporter(context)
        exporter.present(ApplicationTarget(token="mpv"))
        legacy = _host_apps(context) / "mpv.desktop"
        legacy.write_text(_exported(context))

        result = exporter.absent(ApplicationTarget(token="mpv"))

        assert sorted(p.name for p in result.paths) == ["devbox-mpv.desktop", "mpv.desktop"]
        assert not legacy.exists()

    def test_delete_keeps_foreign_bare_name(self, context):
        exporter = ApplicationExporter(context)
        exporter.present(ApplicationTarget(token="mpv"))
        native = _host_apps(context) / "mpv.desktop"
        native.write_text(MPV_DESKTOP)

        exporter.absent(ApplicationTarget(token="mpv"))

        assert native.read_text() == MPV_DESKTOP

    def test_delete_not_exported(self, context):
        apps = _host_apps(context)
        apps.mkdir(parents=True)
        native = apps / "devbox-mpv.desktop"
        native.write_text(MPV_DESKTOP)

        with pytest.raises(NotExportedError):
            ApplicationExporter(context).absent(ApplicationTarget(token="mpv"))

        assert native.read_text() == MPV_DESKTOP

    def test_list_exported(self, context):
        exporter = ApplicationExporter(context)
        exporter.present(ApplicationTarget(token="mpv"))
        (_host_apps(context) / "firefox.desktop").write_text("[Desktop Entry]\nName=Firefox\nExec=firefox\n")

        listed = exporter.list_exported()

        assert [entry["name"] for entry in listed] == ["mpv Media Player (on devbox)"]

    def test_prefix_named_container_leaves_others_alone(self, context):
        ApplicationExporter(context).present(ApplicationTarget(token="mpv"))
        legacy = _host_apps(context) / "mpv.desktop"
        legacy.write_text(_exported(context))
        dev = ApplicationExporter(context.model_copy(update={"container_name": "dev"}))

        assert dev.list_exported() == []
        with pytest.raises(NotExportedError):
            dev.absent(ApplicationTarget(token="mpv", delete=True))

        assert legacy.exists()
        assert (_host_apps(context) / "devbox-mpv.desktop").exists()
