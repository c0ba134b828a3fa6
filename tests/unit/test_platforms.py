"""
Unit tests for platform detection, format resolution and command tables.
"""

from pathlib import Path

import pytest

from crosshot.errors import UnsupportedFormat
from crosshot.platforms import (
    PLATFORM_TOOLS,
    SUPPORTED_FORMATS,
    Platform,
    build_commands,
    current_platform,
    file_extension,
    mime_type,
    resolve_format,
    suggestions_for,
)


class TestCurrentPlatform:
    """Tests for current_platform()."""

    @pytest.mark.parametrize("system, expected", [
        ("win32", Platform.WINDOWS),
        ("cygwin", Platform.WINDOWS),
        ("darwin", Platform.MACOS),
        ("linux", Platform.LINUX),
        ("freebsd13", Platform.LINUX),
        ("sunos5", Platform.LINUX),
    ])
    def test_mapping(self, system, expected):
        assert current_platform(system) == expected

    def test_host_default(self):
        assert current_platform() in set(Platform)


class TestResolveFormat:
    """Tests for resolve_format()."""

    @pytest.mark.parametrize("fmt", SUPPORTED_FORMATS)
    def test_supported(self, fmt):
        assert resolve_format(fmt) == fmt

    def test_case_folded(self):
        assert resolve_format("JPG") == "jpg"
        assert resolve_format("WebP") == "webp"

    def test_jpeg_kept_distinct(self):
        assert resolve_format("JPEG") == "jpeg"

    @pytest.mark.parametrize("fmt", ["tiff", "gif", "", None, "pngx"])
    def test_unsupported(self, fmt):
        with pytest.raises(UnsupportedFormat) as exc_info:
            resolve_format(fmt)
        err = exc_info.value
        assert err.suggestions
        assert all(f in err.suggestions[0] for f in SUPPORTED_FORMATS)

    def test_unsupported_is_value_error(self):
        with pytest.raises(ValueError):
            resolve_format("tiff")


class TestExtensionsAndMime:
    """Tests for file_extension() and mime_type()."""

    def test_jpeg_extension(self):
        assert file_extension("jpeg") == "jpg"
        assert file_extension("jpg") == "jpg"
        assert file_extension("webp") == "webp"

    @pytest.mark.parametrize("fmt, mime", [
        ("png", "image/png"),
        ("jpg", "image/jpeg"),
        ("jpeg", "image/jpeg"),
        ("webp", "image/webp"),
        ("bmp", "image/bmp"),
    ])
    def test_mime(self, fmt, mime):
        assert mime_type(fmt) == mime

    def test_unknown_mime_defaults_to_png(self):
        assert mime_type("tga") == "image/png"


class TestWindowsCommands:
    """Tests for the Windows candidate table."""

    def test_order(self, tmp_path):
        commands = build_commands(Platform.WINDOWS, "png", tmp_path / "a.png")
        assert [c.tool for c in commands] == ["powershell", "nircmd", "screencapture"]

    @pytest.mark.parametrize("fmt, encoder", [
        ("png", "Png"),
        ("jpg", "Jpeg"),
        ("jpeg", "Jpeg"),
        ("bmp", "Bmp"),
    ])
    def test_encoder(self, tmp_path, fmt, encoder):
        ext = file_extension(fmt)
        commands = build_commands(Platform.WINDOWS, fmt, tmp_path / f"a.{ext}")
        script = commands[0].argv[-1]
        assert f"ImageFormat]::{encoder}" in script
        assert commands[0].format == fmt

    def test_webp_written_as_png(self, tmp_path):
        commands = build_commands(Platform.WINDOWS, "webp", tmp_path / "a.webp")
        for command in commands:
            assert command.format == "png"
            assert command.output_path == tmp_path / "a.png"
        assert "ImageFormat]::Png" in commands[0].argv[-1]

    def test_backslashes_and_quotes_in_script(self):
        path = Path("C:\\Users\\o'neil\\shot.png")
        script = build_commands(Platform.WINDOWS, "png", path)[0].argv[-1]
        assert "\\" not in script.split("Save(")[1].split(",")[0]
        assert "o''neil" in script


class TestMacosCommands:
    """Tests for the macOS candidate table."""

    def test_png(self, tmp_path):
        target = tmp_path / "a.png"
        commands = build_commands(Platform.MACOS, "png", target)
        assert [c.argv for c in commands] == [
            ("screencapture", str(target)),
            ("screencapture", "-x", str(target)),
        ]

    @pytest.mark.parametrize("fmt", ["jpg", "jpeg"])
    def test_jpeg_flag(self, tmp_path, fmt):
        target = tmp_path / "a.jpg"
        commands = build_commands(Platform.MACOS, fmt, target)
        assert commands[0].argv == ("screencapture", "-t", "jpg", str(target))
        assert commands[1].argv == ("screencapture", "-x", "-t", "jpg", str(target))
        assert all(c.format == fmt for c in commands)

    @pytest.mark.parametrize("fmt", ["bmp", "webp"])
    def test_unsupported_rewritten_to_png(self, tmp_path, fmt):
        commands = build_commands(Platform.MACOS, fmt, tmp_path / f"a.{fmt}")
        assert len(commands) == 2
        for command in commands:
            assert command.output_path == tmp_path / "a.png"
            assert command.argv[-1] == str(tmp_path / "a.png")
            assert command.format == "png"


class TestLinuxCommands:
    """Tests for the Linux/Unix candidate table."""

    FALLBACKS = ["gnome-screenshot", "spectacle", "wayshot", "flameshot", "scrot", "maim"]

    @pytest.mark.parametrize("fmt", ["png", "jpg", "jpeg", "webp"])
    def test_grim_first_when_supported(self, tmp_path, fmt):
        commands = build_commands(Platform.LINUX, fmt, tmp_path / "a.x")
        assert [c.tool for c in commands] == ["grim"] + self.FALLBACKS
        assert commands[0].argv[1:3] == ("-t", file_extension(fmt))

    def test_grim_skipped_for_bmp(self, tmp_path):
        commands = build_commands(Platform.LINUX, "bmp", tmp_path / "a.bmp")
        assert [c.tool for c in commands] == self.FALLBACKS

    def test_all_target_requested_path(self, tmp_path):
        target = tmp_path / "a.jpg"
        for command in build_commands(Platform.LINUX, "jpg", target):
            assert command.output_path == target
            assert str(target) in command.argv

    def test_flameshot_invocation(self, tmp_path):
        target = tmp_path / "a.png"
        flameshot = build_commands(Platform.LINUX, "png", target)[4]
        assert flameshot.argv == ("flameshot", "full", "-p", str(target), "-d", "0")

    def test_deterministic(self, tmp_path):
        target = tmp_path / "a.png"
        assert build_commands(Platform.LINUX, "png", target) == build_commands(
            Platform.LINUX, "png", target
        )


class TestStaticTables:
    """Tests for tool and suggestion tables."""

    @pytest.mark.parametrize("platform", list(Platform))
    def test_never_empty(self, platform, tmp_path):
        for fmt in SUPPORTED_FORMATS:
            assert build_commands(platform, fmt, tmp_path / "a.png")
        assert suggestions_for(platform)
        assert PLATFORM_TOOLS[platform]

    def test_suggestions_are_copies(self):
        suggestions_for(Platform.LINUX).append("x")
        assert "x" not in suggestions_for(Platform.LINUX)
