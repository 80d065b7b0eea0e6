"""
Tests for path expansion and volume identity.
"""

import os
from pathlib import Path

import pytest

from cache_relocator.core.services.paths import (
    expand_path,
    is_windows_path,
    same_path,
    same_volume,
    volume_of,
)


class TestExpandPath:
    def test_percent_var(self):
        env = {"LOCALAPPDATA": "C:\\Users\\me\\AppData\\Local"}
        assert expand_path("%LOCALAPPDATA%\\npm-cache", env) == "C:\\Users\\me\\AppData\\Local\\npm-cache"

    def test_percent_var_case_insensitive(self):
        assert expand_path("%localappdata%\\x", {"LOCALAPPDATA": "C:\\L"}) == "C:\\L\\x"

    def test_program_files_x86(self):
        env = {"ProgramFiles(x86)": "C:\\Program Files (x86)"}
        assert expand_path("%ProgramFiles(x86)%\\Yarn", env) == "C:\\Program Files (x86)\\Yarn"

    def test_dollar_vars(self):
        env = {"HOME": "/home/me"}
        assert expand_path("$HOME/.npm", env) == "/home/me/.npm"
        assert expand_path("${HOME}/.npm", env) == "/home/me/.npm"

    def test_tilde(self):
        assert expand_path("~/.cache/pip", {"HOME": "/home/me"}) == "/home/me/.cache/pip"
        assert expand_path("~", {"HOME": "/home/me"}) == "/home/me"

    def test_unknown_var_left_in_place(self):
        assert expand_path("%NOPE%\\x", {}) == "%NOPE%\\x"
        assert expand_path("$NOPE/x", {}) == "$NOPE/x"


class TestVolumes:
    def test_is_windows_path(self):
        assert is_windows_path("D:\\cache")
        assert is_windows_path("\\\\server\\share\\x")
        assert not is_windows_path("/mnt/cache")

    def test_drive_case_insensitive(self):
        assert volume_of("d:\\cache") == "D:"
        assert same_volume("d:\\cache\\npm", "D:\\Other")

    def test_different_drives(self):
        assert not same_volume("C:\\Users\\me\\.nuget", "D:\\cache\\nuget")

    def test_unc_share(self):
        assert same_volume("\\\\srv\\share\\a", "\\\\SRV\\Share\\b")
        assert not same_volume("\\\\srv\\share\\a", "\\\\srv\\other\\b")

    def test_mixed_flavours_never_match(self):
        assert not same_volume("D:\\cache", "/mnt/cache")

    def test_empty(self):
        assert not same_volume("", "/mnt/cache")

    def test_posix_same_mount(self, tmp_path: Path):
        # neither path has to exist; the nearest existing ancestor decides
        assert same_volume(str(tmp_path / "a" / "b"), str(tmp_path / "c"))

    def test_same_path(self):
        assert same_path("D:\\Cache\\npm\\", "d:\\cache\\npm")
        assert same_path("/mnt/cache/npm/", "/mnt/cache/npm")
        assert not same_path("/mnt/cache/npm", "/mnt/cache/pip")

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
    def test_same_path_through_link(self, tmp_path: Path):
        real = tmp_path / "dev" / "npm"
        real.mkdir(parents=True)
        link = tmp_path / ".npm"
        os.symlink(real, link, target_is_directory=True)
        assert same_path(str(link), str(real))
        assert not same_path(str(link), str(tmp_path / "dev"))
