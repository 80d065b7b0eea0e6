"""
Tests for settings loading, the built-in catalog and catalog building.
"""

import textwrap
from pathlib import Path

import pytest

from cache_relocator.core.config.catalog_loader import (
    build_catalog,
    build_descriptor,
    load_catalog,
    resolve_target,
)
from cache_relocator.core.config.loader import (
    CONFIG_ENV_VAR,
    find_config_file,
    load_settings,
)
from cache_relocator.core.data import get_registry
from cache_relocator.core.errors import ConfigInvalid
from cache_relocator.core.models.settings import Settings

# ── Settings ─────────────────────────────────────────────────────────


class TestLoadSettings:
    def test_defaults_without_file(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        settings = load_settings()
        assert settings.size_tolerance == 0.01
        assert settings.verify_files is True
        assert settings.env_store == "auto"
        assert settings.managers == []

    def test_explicit_file(self, tmp_path: Path):
        config = tmp_path / "relocator.yml"
        config.write_text(textwrap.dedent("""\
            target_root: /srv/cache
            size_tolerance: 0.05
            managers: [npm, pip]
        """))
        settings = load_settings(config)
        assert settings.target_root == "/srv/cache"
        assert settings.size_tolerance == 0.05
        assert settings.managers == ["npm", "pip"]

    def test_empty_file_is_defaults(self, tmp_path: Path):
        config = tmp_path / "relocator.yml"
        config.write_text("")
        assert load_settings(config).probe_timeout == 30

    def test_missing_explicit_file(self, tmp_path: Path):
        with pytest.raises(ConfigInvalid, match="not found"):
            load_settings(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        config = tmp_path / "relocator.yml"
        config.write_text("target_root: [unclosed\n")
        with pytest.raises(ConfigInvalid, match="Invalid YAML"):
            load_settings(config)

    def test_not_a_mapping(self, tmp_path: Path):
        config = tmp_path / "relocator.yml"
        config.write_text("- a\n- b\n")
        with pytest.raises(ConfigInvalid, match="mapping"):
            load_settings(config)

    def test_invalid_values(self, tmp_path: Path):
        config = tmp_path / "relocator.yml"
        config.write_text("size_tolerance: 2\n")
        with pytest.raises(ConfigInvalid, match="Invalid settings"):
            load_settings(config)

    def test_env_var_lookup(self, tmp_path: Path, monkeypatch):
        config = tmp_path / "custom.yml"
        config.write_text("target_root: /data/cache\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config))
        assert find_config_file() == config
        assert load_settings().target_root == "/data/cache"

    def test_cwd_lookup(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        (tmp_path / "relocator.yml").write_text("verify_files: false\n")
        assert find_config_file(tmp_path) == tmp_path / "relocator.yml"

    def test_target_root_env_default(self, monkeypatch):
        monkeypatch.setenv("CACHE_RELOCATOR_TARGET_ROOT", "/fast/cache")
        assert Settings().target_root == "/fast/cache"


# ── Built-in catalog ─────────────────────────────────────────────────


class TestBuiltinCatalog:
    def test_registry_loads(self):
        entries = get_registry().package_managers
        assert isinstance(entries, list)
        assert len(entries) >= 10

    def test_catalog_is_valid(self):
        catalog = load_catalog(Settings(target_root="/mnt/cache"))
        assert {"npm", "pip", "nuget", "maven", "cargo"} <= set(catalog.names)

    def test_targets_under_root(self):
        catalog = load_catalog(Settings(target_root="/mnt/cache"))
        for d in catalog:
            assert d.target_path.startswith("/mnt/cache/")

    def test_windows_root(self):
        catalog = load_catalog(Settings(target_root="D:\\cache"))
        assert catalog.get("nuget").target_path == "D:\\cache\\nuget\\packages"

    def test_maven_is_templated(self):
        maven = load_catalog(Settings(target_root="/mnt/cache")).get("maven")
        assert maven.env_var == "MAVEN_OPTS"
        assert maven.env_value_template == "-Dmaven.repo.local={path}"

    def test_managers_filter(self):
        catalog = load_catalog(Settings(target_root="/mnt/cache", managers=["pip", "npm"]))
        assert catalog.names == ["npm", "pip"]

    def test_unknown_manager(self):
        with pytest.raises(ConfigInvalid):
            load_catalog(Settings(target_root="/mnt/cache", managers=["cobol"]))

    def test_extra_managers(self):
        extra = {
            "name": "poetry",
            "env_var": "POETRY_CACHE_DIR",
            "target_path": "poetry",
            "detection_commands": ["poetry"],
        }
        catalog = load_catalog(Settings(target_root="/mnt/cache", extra_managers=[extra]))
        assert catalog.get("poetry").target_path == "/mnt/cache/poetry"

    def test_extra_manager_duplicate(self):
        extra = {"name": "npm", "env_var": "OTHER", "target_path": "x"}
        with pytest.raises(ConfigInvalid, match="Duplicate"):
            load_catalog(Settings(target_root="/mnt/cache", extra_managers=[extra]))


class TestCatalogBuilding:
    def test_resolve_target_posix(self):
        assert resolve_target("/mnt/cache", "conda/pkgs") == "/mnt/cache/conda/pkgs"

    def test_resolve_target_windows(self):
        assert resolve_target("E:\\", "go/mod") == "E:\\go\\mod"

    def test_resolve_target_absolute_kept(self):
        assert resolve_target("/mnt/cache", "/opt/npm") == "/opt/npm"
        assert resolve_target("/mnt/cache", "F:\\npm") == "F:\\npm"

    def test_bad_entry(self):
        with pytest.raises(ConfigInvalid, match="Invalid catalog entry 'npm'"):
            build_descriptor({"name": "npm", "target_path": "npm"}, "/mnt/cache")

    def test_entry_not_mapping(self):
        with pytest.raises(ConfigInvalid):
            build_descriptor(["npm"], "/mnt/cache")

    def test_build_catalog(self):
        catalog = build_catalog(
            [{"name": "a", "env_var": "A", "target_path": "a"}],
            "/mnt/cache",
        )
        assert catalog.get("a").target_path == "/mnt/cache/a"
