"""
Tests for configuration loading — defaults, lookup order and errors.
"""

import textwrap
from pathlib import Path

import pytest

from catana.core.config.loader import (
    ConfigError,
    ProvisionConfig,
    find_config_file,
    load_config,
)


class TestProvisionConfig:
    def test_home_based_defaults(self, tmp_path: Path):
        config = ProvisionConfig(home=tmp_path)
        assert config.venv_dir == tmp_path / ".catana_venv"
        assert config.shell_rc == tmp_path / ".bashrc"
        assert config.audit_file == tmp_path / ".local" / "state" / "catana" / "audit.ndjson"
        assert config.bloodhound_compose.name == "docker-compose.yml"
        assert config.require_root is True
        assert config.verify_after_success is True

    def test_explicit_values_kept(self, tmp_path: Path):
        config = ProvisionConfig(home=tmp_path, venv_dir=tmp_path / "tools")
        assert config.venv_dir == tmp_path / "tools"

    def test_tilde_expanded(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        config = ProvisionConfig(home="~", shell_rc="~/.zshrc")
        assert config.home == tmp_path
        assert config.shell_rc == tmp_path / ".zshrc"

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValueError):
            ProvisionConfig(command_timeout=0)

    def test_variables(self, tmp_path: Path):
        variables = ProvisionConfig(home=tmp_path).variables()
        assert variables["home"] == str(tmp_path)
        assert variables["venv_dir"] == str(tmp_path / ".catana_venv")
        assert variables["wordlists_dir"] == "/usr/share/wordlists"
        assert set(variables) == {
            "home", "venv_dir", "wordlists_dir", "opt_dir",
            "shell_rc", "samba_conf", "bloodhound_compose",
        }


class TestFindConfigFile:
    def test_explicit_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("CATANA_CONFIG", str(tmp_path / "env.yml"))
        assert find_config_file(tmp_path / "flag.yml") == tmp_path / "flag.yml"

    def test_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("CATANA_CONFIG", str(tmp_path / "env.yml"))
        assert find_config_file() == tmp_path / "env.yml"

    def test_default_location(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("CATANA_CONFIG", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert find_config_file() is None

        default = tmp_path / ".config" / "catana" / "config.yml"
        default.parent.mkdir(parents=True)
        default.write_text("require_root: false\n")
        assert find_config_file() == default


class TestLoadConfig:
    def test_none_gives_defaults(self):
        assert load_config(None).require_root is True

    def test_load(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text(textwrap.dedent(f"""\
            home: {tmp_path}
            require_root: false
            command_timeout: 60
            wordlists_dir: /srv/wordlists
        """))
        config = load_config(path)
        assert config.home == tmp_path
        assert config.require_root is False
        assert config.command_timeout == 60
        assert config.wordlists_dir == Path("/srv/wordlists")

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("")
        assert load_config(path).command_timeout == 1800

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("home: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_invalid_value(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("command_timeout: soon\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)
