"""
Configuration loader — reads catana's config.yml into ProvisionConfig.

The config carries every path and feature flag the engine needs. It is
built once at start-up and handed explicitly to the executor, runner
and adapters; nothing reads configuration from module globals.

Lookup order for the config file:
    --config flag  >  CATANA_CONFIG env var  >  ~/.config/catana/config.yml
A missing default file is not an error: built-in defaults apply.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "CATANA_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/catana/config.yml")


class ConfigError(Exception):
    """Raised when the configuration file is invalid or unreadable."""


class ProvisionConfig(BaseModel):
    """Paths and feature flags for one provisioning run."""

    home: Path = Field(default_factory=Path.home)
    venv_dir: Path | None = None              # default: <home>/.catana_venv
    wordlists_dir: Path = Path("/usr/share/wordlists")
    opt_dir: Path = Path("/opt")
    shell_rc: Path | None = None              # default: <home>/.bashrc
    samba_conf: Path = Path("/etc/samba/smb.conf")
    needrestart_conf: Path = Path("/etc/needrestart/conf.d/catana.conf")
    bloodhound_compose: Path | None = None    # default: <home>/.config/catana/bloodhound/docker-compose.yml
    audit_file: Path | None = None            # default: <home>/.local/state/catana/audit.ndjson
    catalog_file: Path | None = None          # default: built-in catalog

    require_root: bool = True
    command_timeout: int = Field(default=1800, gt=0)
    verify_after_success: bool = True

    @field_validator(
        "home", "venv_dir", "wordlists_dir", "opt_dir", "shell_rc", "samba_conf",
        "needrestart_conf", "bloodhound_compose", "audit_file", "catalog_file",
        mode="after",
    )
    @classmethod
    def _expand_user(cls, value: Path | None) -> Path | None:
        return value.expanduser() if value is not None else None

    @model_validator(mode="after")
    def _fill_home_defaults(self) -> ProvisionConfig:
        if self.venv_dir is None:
            self.venv_dir = self.home / ".catana_venv"
        if self.shell_rc is None:
            self.shell_rc = self.home / ".bashrc"
        if self.bloodhound_compose is None:
            self.bloodhound_compose = (
                self.home / ".config" / "catana" / "bloodhound" / "docker-compose.yml"
            )
        if self.audit_file is None:
            self.audit_file = self.home / ".local" / "state" / "catana" / "audit.ndjson"
        return self

    def variables(self) -> dict[str, str]:
        """Placeholder values available to catalog files as ``${name}``."""
        return {
            "home": str(self.home),
            "venv_dir": str(self.venv_dir),
            "wordlists_dir": str(self.wordlists_dir),
            "opt_dir": str(self.opt_dir),
            "shell_rc": str(self.shell_rc),
            "samba_conf": str(self.samba_conf),
            "bloodhound_compose": str(self.bloodhound_compose),
        }


def find_config_file(explicit: Path | None = None) -> Path | None:
    """Locate the config file to use, or None for built-in defaults.

    An explicit path is returned as-is (existence is checked by
    load_config so the error names the right file).
    """
    if explicit is not None:
        return explicit

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()

    default = DEFAULT_CONFIG_PATH.expanduser()
    if default.is_file():
        return default
    return None


def load_config(path: Path | None = None) -> ProvisionConfig:
    """Load and validate the provisioning configuration.

    Args:
        path: Config file path. None means defaults only.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """
    if path is None:
        logger.debug("No config file, using defaults")
        return ProvisionConfig()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = ProvisionConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info("Loaded config from %s", path)
    return config
