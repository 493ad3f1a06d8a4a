"""
Shared test fixtures and configuration.
"""

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from catana.adapters.mock import MockAdapter
from catana.adapters.registry import AdapterRegistry
from catana.core.config.loader import ProvisionConfig
from catana.core.models.action import ShellAction
from catana.core.models.step import Probe, Step


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config(tmp_path: Path) -> ProvisionConfig:
    """Configuration rooted in a temporary home, no root required."""
    return ProvisionConfig(
        home=tmp_path,
        require_root=False,
        audit_file=tmp_path / "audit.ndjson",
    )


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """A config.yml for CLI tests: temp home, temp ledger, no root."""
    path = tmp_path / "config.yml"
    path.write_text(textwrap.dedent(f"""\
        home: "{tmp_path}"
        require_root: false
        audit_file: "{tmp_path / 'audit.ndjson'}"
        needrestart_conf: "{tmp_path / 'needrestart.conf'}"
    """))
    return path


@pytest.fixture
def make_step() -> Callable[..., Step]:
    """Factory for shell steps with an optional precondition."""

    def _make(
        step_id: str,
        precondition: Probe | None = None,
        restart_sensitive: bool = False,
        key: str | None = None,
    ) -> Step:
        return Step(
            id=step_id,
            description=f"Install {step_id}",
            key=key,
            precondition=precondition,
            action=ShellAction(command=f"install {step_id}"),
            restart_sensitive=restart_sensitive,
        )

    return _make


@pytest.fixture
def shell_mock() -> MockAdapter:
    """Mock adapter standing in for the ``shell`` action kind."""
    return MockAdapter(adapter_name="shell")


@pytest.fixture
def registry(shell_mock: MockAdapter) -> AdapterRegistry:
    """Registry whose only adapter is the shell mock."""
    reg = AdapterRegistry()
    reg.register(shell_mock)
    return reg
