"""
Tests for the step runner — skip-vs-run decisions and result mapping.
"""

from pathlib import Path

from catana.adapters.mock import MockAdapter
from catana.adapters.registry import AdapterRegistry
from catana.core.config.loader import ProvisionConfig
from catana.core.engine.presence import PresenceChecker
from catana.core.engine.runner import StepRunner
from catana.core.models.action import ShellAction
from catana.core.models.step import Probe, Step


def _creates(path: Path):
    """Side effect that makes a file_exists probe on ``path`` come true."""

    def _effect(context) -> None:
        path.write_text("installed\n")

    return _effect


class TestIsSatisfied:
    def test_no_precondition_never_satisfied(self, registry, make_step, config):
        runner = StepRunner(registry, config=config)
        assert runner.is_satisfied(make_step("update")) is False

    def test_present_target_is_satisfied(self, registry, make_step, config, tmp_path: Path):
        (tmp_path / "tool").write_text("")
        step = make_step("tool", precondition=Probe.file_exists(str(tmp_path / "tool")))
        assert StepRunner(registry, config=config).is_satisfied(step) is True


class TestRun:
    def test_skips_when_present(self, registry, shell_mock, make_step, config, tmp_path: Path):
        (tmp_path / "tool").write_text("")
        step = make_step("tool", precondition=Probe.file_exists(str(tmp_path / "tool")))

        result = StepRunner(registry, config=config).run(step)

        assert result.outcome == "skipped"
        assert result.exit_code is None
        assert shell_mock.call_count == 0

    def test_runs_when_missing(self, registry, shell_mock, make_step, config, tmp_path: Path):
        step = make_step("tool", precondition=Probe.file_exists(str(tmp_path / "tool")))

        result = StepRunner(registry, config=config).run(step)

        assert result.outcome == "succeeded"
        assert result.exit_code == 0
        assert shell_mock.call_count == 1
        assert shell_mock.call_log[0].step_id == "tool"

    def test_no_precondition_always_runs(self, registry, shell_mock, make_step, config):
        runner = StepRunner(registry, config=config)
        runner.run(make_step("update"))
        runner.run(make_step("update"))
        assert shell_mock.call_count == 2

    def test_failure_carries_exit_code(self, registry, shell_mock, make_step, config):
        shell_mock.set_failure("broken", exit_code=100, output="E: Unable to locate package")

        result = StepRunner(registry, config=config).run(make_step("broken"))

        assert result.outcome == "failed"
        assert result.exit_code == 100
        assert result.error_kind == "action_failed"
        assert "Unable to locate" in result.message

    def test_idempotent_second_run_skips(self, make_step, config, tmp_path: Path):
        target = tmp_path / "tool"
        mock = MockAdapter(adapter_name="shell", side_effect=_creates(target))
        registry = AdapterRegistry()
        registry.register(mock)
        runner = StepRunner(registry, config=config)
        step = make_step("tool", precondition=Probe.file_exists(str(target)))

        first = runner.run(step)
        second = runner.run(step)

        assert first.outcome == "succeeded"
        assert first.verified is True
        assert second.outcome == "skipped"
        assert mock.call_count == 1

    def test_unknown_precondition_fails_closed(self, registry, shell_mock, make_step, config, tmp_path: Path):
        step = make_step("bad", precondition=Probe.file_contains(str(tmp_path), "x"))

        result = StepRunner(registry, config=config).run(step)

        assert result.outcome == "failed"
        assert result.error_kind == "precondition_unknown"
        assert result.exit_code is None
        assert shell_mock.call_count == 0

    def test_missing_adapter_is_a_failed_result(self, make_step, config):
        runner = StepRunner(AdapterRegistry(), config=config)
        result = runner.run(make_step("orphan"))
        assert result.outcome == "failed"
        assert result.exit_code == 127


class TestVerification:
    def test_unverified_when_target_still_absent(self, registry, make_step, config, tmp_path: Path):
        step = make_step("tool", precondition=Probe.file_exists(str(tmp_path / "tool")))

        result = StepRunner(registry, config=config).run(step)

        assert result.outcome == "succeeded"
        assert result.verified is False

    def test_verification_disabled(self, registry, make_step, tmp_path: Path):
        config = ProvisionConfig(home=tmp_path, verify_after_success=False)
        step = make_step("tool", precondition=Probe.file_exists(str(tmp_path / "tool")))

        result = StepRunner(registry, config=config).run(step)

        assert result.verified is None

    def test_not_verified_in_mock_mode(self, make_step, config, tmp_path: Path):
        registry = AdapterRegistry(mock_mode=True)
        step = make_step("tool", precondition=Probe.file_exists(str(tmp_path / "tool")))

        result = StepRunner(registry, config=config).run(step)

        assert result.outcome == "succeeded"
        assert result.verified is None

    def test_no_precondition_not_verified(self, registry, make_step, config):
        result = StepRunner(registry, config=config).run(make_step("update"))
        assert result.verified is None

    def test_uses_injected_checker(self, registry, shell_mock, config, tmp_path: Path):
        checker = PresenceChecker(path=str(tmp_path))
        step = Step(
            id="nuclei",
            precondition=Probe.binary_on_path("nuclei"),
            action=ShellAction(command="apt-get install -y nuclei"),
        )
        result = StepRunner(registry, checker=checker, config=config).run(step)
        assert result.outcome == "succeeded"
        assert shell_mock.call_count == 1
