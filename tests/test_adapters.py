"""
Tests for adapters — mock doubles, registry dispatch and concrete adapters.
"""

import sys
from pathlib import Path

from catana.adapters.base import ExecutionContext
from catana.adapters.containers.docker import ContainerLaunchAdapter, compose_arguments
from catana.adapters.languages.python import PipAdapter, VenvAdapter, venv_pip
from catana.adapters.mock import MockAdapter, RecordingInvoker
from catana.adapters.packages.apt import PackageAdapter, apt_arguments
from catana.adapters.registry import AdapterRegistry, build_default_registry
from catana.adapters.shell.command import (
    EXIT_NOT_FOUND,
    EXIT_TIMEOUT,
    ShellAdapter,
    SubprocessInvoker,
)
from catana.adapters.shell.filesystem import FilePatchAdapter
from catana.adapters.vcs.git import GitCloneAdapter
from catana.core.models.action import (
    ACTION_KINDS,
    CloneRepoAction,
    ContainerLaunchAction,
    FilePatchAction,
    Invocation,
    PackageAction,
    PipInstallAction,
    ShellAction,
    VenvCreateAction,
)


def _ctx(action, step_id: str = "step") -> ExecutionContext:
    return ExecutionContext(step_id=step_id, action=action)


# ── Mock Adapter Tests ───────────────────────────────────────────────


class TestMockAdapter:
    def test_default_success(self):
        mock = MockAdapter()
        inv = mock.execute(_ctx(ShellAction(command="true")))
        assert inv.ok
        assert inv.metadata["mock"] is True

    def test_call_log(self):
        mock = MockAdapter()
        mock.execute(_ctx(ShellAction(command="a"), "first"))
        mock.execute(_ctx(ShellAction(command="b"), "second"))
        assert mock.call_count == 2
        assert [c.step_id for c in mock.call_log] == ["first", "second"]

    def test_set_failure(self):
        mock = MockAdapter()
        mock.set_failure("nmap", exit_code=100, output="no candidate")
        assert mock.execute(_ctx(ShellAction(command="x"), "nmap")).exit_code == 100
        assert mock.execute(_ctx(ShellAction(command="x"), "gedit")).ok

    def test_reset(self):
        mock = MockAdapter()
        mock.set_failure("nmap")
        mock.execute(_ctx(ShellAction(command="x"), "nmap"))
        mock.reset()
        assert mock.call_count == 0
        assert mock.execute(_ctx(ShellAction(command="x"), "nmap")).ok


class TestRecordingInvoker:
    def test_records_and_answers(self):
        invoker = RecordingInvoker()
        invoker.set_response("apt-get", Invocation.failure(100, "locked"))
        assert invoker.invoke("apt-get", ["update"]).exit_code == 100
        assert invoker.invoke("git", ["clone"]).ok
        assert invoker.calls == [("apt-get", ["update"]), ("git", ["clone"])]


# ── Registry Tests ───────────────────────────────────────────────────


class TestAdapterRegistry:
    def test_dispatch_by_kind(self):
        registry = AdapterRegistry()
        mock = MockAdapter(adapter_name="shell")
        registry.register(mock)
        inv = registry.execute("nmap-scripts", ShellAction(command="nmap --script-updatedb"))
        assert inv.ok
        assert mock.call_log[0].step_id == "nmap-scripts"

    def test_missing_adapter(self):
        inv = AdapterRegistry().execute("x", ShellAction(command="true"))
        assert inv.exit_code == 127
        assert "No adapter" in inv.output

    def test_mock_mode_short_circuits(self):
        registry = AdapterRegistry(mock_mode=True)
        mock = MockAdapter(adapter_name="shell")
        registry.register(mock)
        inv = registry.execute("x", ShellAction(command="rm -rf /tmp/x"))
        assert inv.ok
        assert inv.output.startswith("[mock]")
        assert mock.call_count == 0

    def test_validation_failure(self):
        registry = AdapterRegistry()
        registry.register(PackageAdapter(RecordingInvoker()))
        inv = registry.execute("x", PackageAction(operation="install"))
        assert not inv.ok
        assert "Validation failed" in inv.output

    def test_adapter_exception_becomes_failure(self):
        class Broken(MockAdapter):
            def execute(self, context):
                raise RuntimeError("boom")

        registry = AdapterRegistry()
        registry.register(Broken(adapter_name="shell"))
        inv = registry.execute("x", ShellAction(command="true"))
        assert inv.exit_code == 1
        assert "boom" in inv.output

    def test_default_registry_covers_every_kind(self):
        registry = build_default_registry(invoker=RecordingInvoker())
        assert sorted(registry.list_adapters()) == sorted(ACTION_KINDS)

    def test_adapter_status(self):
        registry = build_default_registry(invoker=RecordingInvoker(available=False))
        status = registry.adapter_status()
        assert status["package"]["available"] is False
        assert status["file_patch"]["available"] is True


# ── Subprocess / Shell Tests ─────────────────────────────────────────


class TestSubprocessInvoker:
    def test_success(self):
        inv = SubprocessInvoker().invoke(sys.executable, ["-c", "print('hello')"])
        assert inv.ok
        assert inv.output == "hello"

    def test_nonzero_exit_does_not_raise(self):
        inv = SubprocessInvoker().invoke(sys.executable, ["-c", "import sys; sys.exit(3)"])
        assert inv.exit_code == 3

    def test_missing_binary(self):
        inv = SubprocessInvoker().invoke("definitely-not-a-real-binary-xyz")
        assert inv.exit_code == EXIT_NOT_FOUND

    def test_timeout(self):
        inv = SubprocessInvoker().invoke(sys.executable, ["-c", "import time; time.sleep(5)"], timeout=1)
        assert inv.exit_code == EXIT_TIMEOUT

    def test_env_is_merged(self):
        inv = SubprocessInvoker().invoke(
            sys.executable,
            ["-c", "import os; print(os.environ['CATANA_TEST'], 'PATH' in os.environ)"],
            env={"CATANA_TEST": "yes"},
        )
        assert inv.output == "yes True"

    def test_undecodable_output_keeps_exit_status(self):
        inv = SubprocessInvoker().invoke("sh", ["-c", "printf 'caf\\351\\n'; exit 0"])
        assert inv.exit_code == 0
        assert inv.output.startswith("caf")


class TestShellAdapter:
    def test_runs_through_sh(self):
        invoker = RecordingInvoker()
        ShellAdapter(invoker).execute(_ctx(ShellAction(command="gunzip -k rockyou.txt.gz")))
        assert invoker.calls == [("sh", ["-c", "gunzip -k rockyou.txt.gz"])]


# ── File Patch Tests ─────────────────────────────────────────────────


class TestFilePatchAdapter:
    def _action(self, path: Path) -> FilePatchAction:
        return FilePatchAction(
            path=str(path),
            pattern="client min protocol",
            lines=("\tclient min protocol = SMB2", "\tclient max protocol = SMB3"),
        )

    def test_appends_when_missing(self, tmp_path: Path):
        conf = tmp_path / "smb.conf"
        conf.write_text("[global]\n\tworkgroup = WORKGROUP")
        inv = FilePatchAdapter().execute(_ctx(self._action(conf)))
        assert inv.ok
        assert conf.read_text() == (
            "[global]\n\tworkgroup = WORKGROUP\n"
            "\tclient min protocol = SMB2\n\tclient max protocol = SMB3\n"
        )

    def test_idempotent(self, tmp_path: Path):
        conf = tmp_path / "smb.conf"
        adapter = FilePatchAdapter()
        adapter.execute(_ctx(self._action(conf)))
        adapter.execute(_ctx(self._action(conf)))
        assert conf.read_text().count("client min protocol") == 1

    def test_creates_parents(self, tmp_path: Path):
        conf = tmp_path / "etc" / "samba" / "smb.conf"
        assert FilePatchAdapter().execute(_ctx(self._action(conf))).ok
        assert conf.is_file()

    def test_invalid_pattern(self, tmp_path: Path):
        action = FilePatchAction(path=str(tmp_path / "f"), pattern="(", lines=("x",))
        valid, error = FilePatchAdapter().validate(_ctx(action))
        assert not valid
        assert "Invalid pattern" in error

    def test_os_error_is_a_failure(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        action = FilePatchAction(path=str(blocker / "child.conf"), pattern="x", lines=("x",))
        inv = FilePatchAdapter().execute(_ctx(action))
        assert not inv.ok


# ── Package / Git / Docker / Python Tests ────────────────────────────


class TestPackageAdapter:
    def test_apt_arguments(self):
        assert apt_arguments(PackageAction(operation="update")) == ["update"]
        assert apt_arguments(PackageAction(operation="upgrade")) == ["upgrade", "-y"]
        assert apt_arguments(PackageAction(packages=("nmap", "ncat"))) == ["install", "-y", "nmap", "ncat"]

    def test_noninteractive(self):
        invoker = RecordingInvoker()
        PackageAdapter(invoker).execute(_ctx(PackageAction(packages=("gedit",))))
        assert invoker.calls == [("apt-get", ["install", "-y", "gedit"])]
        assert invoker.envs[0]["DEBIAN_FRONTEND"] == "noninteractive"

    def test_install_needs_packages(self):
        valid, _ = PackageAdapter(RecordingInvoker()).validate(_ctx(PackageAction()))
        assert not valid


class TestGitCloneAdapter:
    def test_shallow_clone(self, tmp_path: Path):
        invoker = RecordingInvoker()
        dest = tmp_path / "PEASS-ng"
        action = CloneRepoAction(url="https://github.com/carlospolop/PEASS-ng.git", dest=str(dest))
        GitCloneAdapter(invoker).execute(_ctx(action))
        assert invoker.calls == [
            ("git", ["clone", "--depth", "1", "https://github.com/carlospolop/PEASS-ng.git", str(dest)])
        ]

    def test_non_empty_destination_rejected(self, tmp_path: Path):
        (tmp_path / "README.md").write_text("")
        action = CloneRepoAction(url="https://example.invalid/x.git", dest=str(tmp_path))
        valid, error = GitCloneAdapter(RecordingInvoker()).validate(_ctx(action))
        assert not valid
        assert "not empty" in error


class TestContainerLaunchAdapter:
    def test_compose_arguments(self, tmp_path: Path):
        action = ContainerLaunchAction(compose_file=str(tmp_path / "dc.yml"), project="bloodhound")
        assert compose_arguments(action) == [
            "compose", "-f", str(tmp_path / "dc.yml"), "-p", "bloodhound", "up", "-d",
        ]

    def test_missing_compose_file(self, tmp_path: Path):
        action = ContainerLaunchAction(compose_file=str(tmp_path / "dc.yml"))
        valid, error = ContainerLaunchAdapter(RecordingInvoker()).validate(_ctx(action))
        assert not valid
        assert "not found" in error

    def test_launch(self, tmp_path: Path):
        compose = tmp_path / "dc.yml"
        compose.write_text("services: {}\n")
        invoker = RecordingInvoker()
        ContainerLaunchAdapter(invoker).execute(_ctx(ContainerLaunchAction(compose_file=str(compose))))
        assert invoker.calls[0][0] == "docker"
        assert invoker.calls[0][1][-2:] == ["up", "-d"]


class TestPythonAdapters:
    def test_venv_then_pip_upgrade(self, tmp_path: Path):
        invoker = RecordingInvoker()
        venv = tmp_path / "venv"
        inv = VenvAdapter(invoker).execute(_ctx(VenvCreateAction(path=str(venv))))
        assert inv.ok
        assert invoker.calls[0][1] == ["-m", "venv", str(venv)]
        assert invoker.calls[1] == (venv_pip(str(venv)), ["install", "--upgrade", "pip"])

    def test_venv_failure_stops(self, tmp_path: Path):
        invoker = RecordingInvoker()
        invoker.set_response("python3", Invocation.failure(1, "ensurepip is not available"))
        invoker.set_response("python", Invocation.failure(1, "ensurepip is not available"))
        inv = VenvAdapter(invoker).execute(_ctx(VenvCreateAction(path=str(tmp_path / "v"))))
        assert not inv.ok
        assert len(invoker.calls) == 1

    def test_pip_needs_venv(self, tmp_path: Path):
        action = PipInstallAction(venv=str(tmp_path / "venv"), packages=("impacket",))
        valid, error = PipAdapter(RecordingInvoker()).validate(_ctx(action))
        assert not valid
        assert "create it first" in error

    def test_pip_install(self, tmp_path: Path):
        invoker = RecordingInvoker()
        action = PipInstallAction(venv=str(tmp_path / "venv"), packages=("impacket",))
        PipAdapter(invoker).execute(_ctx(action))
        assert invoker.calls == [(venv_pip(str(tmp_path / "venv")), ["install", "--upgrade", "impacket"])]
