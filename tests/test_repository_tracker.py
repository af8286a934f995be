import shutil
import subprocess
from pathlib import Path

import pytest

from buildkeeper.exceptions import OperationalError
from buildkeeper.models.app_config import AppConfig, ToolSource, ToolsConfig
from buildkeeper.services.git import RepositoryTracker
from buildkeeper.services.registry import RepositoryRegistry
from buildkeeper.services.tools import ToolManager
from buildkeeper.utils.subprocess_executor import ProcessResult, SubprocessExecutor

REMOTE = "https://example.invalid/llvm-project.git"


class FakeGit:
    """Stands in for git: clones create the directory, rev-parse answers from a queue."""

    def __init__(self, hashes: list[str], branch: str = "main", fail_on: str | None = None) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.hashes = list(hashes)
        self.branch = branch
        self.fail_on = fail_on

    def _record(self, args: tuple[str, ...]) -> tuple[str, ...]:
        assert args[0] == "git"
        command = args[1:]
        self.calls.append(command)
        if self.fail_on is not None and command[0] == self.fail_on:
            raise subprocess.CalledProcessError(128, list(args), output="fatal: could not read from remote\n")
        return command

    def run_sync(
        self,
        *args: str,
        cwd: Path | str | None = None,
        env: dict[str, str] | None = None,
        check: bool = False,
        timeout: float | None = None,
    ) -> subprocess.CompletedProcess[bytes]:
        command = self._record(args)
        stdout = b""
        if command == ("rev-parse", "HEAD"):
            stdout = f"{self.hashes.pop(0)}\n".encode()
        elif command == ("rev-parse", "--abbrev-ref", "HEAD"):
            stdout = f"{self.branch}\n".encode()
        elif command[0] == "checkout":
            self.branch = command[1]
        return subprocess.CompletedProcess(list(args), 0, stdout=stdout, stderr=b"")

    def run_streaming(
        self,
        *args: str,
        cwd: Path | str | None = None,
        env: dict[str, str] | None = None,
        timeout: float | None = None,
        max_buffer_lines: int | None = None,
    ) -> ProcessResult:
        command = self._record(args)
        if command[0] == "clone":
            Path(command[-1]).mkdir(parents=True)
        return ProcessResult(args=args, returncode=0, duration_seconds=0.0, output="")


@pytest.fixture
def tracker(app_config: AppConfig, repositories: RepositoryRegistry) -> RepositoryTracker:
    tools = ToolManager(ToolsConfig(git=ToolSource(type="custom", custom_path="git")))
    return RepositoryTracker(app_config, tools, repositories)


def _install_fake(monkeypatch: pytest.MonkeyPatch, fake: FakeGit) -> None:
    monkeypatch.setattr(SubprocessExecutor, "run_sync", staticmethod(fake.run_sync))
    monkeypatch.setattr(SubprocessExecutor, "run_streaming", staticmethod(fake.run_streaming))


def test_refresh_clones_missing_checkout(
    tracker: RepositoryTracker,
    repositories: RepositoryRegistry,
    app_config: AppConfig,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    fake = FakeGit(["a" * 40])
    _install_fake(monkeypatch, fake)
    local = app_config.paths.get_repo_path("llvm")

    commit_hash = tracker.refresh("llvm", REMOTE, "main")

    assert commit_hash == "a" * 40
    assert fake.calls == [
        ("clone", "--progress", REMOTE, str(local)),
        ("rev-parse", "--abbrev-ref", "HEAD"),
        ("submodule", "update", "--init", "--recursive"),
        ("rev-parse", "HEAD"),
    ]
    record = repositories.get("llvm")
    assert record is not None
    assert record.repo_url == REMOTE
    assert record.local_path == str(local)
    assert record.branch == "main"
    assert record.current_hash == "a" * 40


def test_clone_checks_out_non_default_branch(
    tracker: RepositoryTracker, app_config: AppConfig, monkeypatch: pytest.MonkeyPatch
) -> None:
    fake = FakeGit(["b" * 40])
    _install_fake(monkeypatch, fake)

    tracker.refresh("llvm", REMOTE, "release/18.x")

    assert ("checkout", "release/18.x") in fake.calls
    assert fake.calls.index(("checkout", "release/18.x")) == 2


def test_refresh_updates_existing_checkout(
    tracker: RepositoryTracker,
    repositories: RepositoryRegistry,
    app_config: AppConfig,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    app_config.paths.get_repo_path("llvm").mkdir(parents=True)
    fake = FakeGit(["a" * 40, "c" * 40, "c" * 40], branch="main")
    _install_fake(monkeypatch, fake)

    commit_hash = tracker.refresh("llvm", REMOTE, "main")

    assert commit_hash == "c" * 40
    assert fake.calls == [
        ("rev-parse", "--abbrev-ref", "HEAD"),
        ("rev-parse", "HEAD"),
        ("pull", "--progress"),
        ("submodule", "update", "--init", "--recursive"),
        ("rev-parse", "HEAD"),
        ("rev-parse", "HEAD"),
    ]
    assert fake.hashes == []
    record = repositories.get("llvm")
    assert record is not None and record.current_hash == "c" * 40


def test_update_switches_branch(
    tracker: RepositoryTracker, app_config: AppConfig, monkeypatch: pytest.MonkeyPatch
) -> None:
    app_config.paths.get_repo_path("llvm").mkdir(parents=True)
    fake = FakeGit(["a" * 40, "a" * 40, "a" * 40], branch="main")
    _install_fake(monkeypatch, fake)

    tracker.refresh("llvm", REMOTE, "release/18.x")

    assert fake.calls[1] == ("checkout", "release/18.x")


def test_git_failure_raises_and_records_nothing(
    tracker: RepositoryTracker, repositories: RepositoryRegistry, monkeypatch: pytest.MonkeyPatch
) -> None:
    fake = FakeGit([], fail_on="clone")
    _install_fake(monkeypatch, fake)

    with pytest.raises(OperationalError) as exc_info:
        tracker.refresh("llvm", REMOTE, "main")

    assert exc_info.value.message_key == "git.failed"
    assert exc_info.value.retriable is True
    assert "could not read from remote" in str(exc_info.value)
    assert repositories.get("llvm") is None


def test_missing_commit_hash(
    tracker: RepositoryTracker, app_config: AppConfig, monkeypatch: pytest.MonkeyPatch
) -> None:
    fake = FakeGit([""])
    _install_fake(monkeypatch, fake)

    with pytest.raises(OperationalError) as exc_info:
        tracker.ensure(app_config.paths.get_repo_path("llvm"), REMOTE, "main")

    assert exc_info.value.message_key == "git.failed_commit_hash"


def test_remove(
    tracker: RepositoryTracker,
    repositories: RepositoryRegistry,
    app_config: AppConfig,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _install_fake(monkeypatch, FakeGit(["a" * 40]))
    tracker.refresh("llvm", REMOTE, "main")
    checkout = app_config.paths.get_repo_path("llvm")
    assert checkout.is_dir()

    assert tracker.remove("llvm", delete_checkout=True) is True

    assert repositories.get("llvm") is None
    assert not checkout.exists()
    assert tracker.remove("llvm") is False


def test_repository_registry_upsert_keeps_one_row(repositories: RepositoryRegistry) -> None:
    first = repositories.upsert("llvm", REMOTE, "/repos/llvm", "main", "a" * 40)
    second = repositories.upsert("llvm", REMOTE, "/repos/llvm", "release/18.x", "b" * 40)
    repositories.upsert("powershell", "https://example.invalid/ps.git", "/repos/ps", "master", None)

    assert second.id == first.id
    assert second.branch == "release/18.x"
    assert [r.software for r in repositories.list_all()] == ["llvm", "powershell"]
    assert repositories.remove("powershell") is True
    assert repositories.remove("powershell") is False


def _git(*args: str, cwd: Path) -> str:
    result = subprocess.run(
        ["git", "-c", "user.name=Test", "-c", "user.email=test@example.invalid", "-c", "commit.gpgsign=false", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
def test_refresh_against_real_repository(tmp_path: Path, app_config: AppConfig, repositories: RepositoryRegistry) -> None:
    upstream = tmp_path / "upstream"
    upstream.mkdir()
    _git("init", "-b", "main", cwd=upstream)
    (upstream / "README").write_text("one\n")
    _git("add", "README", cwd=upstream)
    _git("commit", "-m", "first", cwd=upstream)
    first = _git("rev-parse", "HEAD", cwd=upstream)

    tracker = RepositoryTracker(app_config, ToolManager(app_config.tools), repositories)

    assert tracker.refresh("demo", str(upstream), "main") == first

    (upstream / "README").write_text("two\n")
    _git("commit", "-am", "second", cwd=upstream)
    second = _git("rev-parse", "HEAD", cwd=upstream)

    assert tracker.refresh("demo", str(upstream), "main") == second
    record = repositories.get("demo")
    assert record is not None and record.current_hash == second


def test_missing_git_executable(app_config: AppConfig, repositories: RepositoryRegistry, tmp_path: Path) -> None:
    tools = ToolManager(ToolsConfig(git=ToolSource(type="custom", custom_path=str(tmp_path / "no-such-git"))))
    tracker = RepositoryTracker(app_config, tools, repositories)

    with pytest.raises(OperationalError) as exc_info:
        tracker.refresh("llvm", REMOTE, "main")

    assert exc_info.value.message_key == "git.failed"
    assert repositories.get("llvm") is None


def test_clone_checks_out_master_when_remote_default_is_main(
    tracker: RepositoryTracker, monkeypatch: pytest.MonkeyPatch
) -> None:
    fake = FakeGit(["d" * 40], branch="main")
    _install_fake(monkeypatch, fake)

    tracker.refresh("llvm", REMOTE, "master")

    assert ("checkout", "master") in fake.calls


def test_clone_skips_checkout_when_already_on_branch(
    tracker: RepositoryTracker, monkeypatch: pytest.MonkeyPatch
) -> None:
    fake = FakeGit(["d" * 40], branch="release/18.x")
    _install_fake(monkeypatch, fake)

    tracker.refresh("llvm", REMOTE, "release/18.x")

    assert not any(call[0] == "checkout" for call in fake.calls)


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
def test_refresh_clones_requested_branch_not_remote_default(
    tmp_path: Path, app_config: AppConfig, repositories: RepositoryRegistry
) -> None:
    upstream = tmp_path / "upstream"
    upstream.mkdir()
    _git("init", "-b", "main", cwd=upstream)
    (upstream / "README").write_text("one\n")
    _git("add", "README", cwd=upstream)
    _git("commit", "-m", "first", cwd=upstream)
    _git("branch", "master", cwd=upstream)
    master_hash = _git("rev-parse", "master", cwd=upstream)
    (upstream / "README").write_text("two\n")
    _git("commit", "-am", "second on main", cwd=upstream)
    main_hash = _git("rev-parse", "main", cwd=upstream)
    assert master_hash != main_hash

    tracker = RepositoryTracker(app_config, ToolManager(app_config.tools), repositories)

    assert tracker.refresh("demo", str(upstream), "master") == master_hash
    record = repositories.get("demo")
    assert record is not None
    assert record.branch == "master"
    assert record.current_hash == master_hash
