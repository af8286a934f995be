"""Git repository tracking service."""

import shutil
import subprocess
from pathlib import Path

from buildkeeper.exceptions import AppBaseError, OperationalError
from buildkeeper.logger import get_logger
from buildkeeper.models.app_config import AppConfig
from buildkeeper.services.registry import RepositoryRegistry
from buildkeeper.services.tools import ToolManager
from buildkeeper.utils.subprocess_executor import SubprocessExecutor

logger = get_logger(__name__)


class RepositoryTracker:
    """Clones or updates source checkouts and records their current commit."""

    def __init__(self, config: AppConfig, tool_manager: ToolManager, repositories: RepositoryRegistry) -> None:
        self.config = config
        self.tool_manager = tool_manager
        self.repositories = repositories

    def refresh(self, software: str, remote_url: str, branch: str) -> str:
        """
        Bring the checkout of a software up to date and record it.

        Args:
            software: Software name
            remote_url: Repository URL
            branch: Branch to build from

        Returns:
            Commit hash after the refresh
        """
        local_path = self.config.paths.get_repo_path(software)
        commit_hash = self.ensure(local_path, remote_url, branch)
        self.repositories.upsert(
            software,
            repo_url=remote_url,
            local_path=str(local_path),
            branch=branch,
            current_hash=commit_hash,
        )
        return commit_hash

    def ensure(self, local_path: Path, remote_url: str, branch: str) -> str:
        """
        Clone repository or update if it exists.

        Args:
            local_path: Checkout directory
            remote_url: Repository URL
            branch: Branch to check out

        Returns:
            Commit hash of HEAD

        Raises:
            OperationalError: If a git operation fails
        """
        try:
            if local_path.exists():
                logger.info(f"Updating repository {local_path}...")
                self._update_repo(local_path, branch)
            else:
                logger.info(f"Cloning {remote_url} into {local_path}...")
                self._clone_repo(remote_url, local_path, branch)

            commit_hash = self._get_commit_hash(local_path)
            logger.info(f"Current commit: {commit_hash}")
            return commit_hash
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            output = getattr(e, "output", None)
            raise OperationalError(
                "git.failed", retriable=True, error=(output or str(e)).strip(), url=remote_url
            ) from e
        except Exception as e:
            if isinstance(e, AppBaseError):
                raise
            raise OperationalError("git.unexpected_error", retriable=False, error=str(e), url=remote_url) from e

    def remove(self, software: str, delete_checkout: bool = False) -> bool:
        """
        Stop tracking a software, optionally deleting its checkout.

        Returns:
            True if the repository was tracked
        """
        record = self.repositories.get(software)
        if record is None:
            return False

        if delete_checkout:
            checkout = Path(record.local_path)
            if checkout.exists():
                shutil.rmtree(checkout)
                logger.info(f"Deleted checkout: {checkout}")

        return self.repositories.remove(software)

    def _git(self, *args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[bytes]:
        git_exec = self.tool_manager.get_git_executable()
        return SubprocessExecutor.run_sync(
            git_exec, *args, cwd=cwd, check=True, timeout=self.config.advanced.process_timeout
        )

    def _git_streaming(self, *args: str, cwd: Path | None = None) -> None:
        git_exec = self.tool_manager.get_git_executable()
        SubprocessExecutor.run_streaming(
            git_exec,
            *args,
            cwd=cwd,
            timeout=self.config.advanced.process_timeout,
            max_buffer_lines=self.config.advanced.output_buffer_lines,
        )

    def _clone_repo(self, remote_url: str, local_path: Path, branch: str) -> None:
        """
        Clone with full history, then switch branch and pull in submodules.

        The clone checks out the remote's default branch; any other branch is
        checked out afterwards.
        """
        local_path.parent.mkdir(parents=True, exist_ok=True)
        self._git_streaming("clone", "--progress", remote_url, str(local_path))

        cloned_branch = self._get_current_branch(local_path)
        if cloned_branch != branch:
            logger.info(f"Checking out {branch} (clone is on {cloned_branch})")
            self._git("checkout", branch, cwd=local_path)

        self._git_streaming("submodule", "update", "--init", "--recursive", cwd=local_path)

    def _update_repo(self, local_path: Path, branch: str) -> None:
        """
        Switch to the branch if needed, pull and update submodules.

        The before/after hashes are compared for logging only.
        """
        current_branch = self._get_current_branch(local_path)
        if current_branch != branch:
            logger.info(f"Switching {local_path} from {current_branch} to {branch}")
            self._git("checkout", branch, cwd=local_path)

        before = self._get_commit_hash(local_path)
        self._git_streaming("pull", "--progress", cwd=local_path)
        self._git_streaming("submodule", "update", "--init", "--recursive", cwd=local_path)
        after = self._get_commit_hash(local_path)

        if before != after:
            logger.info(f"Repository moved {before[:12]} -> {after[:12]}, rebuild needed")
        else:
            logger.info(f"Repository up to date at {after[:12]}")

    def _get_current_branch(self, local_path: Path) -> str:
        result = self._git("rev-parse", "--abbrev-ref", "HEAD", cwd=local_path)
        return result.stdout.decode().strip() if result.stdout else ""

    def _get_commit_hash(self, local_path: Path) -> str:
        """Get current commit hash."""
        git_exec = self.tool_manager.get_git_executable()
        result = SubprocessExecutor.run_sync(git_exec, "rev-parse", "HEAD", cwd=local_path)

        commit_hash = result.stdout.decode().strip() if result.stdout else ""
        if result.returncode != 0 or not commit_hash:
            raise OperationalError("git.failed_commit_hash", retriable=True, path=str(local_path))

        return commit_hash
