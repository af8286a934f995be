"""Subprocess execution utilities with automatic logging."""

import subprocess
import time
from collections import deque
from dataclasses import dataclass
from pathlib import Path

from buildkeeper.logger import get_logger

logger = get_logger(__name__)


def is_progress_line(line: str) -> bool:
    """
    Check if a line appears to be a progress update (e.g., contains control characters
    like \r, \b, or ANSI escape sequences).
    """
    return "\r" in line or "\b" in line or "\033[" in line


@dataclass
class ProcessResult:
    """Outcome of a finished subprocess."""

    args: tuple[str, ...]
    returncode: int
    duration_seconds: float
    output: str


class SubprocessExecutor:
    """Executes subprocess commands with automatic debug logging."""

    @staticmethod
    def run_sync(
        *args: str,
        cwd: Path | str | None = None,
        env: dict[str, str] | None = None,
        check: bool = False,
        timeout: float | None = None,
    ) -> subprocess.CompletedProcess[bytes]:
        """
        Execute a synchronous subprocess command with automatic debug logging.

        Args:
            *args: Command arguments
            cwd: Working directory
            env: Environment variables
            check: Whether to raise exception on non-zero exit code
            timeout: Timeout in seconds

        Returns:
            subprocess.CompletedProcess object

        Raises:
            subprocess.CalledProcessError: If check=True and returncode != 0
            subprocess.TimeoutExpired: If timeout is exceeded
        """
        cmd_str = " ".join(args)
        logger.debug(f"Executing sync subprocess: {cmd_str}")
        if cwd:
            logger.debug(f"Working directory: {cwd}")

        cwd_arg = str(cwd) if cwd else None

        try:
            result = subprocess.run(args, check=check, capture_output=True, cwd=cwd_arg, env=env, timeout=timeout)

            # Log outputs at debug level
            if result.stdout:
                stdout_str = result.stdout.decode("utf-8", errors="replace")
                logger.debug(f"Subprocess stdout: {stdout_str}")
            if result.stderr:
                stderr_str = result.stderr.decode("utf-8", errors="replace")
                logger.debug(f"Subprocess stderr: {stderr_str}")

            return result

        except subprocess.TimeoutExpired:
            logger.error(f"Subprocess timeout after {timeout}s: {cmd_str}")
            raise
        except Exception as e:
            logger.error(f"Subprocess execution failed: {cmd_str} - {e}")
            raise

    @staticmethod
    def run_streaming(
        *args: str,
        cwd: Path | str | None = None,
        env: dict[str, str] | None = None,
        timeout: float | None = None,
        max_buffer_lines: int | None = None,
    ) -> ProcessResult:
        """
        Execute a subprocess, streaming its combined output to the debug log.

        Args:
            *args: Command arguments
            cwd: Working directory
            env: Environment variables
            timeout: Timeout in seconds, checked between output lines
            max_buffer_lines: Maximum number of lines to keep for the result and
                error reports. If None, keeps all lines. Progress lines (containing
                \r, \b, or ANSI escapes) are deduplicated by overwriting the last
                progress line in the buffer.

        Returns:
            ProcessResult with exit code, duration and buffered output

        Raises:
            subprocess.CalledProcessError: If the process exits non-zero; `output`
                holds the buffered lines
            subprocess.TimeoutExpired: If timeout is exceeded
        """
        cmd_str = " ".join(args)
        logger.debug(f"Executing subprocess with streaming: {cmd_str}")
        if cwd:
            logger.debug(f"Working directory: {cwd}")

        output_lines: deque[str] | list[str]
        if max_buffer_lines is not None:
            output_lines = deque(maxlen=max_buffer_lines)
        else:
            output_lines = []

        started = time.monotonic()
        process = subprocess.Popen(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            cwd=str(cwd) if cwd else None,
            env=env,
        )
        try:
            assert process.stdout is not None
            for raw in process.stdout:
                line = raw.decode("utf-8", errors="replace").rstrip("\n\r")
                if is_progress_line(line) and output_lines and is_progress_line(output_lines[-1]):
                    output_lines[-1] = line
                else:
                    output_lines.append(line)
                # use DEBUG level for per-line logs
                logger.debug(f"Subprocess: {line}")
                if timeout is not None and time.monotonic() - started > timeout:
                    raise subprocess.TimeoutExpired(list(args), timeout, output="\n".join(output_lines))
            process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.error(f"Subprocess timeout after {timeout}s: {cmd_str}")
            process.kill()
            process.wait()
            raise
        finally:
            if process.stdout is not None:
                process.stdout.close()

        duration = time.monotonic() - started
        full_output = "\n".join(output_lines)

        if process.returncode != 0:
            buffer_note = f" (last {max_buffer_lines} lines)" if max_buffer_lines is not None else ""
            logger.error(f"Subprocess failed with code {process.returncode}: {cmd_str}{buffer_note}")
            logger.error(f"Error output{buffer_note}: {full_output}")
            raise subprocess.CalledProcessError(process.returncode, list(args), output=full_output)

        logger.debug(f"Subprocess finished in {duration:.1f}s: {cmd_str}")
        return ProcessResult(args=tuple(args), returncode=process.returncode, duration_seconds=duration, output=full_output)
