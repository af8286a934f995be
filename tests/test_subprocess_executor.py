import subprocess
import sys

import pytest

from buildkeeper.utils.subprocess_executor import SubprocessExecutor, is_progress_line


def test_is_progress_line() -> None:
    assert is_progress_line("Receiving objects:  10%\r")
    assert is_progress_line("\033[32mok\033[0m")
    assert not is_progress_line("plain output")


def test_run_sync_captures_output() -> None:
    result = SubprocessExecutor.run_sync(sys.executable, "-c", "print('hello')")

    assert result.returncode == 0
    assert result.stdout.decode().strip() == "hello"


def test_run_sync_check_raises() -> None:
    with pytest.raises(subprocess.CalledProcessError):
        SubprocessExecutor.run_sync(sys.executable, "-c", "import sys; sys.exit(3)", check=True)


def test_run_streaming_merges_stderr() -> None:
    result = SubprocessExecutor.run_streaming(
        sys.executable, "-c", "import sys; print('out'); sys.stdout.flush(); print('err', file=sys.stderr)"
    )

    assert result.returncode == 0
    assert result.output.splitlines() == ["out", "err"]


def test_run_streaming_keeps_tail_on_failure() -> None:
    script = "import sys\nfor i in range(10): print(i)\nsys.exit(4)"

    with pytest.raises(subprocess.CalledProcessError) as exc_info:
        SubprocessExecutor.run_streaming(sys.executable, "-c", script, max_buffer_lines=3)

    assert exc_info.value.returncode == 4
    assert exc_info.value.output.splitlines() == ["7", "8", "9"]


def test_run_streaming_collapses_progress_lines() -> None:
    script = "for i in range(5): print(f'{i}%\\r{i}%')\nprint('done')"

    result = SubprocessExecutor.run_streaming(sys.executable, "-c", script)

    assert result.output.split("\n") == ["4%\r4%", "done"]


def test_run_streaming_timeout() -> None:
    script = "import time\nwhile True:\n    print('tick', flush=True)\n    time.sleep(0.05)"

    with pytest.raises(subprocess.TimeoutExpired):
        SubprocessExecutor.run_streaming(sys.executable, "-c", script, timeout=0.3)
