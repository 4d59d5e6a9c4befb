"""Blocking invocation of external build tools."""

import subprocess
from pathlib import Path
from typing import Callable, List, Optional

from ..errors import ToolchainError
from .logging import get_logger

logger = get_logger("otel_checker.toolchain")

# (args, cwd, timeout) -> combined output
CommandRunner = Callable[[List[str], Path, Optional[float]], str]


def run_command(args: List[str], cwd: Path, timeout: Optional[float] = None) -> str:
    """Run a command and return its combined stdout and stderr.

    Args:
        args: Command and arguments
        cwd: Working directory
        timeout: Seconds before the command is killed, None waits forever

    Returns:
        Combined output text

    Raises:
        ToolchainError: If the binary is missing, times out or exits non-zero
    """
    command = " ".join(args)
    logger.info(f"Running {command} in {cwd}")
    try:
        completed = subprocess.run(
            args,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as e:
        raise ToolchainError(command, f"executable not found ({e.filename})") from e
    except subprocess.TimeoutExpired as e:
        raise ToolchainError(command, f"timed out after {timeout}s") from e
    except OSError as e:
        raise ToolchainError(command, str(e)) from e

    if completed.returncode != 0:
        raise ToolchainError(command, f"exit status {completed.returncode}", completed.stdout)
    return completed.stdout
