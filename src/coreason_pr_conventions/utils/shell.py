import os
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional

from coreason_pr_conventions.utils.logger import logger


@dataclass
class CommandResult:
    """Result of a shell command execution."""

    exit_code: int
    stdout: str
    stderr: str


class ShellError(RuntimeError):
    """Raised when a shell command fails."""

    def __init__(self, message: str, result: CommandResult):
        super().__init__(message)
        self.result = result


class ShellExecutor:
    """Executes git and gh commands for metadata acquisition."""

    def __init__(self, timeout: float = 120, env: Optional[Dict[str, str]] = None) -> None:
        self.timeout = timeout
        self.env = env

    def _environment(self) -> Optional[Dict[str, str]]:
        if not self.env:
            return None
        return {**os.environ, **self.env}

    def run(self, command: List[str], check: bool = False, timeout: Optional[float] = None) -> CommandResult:
        """
        Executes a command without a shell.

        Args:
            command: The command to execute as a list of arguments.
            check: If True, raise ShellError if exit code is non-zero.
            timeout: Timeout in seconds, defaults to the executor timeout.

        Returns:
            CommandResult containing exit code, stdout, and stderr.
        """
        timeout = timeout if timeout is not None else self.timeout
        logger.debug(f"Executing: {' '.join(command)}")

        try:
            process = subprocess.run(
                command,
                capture_output=True,
                text=True,
                check=False,
                timeout=timeout,
                env=self._environment(),
            )
        except subprocess.TimeoutExpired as e:
            stdout = e.stdout.decode() if isinstance(e.stdout, bytes) else (e.stdout or "")
            stderr = f"Command timed out after {timeout}s"
            result = CommandResult(exit_code=-1, stdout=stdout, stderr=stderr)
            if check:
                raise ShellError(f"Command timed out: {' '.join(command)}", result) from e
            return result
        except OSError as e:
            # Missing executable or permission problem
            result = CommandResult(exit_code=-1, stdout="", stderr=str(e))
            if check:
                raise ShellError(f"Failed to execute command: {e}", result) from e
            return result

        result = CommandResult(exit_code=process.returncode, stdout=process.stdout, stderr=process.stderr)

        if check and result.exit_code != 0:
            error_msg = f"Command failed with exit code {result.exit_code}"
            if result.stderr:
                error_msg += f": {result.stderr.strip()}"
            elif result.stdout:
                error_msg += f": {result.stdout.strip()}"
            raise ShellError(error_msg, result)

        return result
