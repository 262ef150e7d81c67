"""
Execution of a single program run against one test case.

Feeds the test input to the program, waits for it under an optional
timeout, and compares its standard output with the expected text.
"""

import logging
import os
import signal
import subprocess
from collections.abc import Mapping, Sequence

from .config import STDERR_LOG_LIMIT
from .models import Outcome

logger = logging.getLogger(__name__)

_POSIX = os.name == "posix"


class ProcessRunner:
    """
    Runs one command per call and classifies the result.

    Output is compared exactly: no whitespace or trailing newline
    normalization is applied, so ``"hi\\n"`` does not match ``"hi"``.
    """

    def run(
        self,
        command: str,
        args: Sequence[str],
        env: Mapping[str, str],
        input_text: str,
        expected_output: str,
        timeout: float | None,
    ) -> Outcome:
        """
        Run a command with the given input and classify what it printed.

        Args:
            command: Executable to run.
            args: Arguments passed to the executable.
            env: Extra environment variables, added to the host environment.
            input_text: Text written to the program's standard input.
            expected_output: Exact text expected on standard output.
            timeout: Seconds to wait before killing the program, or None to
                wait until it exits.

        Returns:
            Success or Failure depending on the output, Timeout if the program
            ran too long, or RunError if it could not be run at all.
        """
        cmd = [command, *args]
        child_env = os.environ.copy()
        child_env.update(env)

        logger.debug("Executing: %s", " ".join(cmd))
        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=child_env,
                start_new_session=_POSIX,
            )
        except (OSError, ValueError) as e:
            return Outcome.run_error(f"Could not start {command}: {e}")

        try:
            stdout, stderr = process.communicate(input_text.encode("utf-8"), timeout=timeout)
        except subprocess.TimeoutExpired:
            self._kill(process)
            # Descendants outside the process group may still hold the pipes
            self._reap(process)
            logger.debug("Timed out after %ss: %s", timeout, " ".join(cmd))
            return Outcome.timeout()
        except (OSError, ValueError, OverflowError) as e:
            self._kill(process)
            self._reap(process)
            return Outcome.run_error(f"I/O error while running {command}: {e}")

        if stderr:
            logger.debug(
                "stderr from %s (exit %s): %s",
                command,
                process.returncode,
                stderr.decode("utf-8", errors="replace")[:STDERR_LOG_LIMIT],
            )

        try:
            actual_output = stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            return Outcome.run_error(f"Output of {command} is not valid UTF-8: {e}")

        if actual_output == expected_output:
            return Outcome.success()
        return Outcome.failure()

    @staticmethod
    def _kill(process: subprocess.Popen) -> None:
        """Kill the child and, on POSIX, everything else in its session."""
        if _POSIX:
            try:
                os.killpg(process.pid, signal.SIGKILL)
                return
            except ProcessLookupError:
                return
            except PermissionError:
                pass
        try:
            process.kill()
        except ProcessLookupError:
            pass

    @staticmethod
    def _reap(process: subprocess.Popen) -> None:
        """Wait for a killed child and close its pipes without draining them."""
        process.wait()
        for stream in (process.stdin, process.stdout, process.stderr):
            if stream is None:
                continue
            try:
                stream.close()
            except OSError:
                pass
