"""
Language backends for running student submissions.

Each backend knows how to prepare a submission directory (e.g. compile it)
and which command runs it. New languages are added by subclassing
RunnerConfig and registering the class in BACKENDS under the name of its
config section.
"""

import datetime
import logging
import math
import subprocess
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import (
    CLASSPATH_VARIABLE,
    DEFAULT_TIMEOUT_SECONDS,
    JAVA_COMPILER,
    JAVA_LAUNCHER,
    JAVA_SOURCE_GLOB,
    STDERR_LOG_LIMIT,
    default_interpreter,
)

logger = logging.getLogger(__name__)


def _coerce_arg(value: Any) -> str:
    """Convert one scalar config value into a command line argument."""
    if isinstance(value, (list, tuple, dict)):
        raise ValueError("Args may not contain nested structures")
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    raise ValueError(f"Unsupported argument value: {value!r}")


class RunnerConfig(BaseModel, ABC):
    """
    Configuration shared by every backend.

    Attributes:
        name: A name for this set of tests.
        fixture_dir: Directory holding the <case>.in / <case>.out files.
        target_dir: Directory containing one folder per student submission.
        timeout: Seconds each test case may run, or None for no limit.
        args: Extra arguments passed to the program under test.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., description="Name of this set of tests")
    fixture_dir: Path = Field(..., alias="tests_dir", description="Fixture directory")
    target_dir: Path = Field(..., description="Directory of student submissions")
    timeout: float | None = Field(
        default=DEFAULT_TIMEOUT_SECONDS, description="Per-case timeout in seconds"
    )
    args: list[str] = Field(default_factory=list, description="Extra program arguments")

    @field_validator("timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value: Any) -> float | None:
        # bool is checked first since it is a subclass of int
        if value is True:
            return DEFAULT_TIMEOUT_SECONDS
        if value is False:
            return None
        if isinstance(value, (int, float)):
            if not math.isfinite(value):
                raise ValueError("timeout must be a finite number of seconds")
            if value < 0:
                raise ValueError("timeout may not be negative")
            if value > threading.TIMEOUT_MAX:
                raise ValueError(f"timeout may not exceed {threading.TIMEOUT_MAX:.0f} seconds")
            return float(value)
        raise ValueError("timeout, if specified, should be a number or boolean")

    @field_validator("args", mode="before")
    @classmethod
    def _parse_args(cls, value: Any) -> list[str]:
        if not isinstance(value, (list, tuple)):
            raise ValueError("args, if specified, must be an array")
        return [_coerce_arg(item) for item in value]

    @abstractmethod
    def build_command(self, submission_dir: Path) -> tuple[str, list[str]]:
        """Return the executable and its arguments for one submission."""

    def environment(self, submission_dir: Path) -> dict[str, str]:
        """Extra environment variables for the program under test."""
        return {}

    @abstractmethod
    def perform_setup(self, submission_dir: Path) -> bool:
        """
        Prepare a submission for running.

        Returns:
            False if the submission cannot be run (e.g. a compile error).
        """


class JavaConfig(RunnerConfig):
    """
    Runs a Java program after compiling the submission's sources.

    Attributes:
        main_class: Class containing ``public static void main(String[])``.
        compiler: Compiler executable.
        launcher: JVM launcher executable.
    """

    main_class: str = Field(..., description="Class with the main method")
    compiler: str = Field(default=JAVA_COMPILER, description="Java compiler executable")
    launcher: str = Field(default=JAVA_LAUNCHER, description="Java launcher executable")

    def build_command(self, submission_dir: Path) -> tuple[str, list[str]]:
        return self.launcher, [self.main_class, *self.args]

    def environment(self, submission_dir: Path) -> dict[str, str]:
        return {CLASSPATH_VARIABLE: str(submission_dir)}

    def perform_setup(self, submission_dir: Path) -> bool:
        """
        Compile every .java file directly inside the submission directory.

        An empty directory is handed to the compiler unchanged; whether that
        counts as failure is up to the compiler's exit status.
        """
        try:
            sources = sorted(p for p in submission_dir.glob(JAVA_SOURCE_GLOB) if p.is_file())
        except OSError as e:
            logger.warning("Could not list sources in %s: %s", submission_dir, e)
            return False

        cmd = [self.compiler, *(str(p) for p in sources)]
        logger.debug("Compiling: %s", " ".join(cmd))
        try:
            process = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                check=False,
            )
        except OSError as e:
            logger.warning("Could not run %s for %s: %s", self.compiler, submission_dir, e)
            return False

        if process.returncode != 0:
            logger.debug(
                "Compilation failed in %s (exit %d): %s",
                submission_dir,
                process.returncode,
                process.stderr.decode("utf-8", errors="replace")[:STDERR_LOG_LIMIT],
            )
            return False
        return True


class PythonConfig(RunnerConfig):
    """
    Runs a Python script from the submission directory.

    Attributes:
        script: Script path, relative to the submission directory.
        interpreter: Python executable. Defaults to "python" on Windows and
            "python3" elsewhere.
    """

    script: str = Field(..., alias="file", description="Script to run")
    interpreter: str = Field(
        default_factory=default_interpreter, alias="version", description="Python executable"
    )

    def build_command(self, submission_dir: Path) -> tuple[str, list[str]]:
        return self.interpreter, [str(submission_dir / self.script), *self.args]

    def perform_setup(self, submission_dir: Path) -> bool:
        return True


# Config section name -> backend class
BACKENDS: dict[str, type[RunnerConfig]] = {
    "java": JavaConfig,
    "python": PythonConfig,
}
