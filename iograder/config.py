"""
Configuration constants for iograder.
"""

import os


# Execution configuration
DEFAULT_TIMEOUT_SECONDS: float = 5.0
DEFAULT_MAX_WORKERS: int = min(8, os.cpu_count() or 1)

# Fixture file patterns
INPUT_SUFFIX: str = ".in"
OUTPUT_SUFFIX: str = ".out"
FIXTURE_SUFFIXES: tuple[str, ...] = (INPUT_SUFFIX, OUTPUT_SUFFIX)

# Java toolchain
JAVA_COMPILER: str = "javac"
JAVA_LAUNCHER: str = "java"
JAVA_SOURCE_GLOB: str = "*.java"
CLASSPATH_VARIABLE: str = "CLASSPATH"

# Config file formats
TOML_SUFFIXES: tuple[str, ...] = (".toml",)

# Output
DEFAULT_OUTPUT_MODE: str = "table"

# Stderr lines kept in debug logs per run
STDERR_LOG_LIMIT: int = 2000


def default_interpreter(platform_name: str | None = None) -> str:
    """
    Return the Python interpreter to use when the config names none.

    Args:
        platform_name: Value of ``os.name`` to resolve for. Defaults to the host.

    Returns:
        "python" on Windows, "python3" everywhere else.
    """
    platform_name = platform_name or os.name
    if platform_name == "nt":
        return "python"
    return "python3"
