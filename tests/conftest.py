"""Shared fixtures for the iograder test suite."""
import sys
from pathlib import Path

import pytest

from iograder.backends import PythonConfig

ECHO_SCRIPT = "import sys\nsys.stdout.write(sys.stdin.read())\n"


def write_fixtures(fixture_dir: Path, cases: dict[str, tuple[str, str]]) -> Path:
    """Write one <case>.in / <case>.out pair per entry of ``cases``."""
    fixture_dir.mkdir(parents=True, exist_ok=True)
    for name, (input_text, expected) in cases.items():
        (fixture_dir / f"{name}.in").write_bytes(input_text.encode("utf-8"))
        (fixture_dir / f"{name}.out").write_bytes(expected.encode("utf-8"))
    return fixture_dir


def write_student(target_dir: Path, student: str, script: str = ECHO_SCRIPT) -> Path:
    """Create a submission folder holding ``echo_input.py``."""
    student_dir = target_dir / student
    student_dir.mkdir(parents=True, exist_ok=True)
    (student_dir / "echo_input.py").write_text(script, encoding="utf-8")
    return student_dir


@pytest.fixture
def fixture_dir(tmp_path):
    return write_fixtures(
        tmp_path / "fixtures",
        {"case1": ("hi", "hi"), "case2": ("hi", "bye")},
    )


@pytest.fixture
def target_dir(tmp_path):
    path = tmp_path / "submissions"
    path.mkdir()
    return path


@pytest.fixture
def python_config(fixture_dir, target_dir):
    return PythonConfig(
        name="Echo",
        tests_dir=fixture_dir,
        target_dir=target_dir,
        file="echo_input.py",
        version=sys.executable,
        timeout=30,
    )
