"""Test suite for the language backends."""
import datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from pydantic import ValidationError

from iograder.backends import BACKENDS, JavaConfig, PythonConfig, RunnerConfig
from iograder.config import default_interpreter


def java(**overrides):
    values = {"name": "Test A", "tests_dir": "path/to/test", "main_class": "Main", "target_dir": "d"}
    values.update(overrides)
    return JavaConfig.model_validate(values)


def python(**overrides):
    values = {"name": "Test A", "tests_dir": "path/to/test", "file": "source.py", "target_dir": "d"}
    values.update(overrides)
    return PythonConfig.model_validate(values)


class TestRunnerConfigFields:
    """Tests for validation shared by all backends."""

    def test_required_fields(self):
        config = java()
        assert config.name == "Test A"
        assert config.fixture_dir == Path("path/to/test")
        assert config.target_dir == Path("d")

    @pytest.mark.parametrize(
        "value, expected",
        [(1, 1.0), (2.5, 2.5), (0, 0.0), (True, 5.0), (False, None)],
    )
    def test_timeout_values(self, value, expected):
        assert java(timeout=value).timeout == expected

    def test_timeout_defaults_to_five_seconds(self):
        assert java().timeout == 5.0
        assert python().timeout == 5.0

    @pytest.mark.parametrize(
        "value", ["5", None, -1, [1], {"s": 1}, float("inf"), float("nan"), 1e300]
    )
    def test_invalid_timeout(self, value):
        with pytest.raises(ValidationError, match="timeout"):
            java(timeout=value)

    def test_args_are_coerced_to_text(self):
        """Flat scalar arguments become strings."""
        config = python(
            args=["Hello,", 3, 1.5, True, False, datetime.date(2020, 1, 2)]
        )
        assert config.args == ["Hello,", "3", "1.5", "true", "false", "2020-01-02"]

    def test_datetime_args(self):
        stamp = datetime.datetime(1979, 5, 27, 7, 32)
        assert java(args=[stamp]).args == ["1979-05-27T07:32:00"]

    @pytest.mark.parametrize("value", [[["nested"]], [{"a": 1}]])
    def test_nested_args_rejected(self, value):
        with pytest.raises(ValidationError, match="nested structures"):
            java(args=value)

    def test_args_must_be_a_list(self):
        with pytest.raises(ValidationError, match="must be an array"):
            java(args="Hello")

    @pytest.mark.parametrize("missing", ["name", "tests_dir", "main_class", "target_dir"])
    def test_missing_java_field(self, missing):
        values = {"name": "n", "tests_dir": "t", "main_class": "Main", "target_dir": "d"}
        del values[missing]
        with pytest.raises(ValidationError, match=missing):
            JavaConfig.model_validate(values)

    def test_missing_python_file(self):
        with pytest.raises(ValidationError, match="file"):
            PythonConfig.model_validate({"name": "n", "tests_dir": "t", "target_dir": "d"})

    def test_config_is_immutable(self):
        config = java()
        with pytest.raises(ValidationError):
            config.name = "Other"

    def test_base_class_is_abstract(self):
        with pytest.raises(TypeError):
            RunnerConfig(name="n", tests_dir="t", target_dir="d")

    def test_backend_registry(self):
        assert BACKENDS == {"java": JavaConfig, "python": PythonConfig}


class TestJavaConfig:
    """Tests for the Java backend."""

    def test_command(self):
        assert java().build_command(Path("directory")) == ("java", ["Main"])

    def test_command_with_args(self):
        config = java(args=["Hello,", "world!"])
        assert config.build_command(Path("test/dir")) == ("java", ["Main", "Hello,", "world!"])

    def test_custom_launcher(self):
        assert java(launcher="/opt/jdk/bin/java").build_command(Path("x"))[0] == "/opt/jdk/bin/java"

    def test_environment_sets_classpath(self):
        assert java().environment(Path("home/alice")) == {"CLASSPATH": str(Path("home/alice"))}

    def test_command_is_pure(self):
        """Repeated calls give equal, independent results."""
        config = java(args=["x"])
        first = config.build_command(Path("s"))
        first[1].append("mutated")
        assert config.build_command(Path("s")) == ("java", ["Main", "x"])
        assert config.environment(Path("s")) == config.environment(Path("s"))

    def test_setup_compiles_java_sources(self, tmp_path):
        """Every .java file directly in the directory is compiled at once."""
        (tmp_path / "B.java").write_text("class B {}", encoding="utf-8")
        (tmp_path / "A.java").write_text("class A {}", encoding="utf-8")
        (tmp_path / "notes.txt").write_text("", encoding="utf-8")
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "C.java").write_text("class C {}", encoding="utf-8")

        with patch("iograder.backends.subprocess.run", return_value=MagicMock(returncode=0)) as run:
            assert java().perform_setup(tmp_path) is True

        cmd = run.call_args.args[0]
        assert cmd == ["javac", str(tmp_path / "A.java"), str(tmp_path / "B.java")]

    def test_setup_fails_on_compiler_error(self, tmp_path):
        (tmp_path / "Main.java").write_text("class Main {", encoding="utf-8")
        result = MagicMock(returncode=1, stderr=b"Main.java:1: error")
        with patch("iograder.backends.subprocess.run", return_value=result):
            assert java().perform_setup(tmp_path) is False

    def test_setup_without_sources_defers_to_compiler(self, tmp_path):
        """No sources is not special-cased: the compiler's status decides."""
        with patch("iograder.backends.subprocess.run", return_value=MagicMock(returncode=0)) as run:
            assert java().perform_setup(tmp_path) is True
        assert run.call_args.args[0] == ["javac"]

    def test_setup_fails_when_compiler_missing(self, tmp_path):
        with patch("iograder.backends.subprocess.run", side_effect=FileNotFoundError("javac")):
            assert java().perform_setup(tmp_path) is False

    def test_custom_compiler(self, tmp_path):
        with patch("iograder.backends.subprocess.run", return_value=MagicMock(returncode=0)) as run:
            java(compiler="/opt/jdk/bin/javac").perform_setup(tmp_path)
        assert run.call_args.args[0] == ["/opt/jdk/bin/javac"]


class TestPythonConfig:
    """Tests for the Python backend."""

    def test_command(self):
        config = python(version="python3")
        assert config.build_command(Path("home")) == ("python3", [str(Path("home") / "source.py")])

    def test_command_with_args(self):
        config = python(version="python3", args=["Hello,", "world!"])
        assert config.build_command(Path("dir")) == (
            "python3",
            [str(Path("dir") / "source.py"), "Hello,", "world!"],
        )

    def test_default_interpreter_for_host(self):
        assert python().interpreter == default_interpreter()

    def test_default_interpreter_by_platform(self):
        assert default_interpreter("nt") == "python"
        assert default_interpreter("posix") == "python3"

    def test_no_environment(self):
        assert python().environment(Path("home")) == {}

    def test_setup_is_noop(self, tmp_path):
        with patch("iograder.backends.subprocess.run") as run:
            assert python().perform_setup(tmp_path) is True
        run.assert_not_called()

    def test_command_is_pure(self):
        config = python()
        assert config.build_command(Path("a")) == config.build_command(Path("a"))
