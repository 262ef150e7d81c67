"""
Loading of test fixtures.

A fixture directory holds one ``<case>.in`` and one ``<case>.out`` file per
test case. Files with any other extension are ignored.
"""

import logging
from pathlib import Path

from .config import FIXTURE_SUFFIXES, INPUT_SUFFIX, OUTPUT_SUFFIX
from .errors import FixtureLoadError
from .models import TestCase

logger = logging.getLogger(__name__)


class FixtureRepository:
    """
    Discovers the test cases stored in a fixture directory.
    """

    def __init__(self, fixture_dir: Path) -> None:
        """
        Initialize the repository.

        Args:
            fixture_dir: Directory containing the .in/.out files.
        """
        self.fixture_dir = fixture_dir

    def case_names(self) -> list[str]:
        """
        List the case names referenced by the fixture directory.

        Returns:
            Sorted, de-duplicated basenames of all .in and .out files.

        Raises:
            FixtureLoadError: If the directory cannot be listed.
        """
        try:
            entries = list(self.fixture_dir.iterdir())
        except OSError as e:
            raise FixtureLoadError(
                f"Could not list fixture directory {self.fixture_dir}: {e}"
            ) from e

        names: set[str] = set()
        for entry in entries:
            if entry.suffix not in FIXTURE_SUFFIXES:
                continue
            try:
                is_file = entry.is_file()
            except OSError:
                is_file = False
            if not is_file:
                logger.debug("Skipping non-file fixture entry %s", entry)
                continue
            names.add(entry.stem)
        return sorted(names)

    def load(self) -> dict[str, TestCase]:
        """
        Load every test case in the fixture directory.

        Returns:
            Mapping of case name to TestCase.

        Raises:
            FixtureLoadError: If any case lacks its .in or .out file, or a file
                cannot be read as UTF-8.
        """
        cases: dict[str, TestCase] = {}
        for name in self.case_names():
            cases[name] = TestCase(
                name=name,
                input=self._read(name + INPUT_SUFFIX),
                expected_output=self._read(name + OUTPUT_SUFFIX),
            )
        logger.debug("Loaded %d test cases from %s", len(cases), self.fixture_dir)
        return cases

    def _read(self, filename: str) -> str:
        path = self.fixture_dir / filename
        try:
            return path.read_bytes().decode("utf-8")
        except FileNotFoundError as e:
            raise FixtureLoadError(f"Missing fixture file: {path}") from e
        except OSError as e:
            raise FixtureLoadError(f"Could not read fixture file {path}: {e}") from e
        except UnicodeDecodeError as e:
            raise FixtureLoadError(f"Fixture file is not valid UTF-8: {path}") from e
