"""
Fatal errors raised by iograder.

Everything that goes wrong for a single student or test case is reported as
an Outcome instead; only these abort a grading run.
"""


class GraderError(Exception):
    """Base class for errors that stop a grading run."""


class ConfigError(GraderError, ValueError):
    """The backend configuration is malformed or incomplete."""


class FixtureLoadError(GraderError):
    """The test fixtures could not be loaded."""
