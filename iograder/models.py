"""
Pydantic models for iograder.

Defines the test cases loaded from the fixture directory, the student
submissions found in the target directory, and the outcomes produced by
running one against the other.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class TestCase(BaseModel):
    """
    A single fixture: what to feed the program and what it must print.

    Attributes:
        name: Case name (fixture file basename), unique within a run.
        input: Text written to the program's standard input.
        expected_output: Exact text the program must write to standard output.
    """

    __test__ = False

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Case name, unique within a run")
    input: str = Field(..., description="Standard input for the program")
    expected_output: str = Field(..., description="Expected standard output")


class Submission(BaseModel):
    """
    Represents a student's submission directory.

    Attributes:
        student_name: Student identifier (folder name).
        path: Path to the submission directory.
    """

    model_config = ConfigDict(frozen=True)

    student_name: str = Field(..., description="Student identifier")
    path: Path = Field(..., description="Path to submission directory")


class OutcomeKind(str, Enum):
    """The categories a single run can end up in."""

    SUCCESS = "success"
    FAILURE = "failure"
    FAILURE_WITH_MESSAGE = "failure_with_message"
    TIMEOUT = "timeout"
    COMPILE_ERROR = "compile_error"
    RUN_ERROR = "run_error"


class Outcome(BaseModel):
    """
    Result of running one submission against one test case.

    Attributes:
        kind: Category of the result.
        message: Extra detail for FAILURE_WITH_MESSAGE and RUN_ERROR.
    """

    model_config = ConfigDict(frozen=True)

    kind: OutcomeKind = Field(..., description="Outcome category")
    message: str | None = Field(default=None, description="Detail for failures and errors")

    @classmethod
    def success(cls) -> "Outcome":
        return cls(kind=OutcomeKind.SUCCESS)

    @classmethod
    def failure(cls, message: str | None = None) -> "Outcome":
        if message is None:
            return cls(kind=OutcomeKind.FAILURE)
        return cls(kind=OutcomeKind.FAILURE_WITH_MESSAGE, message=message)

    @classmethod
    def timeout(cls) -> "Outcome":
        return cls(kind=OutcomeKind.TIMEOUT)

    @classmethod
    def compile_error(cls) -> "Outcome":
        return cls(kind=OutcomeKind.COMPILE_ERROR)

    @classmethod
    def run_error(cls, message: str) -> "Outcome":
        return cls(kind=OutcomeKind.RUN_ERROR, message=message)

    @property
    def passed(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS


# Case name -> outcome for one student
StudentResult = dict[str, Outcome]


class ClassResult(BaseModel):
    """
    Outcomes for every student on every test case.

    Every entry of ``students`` has exactly the keys in ``case_names``.

    Attributes:
        name: Name of the grading run, from the configuration.
        case_names: Sorted names of all test cases.
        students: Student name -> that student's results.
    """

    name: str = Field(..., description="Name of the grading run")
    case_names: list[str] = Field(default_factory=list, description="Sorted test case names")
    students: dict[str, StudentResult] = Field(
        default_factory=dict, description="Per-student outcomes keyed by case name"
    )

    @property
    def total_cases(self) -> int:
        return len(self.case_names)

    def student_names(self) -> list[str]:
        return sorted(self.students)

    def passed_count(self, student_name: str) -> int:
        """Number of cases the given student passed."""
        return sum(1 for outcome in self.students[student_name].values() if outcome.passed)
