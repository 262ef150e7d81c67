"""
Report writers for class results.

Each output mode writes a ClassResult to a text stream. Students and test
cases are always listed in lexical order.
"""

import csv
from abc import ABC, abstractmethod
from typing import TextIO

from .models import ClassResult, Outcome, OutcomeKind

MARKERS: dict[OutcomeKind, str] = {
    OutcomeKind.SUCCESS: " ",
    OutcomeKind.FAILURE: "F",
    OutcomeKind.FAILURE_WITH_MESSAGE: "F",
    OutcomeKind.TIMEOUT: "T",
    OutcomeKind.COMPILE_ERROR: "C",
    OutcomeKind.RUN_ERROR: "!",
}


def marker(outcome: Outcome) -> str:
    """Single-character cell for an outcome."""
    return MARKERS[outcome.kind]


def format_grid(rows: list[list[str]]) -> str:
    """
    Format rows as an ASCII grid with a border around every cell.

    Args:
        rows: Table rows; the first is the header.

    Returns:
        The grid, one line per border or row, newline terminated.
    """
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+\n"
    lines = [border]
    for row in rows:
        cells = (f" {cell.ljust(width)} " for cell, width in zip(row, widths))
        lines.append("|" + "|".join(cells) + "|\n")
        lines.append(border)
    return "".join(lines)


class OutputMode(ABC):
    """Writes a ClassResult to a stream."""

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream

    @abstractmethod
    def output_class_results(self, results: ClassResult) -> None:
        """Write the report for ``results``."""


class PrintOutput(OutputMode):
    """Grid of outcome markers, one row per student."""

    def output_class_results(self, results: ClassResult) -> None:
        rows = [["", *results.case_names]]
        for student in results.student_names():
            outcomes = results.students[student]
            rows.append([student, *(marker(outcomes[case]) for case in results.case_names)])
        self.stream.write(format_grid(rows))


class TableOutput(OutputMode):
    """Grid of outcome markers with Passed and Total columns."""

    def output_class_results(self, results: ClassResult) -> None:
        rows = [["", "Passed", "Total", *results.case_names]]
        for student in results.student_names():
            outcomes = results.students[student]
            rows.append(
                [
                    student,
                    str(results.passed_count(student)),
                    str(results.total_cases),
                    *(marker(outcomes[case]) for case in results.case_names),
                ]
            )
        self.stream.write(format_grid(rows))


class CsvOutput(OutputMode):
    """Comma separated values, suitable for importing into a gradebook."""

    def output_class_results(self, results: ClassResult) -> None:
        writer = csv.writer(self.stream, lineterminator="\n")
        writer.writerow(["Name", "Passed", "Total", *results.case_names])
        for student in results.student_names():
            outcomes = results.students[student]
            writer.writerow(
                [
                    student,
                    results.passed_count(student),
                    results.total_cases,
                    *(marker(outcomes[case]) for case in results.case_names),
                ]
            )


class JsonOutput(OutputMode):
    """Full results, including error messages, as JSON."""

    def output_class_results(self, results: ClassResult) -> None:
        self.stream.write(results.model_dump_json(indent=2))
        self.stream.write("\n")


OUTPUT_MODES: dict[str, type[OutputMode]] = {
    "print": PrintOutput,
    "table": TableOutput,
    "csv": CsvOutput,
    "json": JsonOutput,
}


def get_output_mode(name: str, stream: TextIO) -> OutputMode | None:
    """
    Look up an output mode by name.

    Returns:
        The output mode writing to ``stream``, or None if the name is unknown.
    """
    mode = OUTPUT_MODES.get(name)
    if mode is None:
        return None
    return mode(stream)
