"""
iograder: Automated input/output grading of student programs

Usage:
  main.py <config_file> [<output_method>] [--workers=N] [--verbose]
  main.py (-h | --help)
  main.py --version

Arguments:
  <config_file>    YAML or TOML file describing the test run.
  <output_method>  One of: print, table, csv, json (default: table).

Options:
  --workers=N      Maximum number of programs running at once.
  --verbose        Print debug output while grading.
  -h --help        Show this screen.
  --version        Show version.
"""

import logging
import sys
from pathlib import Path

from docopt import docopt

from iograder import __version__
from iograder.config import DEFAULT_OUTPUT_MODE
from iograder.config_loader import load_config
from iograder.errors import GraderError
from iograder.models import ClassResult, StudentResult
from iograder.orchestrator import SubmissionOrchestrator
from iograder.renderers import OUTPUT_MODES, get_output_mode


def print_student_summary(student_name: str, results: StudentResult) -> None:
    """
    Print a one-line progress summary for a graded student to stderr.

    Args:
        student_name: Student identifier (folder name).
        results: The student's outcomes.
    """
    passed = sum(1 for outcome in results.values() if outcome.passed)
    print(f"  Graded {student_name}: {passed}/{len(results)} passed", file=sys.stderr)


def run_grading_pipeline(
    config_path: Path,
    workers: int | None = None,
    verbose: bool = False,
) -> ClassResult:
    """
    Run the complete grading pipeline.

    Args:
        config_path: Path to the YAML or TOML configuration.
        workers: Maximum number of programs running at once.
        verbose: Print per-student progress.

    Returns:
        ClassResult for every submission in the target directory.

    Raises:
        ConfigError: If the configuration is invalid.
        FixtureLoadError: If the test fixtures cannot be loaded.
    """
    config = load_config(config_path)
    print(f"Loaded configuration '{config.name}' from {config_path}", file=sys.stderr)

    orchestrator = SubmissionOrchestrator(config, max_workers=workers)
    results = orchestrator.run(on_student_done=print_student_summary if verbose else None)

    if not results.students:
        print(f"No submissions found in {config.target_dir}!", file=sys.stderr)
    else:
        print(
            f"Graded {len(results.students)} submissions against {results.total_cases} cases",
            file=sys.stderr,
        )
    return results


def main(argv: list[str] | None = None) -> int:
    """
    Main CLI entrypoint.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    arguments = docopt(__doc__, argv=argv, version=__version__)
    config_path = Path(arguments["<config_file>"])
    output_method = arguments["<output_method>"] or DEFAULT_OUTPUT_MODE
    verbose = arguments["--verbose"]

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    workers = None
    if arguments["--workers"] is not None:
        try:
            workers = int(arguments["--workers"])
        except ValueError:
            workers = 0
        if workers < 1:
            print("Error: --workers must be a positive integer", file=sys.stderr)
            return 1

    writer = get_output_mode(output_method, sys.stdout)
    if writer is None:
        known = ", ".join(OUTPUT_MODES)
        print(f"Error: Unknown output method '{output_method}' (expected one of: {known})", file=sys.stderr)
        return 1

    try:
        results = run_grading_pipeline(config_path, workers=workers, verbose=verbose)
    except GraderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nGrading interrupted by user.", file=sys.stderr)
        return 1

    writer.output_class_results(results)
    return 0


if __name__ == "__main__":
    sys.exit(main())
