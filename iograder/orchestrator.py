"""
Orchestration of a full grading run.

Loads the fixtures, finds every student submission, prepares each one with
its backend, and runs every test case against it on a bounded pool of
worker threads. Each worker starts at most one child process at a time, so
the pool size also bounds the number of concurrently running programs.
"""

import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path

from .backends import RunnerConfig
from .config import DEFAULT_MAX_WORKERS
from .fixtures import FixtureRepository
from .models import ClassResult, Outcome, StudentResult, Submission, TestCase
from .process_runner import ProcessRunner

logger = logging.getLogger(__name__)

# Called with (student name, finished results) once a student is fully graded
ProgressCallback = Callable[[str, StudentResult], None]


def find_submissions(target_dir: Path) -> list[Submission]:
    """
    Find all student submission directories.

    Every immediate subdirectory of ``target_dir`` is one submission; other
    entries, and entries whose type cannot be determined, are skipped.

    Args:
        target_dir: Path to directory containing student folders.

    Returns:
        List of Submission objects, sorted by student name.
    """
    try:
        entries = sorted(target_dir.iterdir())
    except OSError as e:
        logger.warning("Could not list target directory %s: %s", target_dir, e)
        return []

    submissions: list[Submission] = []
    for item in entries:
        try:
            if not item.is_dir():
                continue
        except OSError:
            continue
        submissions.append(Submission(student_name=item.name, path=item))

    return submissions


class SubmissionOrchestrator:
    """
    Grades every submission in the configured target directory.
    """

    def __init__(
        self,
        config: RunnerConfig,
        runner: ProcessRunner | None = None,
        max_workers: int | None = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            config: Backend configuration for this run.
            runner: Runner used for each test case. Defaults to ProcessRunner().
            max_workers: Maximum number of setups and test cases executing at
                once. Defaults to DEFAULT_MAX_WORKERS.

        Raises:
            ValueError: If max_workers is less than 1.
        """
        self.config = config
        self.runner = runner or ProcessRunner()
        self.max_workers = DEFAULT_MAX_WORKERS if max_workers is None else max_workers
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")

    def run(self, on_student_done: ProgressCallback | None = None) -> ClassResult:
        """
        Run the whole class against every test case.

        Args:
            on_student_done: Optional callback invoked from the calling thread
                each time a student's results are complete.

        Returns:
            ClassResult with one entry per submission and, for each of them,
            one outcome per test case.

        Raises:
            FixtureLoadError: If the fixtures cannot be loaded. No submission
                is run in that case.
        """
        cases = FixtureRepository(self.config.fixture_dir).load()
        submissions = find_submissions(self.config.target_dir)
        logger.info("Grading %d submissions against %d cases", len(submissions), len(cases))

        students: dict[str, StudentResult] = {s.student_name: {} for s in submissions}

        def finish(student_name: str) -> None:
            if on_student_done is None:
                return
            try:
                on_student_done(student_name, students[student_name])
            except Exception as e:
                logger.warning("Progress callback failed for %s: %s", student_name, e)

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            setup_futures: dict[Future, Submission] = {
                pool.submit(self._prepare, submission): submission for submission in submissions
            }
            case_futures: dict[Future, tuple[str, str]] = {}
            remaining: dict[str, int] = {}

            for future in as_completed(setup_futures):
                submission = setup_futures[future]
                blocking_outcome = future.result()
                if blocking_outcome is None and cases:
                    remaining[submission.student_name] = len(cases)
                    for case in cases.values():
                        case_future = pool.submit(self._run_case, submission, case)
                        case_futures[case_future] = (submission.student_name, case.name)
                    continue

                for name in cases:
                    students[submission.student_name][name] = blocking_outcome
                finish(submission.student_name)

            for future in as_completed(case_futures):
                student_name, case_name = case_futures[future]
                students[student_name][case_name] = future.result()
                remaining[student_name] -= 1
                if remaining[student_name] == 0:
                    finish(student_name)

        return ClassResult(
            name=self.config.name,
            case_names=sorted(cases),
            students={
                name: dict(sorted(results.items())) for name, results in sorted(students.items())
            },
        )

    def _prepare(self, submission: Submission) -> Outcome | None:
        """
        Run the backend setup for one submission.

        Returns:
            None if the submission can be run, otherwise the outcome to record
            for every one of its test cases.
        """
        try:
            if self.config.perform_setup(submission.path):
                return None
        except Exception as e:
            logger.warning("Setup raised for %s: %s", submission.student_name, e)
            return Outcome.run_error(f"Setup error: {e}")

        logger.debug("Setup failed for %s", submission.student_name)
        return Outcome.compile_error()

    def _run_case(self, submission: Submission, case: TestCase) -> Outcome:
        try:
            command, args = self.config.build_command(submission.path)
            env = self.config.environment(submission.path)
            return self.runner.run(
                command,
                args,
                env,
                case.input,
                case.expected_output,
                self.config.timeout,
            )
        except Exception as e:
            logger.warning(
                "Error running %s on %s: %s", submission.student_name, case.name, e
            )
            return Outcome.run_error(f"Execution error: {e}")
