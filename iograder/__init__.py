"""
iograder: Automated input/output grading of student programs.

Compiles each student submission for a configured language backend, runs it
against a directory of input/expected-output fixtures under a per-case
timeout, and collects the outcomes into a class-wide report.
"""

__version__ = "0.1.0"
