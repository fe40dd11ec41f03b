"""Whitelabel data models.

This module exports the entities produced by build runs:
- BuildReport: Aggregated results of a run
- BuildOutput: One rendered file
- BuildError: Failure rendering one customer
- BuildStatus: Overall outcome
"""

from whitelabel.models.build import BuildError, BuildOutput, BuildReport, BuildStatus

__all__ = [
    "BuildReport",
    "BuildOutput",
    "BuildError",
    "BuildStatus",
]
