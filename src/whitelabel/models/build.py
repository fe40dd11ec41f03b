"""Build result entities.

This module contains entities produced by a white-label build run:
- BuildStatus: Overall outcome of a run
- BuildError: Failure rendering one customer
- BuildOutput: One rendered file
- BuildReport: Aggregated results of a run
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any


class BuildStatus(Enum):
    """Status of a build run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    PARTIAL = "partial"  # some customers failed
    FAILED = "failed"


@dataclass
class BuildError:
    """Failure rendering a single customer.

    Attributes:
        customer: Customer id from the manifest
        kind: Error class name (ParseError, MissingVariableError, ...)
        message: Error description
        name: Offending template/context name, when known
        line: Template line of the offending directive, when known
    """

    customer: str
    kind: str
    message: str
    name: str | None = None
    line: int | None = None

    @classmethod
    def from_exception(cls, customer: str, exc: Exception) -> "BuildError":
        """Build an error entry from a raised exception."""
        return cls(
            customer=customer,
            kind=type(exc).__name__,
            message=str(exc),
            name=getattr(exc, "name", None),
            line=getattr(exc, "line", None),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "customer": self.customer,
            "kind": self.kind,
            "message": self.message,
            "name": self.name,
            "line": self.line,
        }


@dataclass
class BuildOutput:
    """A file rendered for one customer."""

    customer: str
    path: Path
    size: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"customer": self.customer, "path": str(self.path), "size": self.size}


@dataclass
class BuildReport:
    """Aggregated results of a build run.

    Attributes:
        output_dir: Root directory outputs were written to
        timestamp: Run start timestamp (UTC)
        status: Current build status
        outputs: Files written, in manifest order
        errors: Per-customer failures
        skipped: Customers not attempted (after a fail-fast stop)
    """

    output_dir: Path
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    status: BuildStatus = BuildStatus.PENDING
    outputs: list[BuildOutput] = field(default_factory=list)
    errors: list[BuildError] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    def add_error(self, error: BuildError) -> None:
        """Add a build error."""
        self.errors.append(error)

    def has_errors(self) -> bool:
        """Check if any errors were recorded."""
        return len(self.errors) > 0

    def finish(self) -> None:
        """Set the final status from the collected outputs and errors."""
        if not self.errors:
            self.status = BuildStatus.COMPLETED
        elif self.outputs:
            self.status = BuildStatus.PARTIAL
        else:
            self.status = BuildStatus.FAILED

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "output_dir": str(self.output_dir),
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.value,
            "outputs": [o.to_dict() for o in self.outputs],
            "errors": [e.to_dict() for e in self.errors],
            "skipped": self.skipped,
        }
