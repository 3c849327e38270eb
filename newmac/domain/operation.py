"""
Step result domain objects for newmac.

Provides standardized result types for the bootstrap steps so that a run
can be reported as JSONL or as a table.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional


class StepStatus(Enum):
    """Status of an individual step."""
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"
    DRY_RUN = "dry_run"


@dataclass
class StepResult:
    """
    Details of a single bootstrap step.

    `action` says what happened, e.g. "installed", "already_present",
    "cloned", "linked", "capability_missing".
    """
    step: str
    status: StepStatus
    action: str
    message: Optional[str] = None
    error: Optional[str] = None
    fatal: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            'step': self.step,
            'status': self.status.value,
            'action': self.action,
        }
        if self.message:
            result['message'] = self.message
        if self.error:
            result['error'] = self.error
            result['fatal'] = self.fatal
        if self.metadata:
            result.update(self.metadata)
        return result


@dataclass
class RunSummary:
    """
    Summary of a bootstrap run.

    Collects statistics and details from every step that was attempted.
    """
    profile: str
    total: int = 0
    successful: int = 0
    skipped: int = 0
    failed: int = 0
    dry_run: bool = False
    details: List[StepResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if no step failed fatally."""
        return not any(d.fatal for d in self.details if d.status == StepStatus.FAILED)

    def add_detail(self, detail: StepResult) -> None:
        """Add a step result and update counts."""
        self.details.append(detail)
        self.total += 1

        if detail.status == StepStatus.SUCCESS:
            self.successful += 1
        elif detail.status == StepStatus.SKIPPED:
            self.skipped += 1
        elif detail.status == StepStatus.FAILED:
            self.failed += 1
            if detail.error:
                self.errors.append(f"{detail.step}: {detail.error}")
        elif detail.status == StepStatus.DRY_RUN:
            self.successful += 1  # Count dry-run as successful

    def step_names(self) -> List[str]:
        return [d.step for d in self.details]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'type': 'summary',
            'profile': self.profile,
            'total': self.total,
            'successful': self.successful,
            'skipped': self.skipped,
            'failed': self.failed,
            'dry_run': self.dry_run,
            'errors': self.errors,
        }
