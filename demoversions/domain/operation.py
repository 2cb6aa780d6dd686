"""
Result objects for garbage-collection runs.

A run produces one RemovalDetail per directory it considered for deletion,
collected into a GarbageCollectionSummary.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .deployment import RemovalPlan


class OperationStatus(Enum):
    """Status of an individual removal."""
    SUCCESS = "success"
    FAILED = "failed"
    DRY_RUN = "dry_run"


@dataclass
class RemovalDetail:
    """What happened to a single deployment directory."""
    directory: str
    status: OperationStatus
    action: str  # "removed", "would_remove", "remove_failed"
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'directory': self.directory,
            'status': self.status.value,
            'action': self.action,
        }
        if self.error:
            result['error'] = self.error
        return result


@dataclass
class GarbageCollectionSummary:
    """Summary of a garbage-collection run over a pages directory."""
    pages_dir: str
    plan: RemovalPlan
    dry_run: bool = False
    details: List[RemovalDetail] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def removed(self) -> List[str]:
        return [d.directory for d in self.details if d.status == OperationStatus.SUCCESS]

    @property
    def failed(self) -> List[str]:
        return [d.directory for d in self.details if d.status == OperationStatus.FAILED]

    @property
    def success(self) -> bool:
        return not self.failed

    def add_detail(self, detail: RemovalDetail) -> None:
        self.details.append(detail)
        if detail.status == OperationStatus.FAILED and detail.error:
            self.errors.append(f"{detail.directory}: {detail.error}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': 'summary',
            'operation': 'garbage_collect',
            'pages_dir': self.pages_dir,
            'dry_run': self.dry_run,
            'plan': self.plan.to_dict(),
            'removed': self.removed,
            'failed': self.failed,
            'errors': self.errors,
        }
