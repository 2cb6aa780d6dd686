"""
Garbage collection of stale demo deployments.

Lists the deployment directories of a pages checkout, asks the retention
policy which ones belong to superseded prereleases, and deletes them (or
only reports them in dry-run mode). Committing and pushing the deletion is
left to the workflow that invokes this.
"""

import json
import logging
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import load_config
from ..domain.deployment import plan_removal
from ..domain.operation import (
    GarbageCollectionSummary,
    OperationStatus,
    RemovalDetail,
)
from ..exit_codes import CommandError
from .version_service import VersionService

logger = logging.getLogger(__name__)


def list_deployments(pages_dir: Path) -> List[str]:
    """Directory names directly under ``pages_dir``, sorted, hidden ones skipped."""
    return sorted(
        entry.name for entry in pages_dir.iterdir()
        if entry.is_dir() and not entry.name.startswith('.')
    )


class GarbageCollectionService:
    """
    Service for removing deployments of past development cycles.

    Example:
        service = GarbageCollectionService(VersionService("."))
        summary = service.run("gh-pages", dry_run=True)
        print(summary.plan.remove)
    """

    def __init__(
        self,
        versions: VersionService,
        config: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize GarbageCollectionService.

        Args:
            versions: VersionService for the source repository
            config: Configuration dict (defaults to the version service's)
        """
        self.versions = versions
        self.config = config or versions.config or load_config()
        self.last_result: Optional[GarbageCollectionSummary] = None

    def run(self, pages_dir: Optional[str] = None, dry_run: bool = False) -> GarbageCollectionSummary:
        """
        Plan and apply removal of stale deployments.

        Args:
            pages_dir: Pages checkout (default: ``deployment.pages_dir``)
            dry_run: Report what would be removed without touching disk

        Returns:
            GarbageCollectionSummary

        Raises:
            CommandError: if the pages directory does not exist
            RepositoryError: if the tag repository cannot be read
        """
        pages = Path(pages_dir or self.config["deployment"]["pages_dir"])
        if not pages.is_dir():
            raise CommandError(f"Pages directory not found: {pages}")

        existing = list_deployments(pages)
        versions = self.versions.list_version_tags()
        protected = []
        if self.config["gc"]["retain_dist_tag_versions"]:
            protected = self.versions.protected_tags()

        plan = plan_removal(existing, versions, protected)
        logger.info(f"Deployments: {len(existing)} found, {len(plan.remove)} to remove")
        if protected:
            logger.info(f"Dist-tag versions kept: {', '.join(protected)}")

        summary = GarbageCollectionSummary(pages_dir=str(pages), plan=plan, dry_run=dry_run)
        self.last_result = summary

        for name in plan.remove:
            target = pages / name
            if dry_run:
                logger.info(f"Would remove {target}")
                summary.add_detail(RemovalDetail(name, OperationStatus.DRY_RUN, "would_remove"))
                continue

            try:
                shutil.rmtree(target)
            except OSError as e:
                logger.error(f"Failed to remove {target}: {e}")
                summary.add_detail(RemovalDetail(name, OperationStatus.FAILED, "remove_failed", error=str(e)))
            else:
                logger.info(f"Removed {target}")
                summary.add_detail(RemovalDetail(name, OperationStatus.SUCCESS, "removed"))

        return summary


def github_outputs(summary: GarbageCollectionSummary) -> Dict[str, str]:
    """Step outputs for a garbage-collection run."""
    removed = summary.plan.remove if summary.dry_run else summary.removed
    return {
        'removed': 'true' if removed else 'false',
        'removedDirs': ', '.join(removed),
        'toRemove': json.dumps({'trunk': summary.plan.remove}),
    }


def render_step_summary(summary: GarbageCollectionSummary) -> str:
    """Markdown summary of a garbage-collection run."""
    text = '# Garbage Collection Summary\n\n'

    if summary.dry_run:
        if not summary.plan.remove:
            return text + '🟢 **No deployments need removal**\n'
        text += '🔍 **Dry run: deployments that would be removed**\n\n'
        text += '\n'.join(f'- {name}' for name in summary.plan.remove) + '\n'
        return text

    if not summary.removed and not summary.failed:
        text += '🟢 **No deployments needed removal**\n\n'
        text += 'All deployments are still relevant and were kept.\n'
        return text

    if summary.removed:
        text += '✅ **Successfully removed old deployments**\n\n'
        text += '## Removed Deployments\n'
        text += '\n'.join(f'- {name}' for name in summary.removed) + '\n'
    if summary.failed:
        text += '\n## Failed Removals\n'
        text += '\n'.join(f'- {error}' for error in summary.errors) + '\n'
    return text

