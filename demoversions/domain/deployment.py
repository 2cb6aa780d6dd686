"""
Deployment path and retention policy.

Demos live in a pages branch with one directory per deployment:

    gh-pages/
        latest/          <- newest stable release
        2.0.0-beta.1/    <- one directory per prerelease
        pr-123/          <- previews, never touched by the retention policy
        index.html

Stable releases are served from ``/latest/`` only; each prerelease gets its
own ``/<version>/`` segment.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from .cycle import resolve_past_cycles
from .semver import is_semver_tag
from .version import VersionTag

LATEST_SEGMENT = 'latest'


def get_deployment_path(version: str, is_stable: bool, base_path: str = '') -> str:
    """
    Map a version to the path segment it is deployed under.

    Args:
        version: Version tag
        is_stable: Whether the version is a stable release
        base_path: Optional site prefix, e.g. ``/polen``

    Returns:
        ``{base}/latest/`` for stable releases, ``{base}/{version}/`` otherwise
    """
    prefix = base_path.rstrip('/')
    if is_stable:
        return f"{prefix}/{LATEST_SEGMENT}/"
    return f"{prefix}/{version}/"


def is_semver_directory(name: str) -> bool:
    """A deployment directory whose name is itself a bare semver tag."""
    return is_semver_tag(name)


@dataclass(frozen=True)
class RemovalPlan:
    """Directories to delete and to keep, in input order."""
    remove: List[str] = field(default_factory=list)
    keep: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'remove': list(self.remove), 'keep': list(self.keep)}


def plan_removal(
    existing_deployments: Iterable[str],
    versions: Iterable[VersionTag],
    protected: Iterable[str] = ()
) -> RemovalPlan:
    """
    Decide which deployment directories may be deleted.

    Only directories named after a prerelease from a past cycle are removed.
    Stable releases, current-cycle prereleases, non-version names such as
    ``latest`` or ``pr-123``, and anything in ``protected`` are kept.

    Args:
        existing_deployments: Directory names found in the pages checkout
        versions: All version tags of the repository
        protected: Tags that must be kept regardless of cycle

    Returns:
        RemovalPlan. Pure; performs no I/O.
    """
    eligible = {v.tag for v in resolve_past_cycles(versions)}
    eligible.difference_update(protected)

    remove, keep = [], []
    for name in existing_deployments:
        if is_semver_directory(name) and name in eligible:
            remove.append(name)
        else:
            keep.append(name)

    return RemovalPlan(remove=remove, keep=keep)
