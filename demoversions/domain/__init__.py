"""
Domain layer for demoversions.

Contains pure domain objects and policies with no I/O:
- SemverInfo and the semver parser/comparator
- VersionTag, DistTag, DevelopmentCycle, VersionCatalog
- Cycle resolution, deployment paths and the retention policy

These objects are immutable and serialize to plain dicts for JSON output.
"""

from .semver import SemverInfo, parse, is_semver_tag, is_prerelease, compare
from .version import VersionTag, DistTag, DevelopmentCycle, VersionCatalog, BuildableVersions
from .cycle import resolve_current_cycle, resolve_past_cycles
from .deployment import RemovalPlan, get_deployment_path, plan_removal

__all__ = [
    'SemverInfo',
    'parse',
    'is_semver_tag',
    'is_prerelease',
    'compare',
    'VersionTag',
    'DistTag',
    'DevelopmentCycle',
    'VersionCatalog',
    'BuildableVersions',
    'resolve_current_cycle',
    'resolve_past_cycles',
    'RemovalPlan',
    'get_deployment_path',
    'plan_removal',
]
