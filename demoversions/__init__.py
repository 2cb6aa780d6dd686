"""
demoversions - Version history and deployment tooling for demo sites.

Reads semver tags and dist-tag refs from a git repository and decides
which demo versions to build, where to deploy them, and which old
deployments to remove.

Quick Start:
    import demoversions

    service = demoversions.VersionService("/path/to/repo")

    # Latest stable plus newer prereleases
    cycle = service.current_cycle()
    print(cycle.stable, [v.tag for v in cycle.prereleases])

    # Where a version is deployed
    demoversions.get_deployment_path("2.0.0-beta.1", is_stable=False)   # "/2.0.0-beta.1/"

    # Which deployment directories are stale
    plan = demoversions.plan_removal(["latest", "1.0.0-rc.1"], service.list_version_tags())
    print(plan.remove)

Domain Objects:
    VersionTag - A semver git tag with commit and date
    DistTag - A movable ref such as latest or next
    DevelopmentCycle - Latest stable plus newer prereleases
    RemovalPlan - Deployment directories to remove and keep

Services:
    VersionService - Tag listing, dist-tags, cycles (one repository)
    GarbageCollectionService - Removal of stale deployments
"""

__version__ = "0.3.0"

# Domain objects and policies
from .domain import (
    SemverInfo,
    VersionTag,
    DistTag,
    DevelopmentCycle,
    VersionCatalog,
    BuildableVersions,
    RemovalPlan,
    parse,
    is_semver_tag,
    is_prerelease,
    compare,
    resolve_current_cycle,
    resolve_past_cycles,
    get_deployment_path,
    plan_removal,
)

# Services
from .services import VersionService, GarbageCollectionService

# Infrastructure
from .infra import GitClient, GitCommandError, NpmRegistryClient

# Configuration
from .config import load_config, save_config

__all__ = [
    "__version__",
    # Domain
    "SemverInfo",
    "VersionTag",
    "DistTag",
    "DevelopmentCycle",
    "VersionCatalog",
    "BuildableVersions",
    "RemovalPlan",
    "parse",
    "is_semver_tag",
    "is_prerelease",
    "compare",
    "resolve_current_cycle",
    "resolve_past_cycles",
    "get_deployment_path",
    "plan_removal",
    # Services
    "VersionService",
    "GarbageCollectionService",
    # Infrastructure
    "GitClient",
    "GitCommandError",
    "NpmRegistryClient",
    # Configuration
    "load_config",
    "save_config",
]
