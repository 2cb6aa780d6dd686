"""
Service layer for demoversions.

Contains logic that orchestrates domain policies and infrastructure:
- VersionService: Tag listing, dist-tags, development cycles
- GarbageCollectionService: Removal of stale deployments

Services are the primary API for commands to use.
"""

from .version_service import VersionService
from .gc_service import GarbageCollectionService

__all__ = [
    'VersionService',
    'GarbageCollectionService',
]
