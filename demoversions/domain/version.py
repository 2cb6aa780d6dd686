"""
Version domain objects.

All objects here are immutable snapshots built from the tag repository and
serialize to plain JSON-compatible dicts via ``to_dict()``, so they can be
handed across a process or CI step boundary.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .semver import SemverInfo, parse


@dataclass(frozen=True)
class VersionTag:
    """
    A git tag that parses as semver.

    Attributes:
        tag: Raw tag text (may carry a ``v`` prefix)
        commit: Full hash of the commit the tag resolves to
        date: Commit timestamp
        semver: Parsed version components
    """
    tag: str
    commit: str
    date: datetime
    semver: SemverInfo

    @classmethod
    def from_tag(cls, tag: str, commit: str, date: datetime) -> Optional['VersionTag']:
        """Build a VersionTag, or None if ``tag`` is not a semver tag."""
        info = parse(tag)
        if info is None:
            return None
        return cls(tag=tag, commit=commit, date=date, semver=info)

    @property
    def is_prerelease(self) -> bool:
        return self.semver.is_prerelease

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tag': self.tag,
            'commit': self.commit,
            'date': self.date.isoformat(),
            'semver': self.semver.to_dict(),
            'is_prerelease': self.is_prerelease,
        }

    def __str__(self) -> str:
        return self.tag


@dataclass(frozen=True)
class DistTag:
    """
    A movable named ref such as ``latest`` or ``next``.

    ``semver_tag`` is None when the ref exists but no semver tag shares its
    commit. A ref that does not exist at all is represented by the absence
    of a DistTag, never by this object.
    """
    name: str
    commit: str
    semver_tag: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'commit': self.commit,
            'semver_tag': self.semver_tag,
        }


@dataclass(frozen=True)
class DevelopmentCycle:
    """
    Latest stable release plus every prerelease newer than it.

    ``prereleases`` is sorted newest first and ``all`` is
    ``(stable, *prereleases)``. Without a stable release, ``stable`` is None
    and both tuples hold every known version.
    """
    stable: Optional[VersionTag] = None
    prereleases: Tuple[VersionTag, ...] = ()
    all: Tuple[VersionTag, ...] = ()

    @property
    def tags(self) -> Tuple[str, ...]:
        return tuple(v.tag for v in self.all)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'stable': self.stable.to_dict() if self.stable else None,
            'prereleases': [v.to_dict() for v in self.prereleases],
            'all': [v.to_dict() for v in self.all],
        }


@dataclass(frozen=True)
class VersionCatalog:
    """All versions of a repository, split by kind, with dist-tag mapping."""
    dist_tags: Dict[str, VersionTag] = field(default_factory=dict)
    versions: Tuple[VersionTag, ...] = ()
    stable: Tuple[VersionTag, ...] = ()
    prerelease: Tuple[VersionTag, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'dist_tags': {name: v.to_dict() for name, v in self.dist_tags.items()},
            'versions': [v.to_dict() for v in self.versions],
            'stable': [v.to_dict() for v in self.stable],
            'prerelease': [v.to_dict() for v in self.prerelease],
        }


@dataclass(frozen=True)
class BuildableVersions:
    """Versions of the current cycle that demos should be built for."""
    versions: Tuple[VersionTag, ...] = ()
    stable: Optional[VersionTag] = None

    @property
    def has_versions(self) -> bool:
        return len(self.versions) > 0

    def to_matrix(self) -> List[str]:
        """Version tags as a JSON-ready list for a GitHub Actions matrix."""
        return [v.tag for v in self.versions]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'versions': [v.tag for v in self.versions],
            'stable': self.stable.tag if self.stable else None,
            'has_versions': self.has_versions,
        }
