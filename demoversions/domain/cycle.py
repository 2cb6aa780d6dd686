"""
Development cycle resolution.

A development cycle is the latest stable release plus every prerelease
leading to the next one. Prereleases that fall behind the latest stable
belong to past cycles and are candidates for garbage collection. Stable
releases are never part of a past cycle.

Everything here is pure: it works on VersionTag lists already read from
the repository.
"""

from functools import cmp_to_key
from typing import Iterable, List, Mapping, Optional, Sequence

from ..exit_codes import InvalidVersionError
from .semver import compare, parse, sort_versions
from .version import DevelopmentCycle, DistTag, VersionCatalog, VersionTag


def _version_order(a: VersionTag, b: VersionTag) -> int:
    result = compare(a.semver, b.semver)
    if result == 0 and a.tag != b.tag:
        result = -1 if a.tag < b.tag else 1
    return result


def sort_descending(versions: Iterable[VersionTag]) -> List[VersionTag]:
    """Sort versions newest first, deterministically."""
    return sorted(versions, key=cmp_to_key(_version_order), reverse=True)


def latest_stable(versions: Iterable[VersionTag]) -> Optional[VersionTag]:
    return next((v for v in sort_descending(versions) if not v.is_prerelease), None)


def latest_prerelease(versions: Iterable[VersionTag]) -> Optional[VersionTag]:
    return next((v for v in sort_descending(versions) if v.is_prerelease), None)


def resolve_current_cycle(versions: Iterable[VersionTag]) -> DevelopmentCycle:
    """
    Compute the current development cycle.

    Args:
        versions: All known version tags, in any order

    Returns:
        DevelopmentCycle. With no stable release every version is part of
        the cycle; otherwise only the stable and strictly newer prereleases.
    """
    ordered = sort_descending(versions)
    stable = next((v for v in ordered if not v.is_prerelease), None)

    if stable is None:
        return DevelopmentCycle(stable=None, prereleases=tuple(ordered), all=tuple(ordered))

    prereleases = tuple(
        v for v in ordered
        if v.is_prerelease and compare(v.semver, stable.semver) > 0
    )
    return DevelopmentCycle(
        stable=stable,
        prereleases=prereleases,
        all=(stable,) + prereleases,
    )


def resolve_past_cycles(versions: Iterable[VersionTag]) -> List[VersionTag]:
    """Prereleases outside the current cycle, newest first."""
    ordered = sort_descending(versions)
    current = set(resolve_current_cycle(ordered).tags)
    return [v for v in ordered if v.is_prerelease and v.tag not in current]


def versions_since(
    versions: Iterable[VersionTag],
    since: str,
    skip: Iterable[str] = ()
) -> List[VersionTag]:
    """
    Versions ordering at or above ``since``, newest first.

    Raises:
        InvalidVersionError: if ``since`` is not a semver string
    """
    floor = parse(since)
    if floor is None:
        raise InvalidVersionError(since)

    skipped = set(skip)
    return [
        v for v in sort_descending(versions)
        if v.tag not in skipped and compare(v.semver, floor) >= 0
    ]


def deployment_history(
    versions: Iterable[VersionTag],
    minimum: Optional[str] = None
) -> List[VersionTag]:
    """Versions that should have demos: everything at or above ``minimum``."""
    ordered = sort_descending(versions)
    floor = parse(minimum) if minimum else None
    if floor is None:
        return ordered
    return [v for v in ordered if compare(v.semver, floor) >= 0]


def select_semver_tag(tags: Sequence[str]) -> Optional[str]:
    """
    Pick one semver tag out of several pointing at the same commit.

    The highest version wins; ties fall back to the raw text ordering.
    """
    candidates = [t for t in tags if parse(t) is not None]
    if not candidates:
        return None
    return sort_versions(candidates, descending=True)[0]


def build_catalog(
    versions: Iterable[VersionTag],
    dist_tags: Iterable[DistTag] = ()
) -> VersionCatalog:
    """Group versions by kind and map dist-tag names onto versions."""
    ordered = sort_descending(versions)
    by_tag: Mapping[str, VersionTag] = {v.tag: v for v in ordered}

    mapped = {}
    for dist_tag in dist_tags:
        if dist_tag.semver_tag and dist_tag.semver_tag in by_tag:
            mapped[dist_tag.name] = by_tag[dist_tag.semver_tag]

    return VersionCatalog(
        dist_tags=mapped,
        versions=tuple(ordered),
        stable=tuple(v for v in ordered if not v.is_prerelease),
        prerelease=tuple(v for v in ordered if v.is_prerelease),
    )
