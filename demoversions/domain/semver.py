"""
Semantic version parsing and ordering for git tags.

Tags look like ``1.2.3``, ``v1.2.3``, ``2.0.0-beta.1`` or ``1.0.0+build.5``.
Anything else is "not a version": ``parse`` returns None rather than raising,
so tag listings can simply filter on it.

Ordering follows semver precedence for major.minor.patch, and a release
without a prerelease component sorts above one with a prerelease component.
Two prerelease components are compared as plain strings. This is simpler
than full semver identifier comparison (``beta.10`` sorts below ``beta.2``).
"""

import re
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Iterable, List, Optional

SEMVER_PATTERN = re.compile(
    r'v?(\d+)\.(\d+)\.(\d+)(?:-([0-9A-Za-z.-]+))?(?:\+([0-9A-Za-z.-]+))?',
    re.ASCII
)


@dataclass(frozen=True)
class SemverInfo:
    """
    Parsed components of a semver tag.

    ``raw`` keeps the tag text as written (including any ``v`` prefix) but takes
    no part in equality, so ``parse("v1.2.3") == parse("1.2.3")``.
    """
    major: int
    minor: int
    patch: int
    prerelease: Optional[str] = None
    build: Optional[str] = None
    raw: str = field(default='', compare=False)

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def core(self) -> str:
        """major.minor.patch without prerelease or build."""
        return f"{self.major}.{self.minor}.{self.patch}"

    def to_dict(self) -> dict:
        return {
            'major': self.major,
            'minor': self.minor,
            'patch': self.patch,
            'prerelease': self.prerelease,
            'build': self.build,
        }

    def __str__(self) -> str:
        text = self.core
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.build:
            text += f"+{self.build}"
        return text


def parse(tag: str) -> Optional[SemverInfo]:
    """
    Parse a tag into SemverInfo.

    Args:
        tag: Raw tag text, optionally prefixed with ``v``

    Returns:
        SemverInfo, or None if the tag is not a semver tag
    """
    if not isinstance(tag, str):
        return None

    match = SEMVER_PATTERN.fullmatch(tag)
    if not match:
        return None

    major, minor, patch, prerelease, build = match.groups()
    return SemverInfo(
        major=int(major),
        minor=int(minor),
        patch=int(patch),
        prerelease=prerelease,
        build=build,
        raw=tag,
    )


def is_semver_tag(tag: str) -> bool:
    """Check whether a tag parses as semver."""
    return parse(tag) is not None


def is_prerelease(tag: str) -> bool:
    """True if the tag parses and carries a prerelease component."""
    info = parse(tag)
    return info is not None and info.is_prerelease


def is_stable_version(tag: str) -> bool:
    """True if the tag parses and has no prerelease component."""
    info = parse(tag)
    return info is not None and not info.is_prerelease


def compare(a: SemverInfo, b: SemverInfo) -> int:
    """
    Compare two parsed versions.

    Returns:
        -1 if a < b, 0 if equal in precedence, 1 if a > b.
        Build metadata never affects the result.
    """
    left = (a.major, a.minor, a.patch)
    right = (b.major, b.minor, b.patch)
    if left != right:
        return -1 if left < right else 1

    if a.prerelease and not b.prerelease:
        return -1
    if b.prerelease and not a.prerelease:
        return 1
    if a.prerelease and b.prerelease and a.prerelease != b.prerelease:
        return -1 if a.prerelease < b.prerelease else 1

    return 0


def compare_tags(a: str, b: str) -> int:
    """
    Compare two tag strings.

    Semver tags are ordered with ``compare`` and always sort above
    non-semver strings; two non-semver strings compare as plain text.
    """
    left, right = parse(a), parse(b)
    if left and right:
        return compare(left, right)
    if left:
        return 1
    if right:
        return -1
    if a == b:
        return 0
    return -1 if a < b else 1


def _tag_order(a: str, b: str) -> int:
    """compare_tags with the raw text as a final tie-break."""
    result = compare_tags(a, b)
    if result == 0 and a != b:
        result = -1 if a < b else 1
    return result


def sort_versions(tags: Iterable[str], descending: bool = True) -> List[str]:
    """
    Sort tag strings by semver precedence.

    Ties in precedence (``v1.0.0`` and ``1.0.0``, differing build metadata)
    are broken on the raw text so the result never depends on input order.
    """
    return sorted(tags, key=cmp_to_key(_tag_order), reverse=descending)


def filter_versions(tags: Iterable[str], kind: str = 'all') -> List[str]:
    """
    Filter tags by kind.

    Args:
        tags: Tag strings
        kind: 'stable', 'prerelease' or 'all'
    """
    if kind == 'stable':
        return [t for t in tags if is_stable_version(t)]
    if kind == 'prerelease':
        return [t for t in tags if is_prerelease(t)]
    if kind == 'all':
        return [t for t in tags if is_semver_tag(t)]
    raise ValueError(f"Unknown version kind: {kind!r}")


def versions_in_range(tags: Iterable[str], start: str, end: Optional[str] = None) -> List[str]:
    """Return semver tags between start and end (both inclusive)."""
    lower = parse(start)
    upper = parse(end) if end else None
    if lower is None:
        raise ValueError(f"Invalid version: {start}")
    if end and upper is None:
        raise ValueError(f"Invalid version: {end}")

    result = []
    for tag in tags:
        info = parse(tag)
        if info is None:
            continue
        if compare(info, lower) < 0:
            continue
        if upper and compare(info, upper) > 0:
            continue
        result.append(tag)
    return result
