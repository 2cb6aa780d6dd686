"""
Version history service for demoversions.

Reads semver tags and dist-tag refs from a git repository and answers the
questions the demo build/deploy steps ask: which versions exist, what the
current development cycle is, which prereleases are stale, and what each
dist-tag points at.

One service instance serves one repository. Tag listings and dist-tag
resolutions are memoized on the instance; call clear_cache() after
mutating tags through another channel. create_tag/delete_tag clear it
themselves.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable, List, Optional

from ..config import load_config, meets_minimum_version
from ..domain.cycle import (
    build_catalog,
    deployment_history,
    latest_prerelease,
    latest_stable,
    resolve_current_cycle,
    resolve_past_cycles,
    select_semver_tag,
    sort_descending,
    versions_since,
)
from ..domain.semver import is_semver_tag
from ..domain.version import (
    BuildableVersions,
    DevelopmentCycle,
    DistTag,
    VersionCatalog,
    VersionTag,
)
from ..exit_codes import RepositoryError
from ..infra.git_client import GitClient, GitCommandError

logger = logging.getLogger(__name__)


class VersionService:
    """
    Service for version history of a single repository.

    Example:
        service = VersionService("/path/to/repo")
        cycle = service.current_cycle()
        print(cycle.stable, [v.tag for v in cycle.prereleases])
    """

    def __init__(
        self,
        repo_path: str = ".",
        config: Optional[Dict[str, Any]] = None,
        git_client: Optional[GitClient] = None
    ):
        """
        Initialize VersionService.

        Args:
            repo_path: Path to the git repository
            config: Configuration dict (loads default if None)
            git_client: GitClient instance (creates new if None)
        """
        self.repo_path = str(repo_path)
        self.config = config or load_config()
        self.git = git_client or GitClient(timeout=self.config["git"]["timeout_seconds"])
        self.parallel = self.config["git"]["parallel"]
        self._versions: Optional[List[VersionTag]] = None
        self._dist_tags: Dict[str, Optional[DistTag]] = {}

    def clear_cache(self) -> None:
        """Forget memoized tag listings and dist-tag resolutions."""
        self._versions = None
        self._dist_tags.clear()

    # -- Tag repository reader ------------------------------------------------

    def list_version_tags(self) -> List[VersionTag]:
        """
        List every semver tag with its commit and date, newest first.

        Tags that cannot be resolved to a commit are skipped with a warning.

        Raises:
            RepositoryError: if the repository itself cannot be read
        """
        if self._versions is not None:
            return list(self._versions)

        if not self.git.is_git_repo(self.repo_path):
            logger.error(f"Not a git repository: {self.repo_path}")
            raise RepositoryError("Not a git repository", self.repo_path)

        try:
            names = self.git.list_tag_names(self.repo_path)
        except GitCommandError as e:
            logger.error(f"Failed to list tags in {self.repo_path}: {e}")
            raise RepositoryError(f"Failed to list tags: {e.stderr or e}", self.repo_path) from e

        candidates = [name for name in names if is_semver_tag(name)]
        logger.debug(f"Found {len(names)} tags, {len(candidates)} semver")

        if self.parallel > 1 and len(candidates) > 1:
            with ThreadPoolExecutor(max_workers=self.parallel) as executor:
                resolved = list(executor.map(self._resolve_version, candidates))
        else:
            resolved = [self._resolve_version(name) for name in candidates]

        # Completion order is not meaningful; always re-sort.
        self._versions = sort_descending(v for v in resolved if v is not None)
        return list(self._versions)

    def _resolve_version(self, tag: str) -> Optional[VersionTag]:
        try:
            commit, date = self.git.resolve_tag_commit_and_date(self.repo_path, tag)
        except GitCommandError as e:
            logger.warning(f"Skipping tag {tag}: {e.stderr or e}")
            return None
        return VersionTag.from_tag(tag, commit, date)

    def resolve_dist_tag(self, name: str) -> Optional[DistTag]:
        """
        Resolve a dist-tag ref such as ``latest``.

        Returns:
            None if the ref does not exist. A DistTag with ``semver_tag``
            None if the ref exists but no semver tag shares its commit.
        """
        if name in self._dist_tags:
            return self._dist_tags[name]

        try:
            commit = self.git.resolve_ref_commit(self.repo_path, name)
        except GitCommandError:
            logger.debug(f"No '{name}' ref in {self.repo_path}")
            self._dist_tags[name] = None
            return None

        try:
            tags = self.git.list_tags_at_commit(self.repo_path, commit)
        except GitCommandError as e:
            raise RepositoryError(
                f"Failed to list tags at {commit} for ref '{name}': {e.stderr or e}",
                self.repo_path
            ) from e

        dist_tag = DistTag(name=name, commit=commit, semver_tag=select_semver_tag(tags))
        self._dist_tags[name] = dist_tag
        return dist_tag

    def list_dist_tags(self, names: Optional[Iterable[str]] = None) -> List[DistTag]:
        """Resolve well-known dist-tags, omitting those that do not exist."""
        if names is None:
            names = self.config["deployment"]["dist_tags"]

        dist_tags = []
        for name in names:
            dist_tag = self.resolve_dist_tag(name)
            if dist_tag is not None:
                dist_tags.append(dist_tag)
        return dist_tags

    def version_at_commit(self, commit: str) -> Optional[VersionTag]:
        """The version tagged on ``commit``, or None."""
        try:
            tags = self.git.list_tags_at_commit(self.repo_path, commit)
        except GitCommandError as e:
            raise RepositoryError(f"Failed to list tags at {commit}: {e.stderr or e}", self.repo_path) from e

        selected = select_semver_tag(tags)
        if selected is None:
            return None
        return next((v for v in self.list_version_tags() if v.tag == selected), None)

    # -- Cycle queries ----------------------------------------------------------

    def latest_stable(self) -> Optional[VersionTag]:
        return latest_stable(self.list_version_tags())

    def latest_prerelease(self) -> Optional[VersionTag]:
        return latest_prerelease(self.list_version_tags())

    def current_cycle(self) -> DevelopmentCycle:
        return resolve_current_cycle(self.list_version_tags())

    def past_cycles(self) -> List[VersionTag]:
        return resolve_past_cycles(self.list_version_tags())

    def versions_since(self, since: str, skip: Iterable[str] = ()) -> List[VersionTag]:
        return versions_since(self.list_version_tags(), since, skip)

    def deployment_history(self, minimum: Optional[str] = None) -> List[VersionTag]:
        return deployment_history(self.list_version_tags(), minimum)

    def catalog(self) -> VersionCatalog:
        """All versions plus the dist-tag mapping."""
        return build_catalog(self.list_version_tags(), self.list_dist_tags())

    def buildable_versions(self) -> BuildableVersions:
        """Current-cycle versions that meet ``examples.minimum_version``."""
        cycle = self.current_cycle()
        versions = tuple(v for v in cycle.all if meets_minimum_version(self.config, v.tag))
        return BuildableVersions(versions=versions, stable=cycle.stable)

    def protected_tags(self) -> List[str]:
        """Semver tags currently pointed at by dist-tags."""
        return [d.semver_tag for d in self.list_dist_tags() if d.semver_tag]

    # -- Mutations ------------------------------------------------------------

    def create_tag(self, name: str, message: str, commit: str = 'HEAD', push: bool = False) -> None:
        """Create an annotated tag (optionally pushing it) and invalidate caches."""
        try:
            self.git.create_tag(self.repo_path, name, message, commit)
            if push:
                self.git.push_tag(self.repo_path, name)
        finally:
            self.clear_cache()
        logger.info(f"Created tag {name} at {commit}")

    def delete_tag(self, name: str, push: bool = False) -> None:
        """Delete a tag locally (and on the remote if requested) and invalidate caches."""
        try:
            self.git.delete_tag(self.repo_path, name)
            if push and not self.git.delete_remote_tag(self.repo_path, name):
                logger.warning(f"Failed to delete remote tag {name}")
        finally:
            self.clear_cache()
        logger.info(f"Deleted tag {name}")
