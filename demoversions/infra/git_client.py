"""
Git client infrastructure for demoversions.

Provides a clean abstraction over git command execution.
All tag and ref queries go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from version policy
"""

import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
import logging

logger = logging.getLogger(__name__)


class GitCommandError(Exception):
    """A git invocation exited non-zero, timed out, or could not start."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str = "", cwd: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        self.cwd = cwd
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(
            f"git command failed ({returncode}) in {cwd}: {' '.join(self.command)}{detail}"
        )


class GitClient:
    """
    Abstraction over the git commands needed for version resolution.

    Every method takes the repository path explicitly so a single client
    can serve several repositories.

    Example:
        client = GitClient()
        for name in client.list_tag_names("/path/to/repo"):
            print(name)
    """

    def __init__(self, timeout: int = 30):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (default: 30)
        """
        self.timeout = timeout

    def _run(
        self,
        args: List[str],
        cwd: str,
        check: bool = False
    ) -> Tuple[Optional[str], int]:
        """
        Run a git command.

        Args:
            args: Arguments after ``git``
            cwd: Working directory
            check: Raise GitCommandError on failure

        Returns:
            Tuple of (stdout, returncode); returncode is -1 if git could
            not be run or timed out
        """
        cmd = ['git'] + args
        stderr = ""
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
            output, code, stderr = result.stdout, result.returncode, result.stderr
        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out after {self.timeout}s: {' '.join(cmd)}")
            output, code, stderr = None, -1, "timed out"
        except OSError as e:
            logger.error(f"Git command failed: {' '.join(cmd)} - {e}")
            output, code, stderr = None, -1, str(e)

        if check and code != 0:
            raise GitCommandError(cmd, code, stderr, cwd=str(cwd))

        return output.strip() if output else None, code

    def is_git_repo(self, path: str) -> bool:
        """Check if path is inside a git work tree or is a bare repository."""
        if not Path(path).is_dir():
            return False
        _, code = self._run(['rev-parse', '--git-dir'], cwd=path)
        return code == 0

    def list_tag_names(self, path: str) -> List[str]:
        """
        List every tag name in the repository.

        Raises:
            GitCommandError: if the tags cannot be listed at all
        """
        output, _ = self._run(['tag', '--list'], cwd=path, check=True)
        if not output:
            return []
        return [line.strip() for line in output.split('\n') if line.strip()]

    def resolve_tag_commit_and_date(self, path: str, tag: str) -> Tuple[str, datetime]:
        """
        Resolve a tag to the commit it points at and that commit's author date.

        Annotated tags are peeled to their commit.

        Raises:
            GitCommandError: if the tag cannot be resolved to a commit
        """
        args = ['show', '-s', '--format=%H %at', f'{tag}^{{commit}}']
        output, _ = self._run(args, cwd=path, check=True)

        parts = (output or '').split()
        if len(parts) != 2:
            raise GitCommandError(['git'] + args, 0, f"unexpected output: {output!r}", cwd=str(path))

        commit, timestamp = parts
        try:
            date = datetime.fromtimestamp(int(timestamp), tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            raise GitCommandError(['git'] + args, 0, f"bad timestamp: {timestamp!r}", cwd=str(path))

        return commit, date

    def resolve_ref_commit(self, path: str, ref: str) -> str:
        """
        Resolve a ref name (tag, branch, sha) to a full commit hash.

        Raises:
            GitCommandError: if the ref does not exist
        """
        output, _ = self._run(
            ['rev-parse', '--verify', '--quiet', f'{ref}^{{commit}}'],
            cwd=path,
            check=True
        )
        if not output:
            raise GitCommandError(['git', 'rev-parse', ref], 1, "not found", cwd=str(path))
        return output

    def list_tags_at_commit(self, path: str, commit: str) -> List[str]:
        """List tag names pointing at ``commit``."""
        output, _ = self._run(['tag', '--points-at', commit], cwd=path, check=True)
        if not output:
            return []
        return [line.strip() for line in output.split('\n') if line.strip()]

    def create_tag(self, path: str, name: str, message: str, commit: str = 'HEAD') -> None:
        """Create an annotated tag."""
        self._run(['tag', '-a', name, commit, '-m', message], cwd=path, check=True)

    def delete_tag(self, path: str, name: str) -> None:
        """Delete a local tag."""
        self._run(['tag', '-d', name], cwd=path, check=True)

    def push_tag(self, path: str, name: str, remote: str = 'origin') -> None:
        """Push a tag to a remote."""
        self._run(['push', remote, name], cwd=path, check=True)

    def delete_remote_tag(self, path: str, name: str, remote: str = 'origin') -> bool:
        """
        Delete a tag on a remote.

        Returns:
            True if successful
        """
        _, code = self._run(['push', remote, '--delete', name], cwd=path)
        return code == 0
