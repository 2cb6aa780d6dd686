"""
Infrastructure layer for demoversions.

Contains abstractions for external systems:
- GitClient: Git command execution (tags, refs)
- NpmRegistryClient: npm registry dist-tag lookup
- write_github_outputs, write_step_summary: GitHub Actions step I/O

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient, GitCommandError
from .npm_client import NpmRegistryClient
from .actions import write_github_outputs, write_step_summary

__all__ = [
    'GitClient',
    'GitCommandError',
    'NpmRegistryClient',
    'write_github_outputs',
    'write_step_summary',
]
