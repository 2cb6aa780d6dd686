"""
GitHub Actions step I/O.

Steps publish outputs by appending ``key=value`` lines to the file named by
GITHUB_OUTPUT, and Markdown to the file named by GITHUB_STEP_SUMMARY.
"""

import logging
import os
import uuid
from typing import Dict, Optional

logger = logging.getLogger(__name__)


def write_github_outputs(outputs: Dict[str, str], path: Optional[str] = None) -> bool:
    """
    Append step outputs to the GitHub Actions output file.

    Multi-line values use the heredoc form with a delimiter unique to
    each value.

    Returns:
        False if no output file is configured
    """
    gh_out = path or os.environ.get("GITHUB_OUTPUT")
    if not gh_out:
        logger.warning("GITHUB_OUTPUT environment variable not set")
        return False

    with open(gh_out, "a") as f:
        for key, value in outputs.items():
            if '\n' in value:
                delimiter = f"ghadelimiter_{uuid.uuid4()}"
                f.write(f"{key}<<{delimiter}\n{value}\n{delimiter}\n")
            else:
                f.write(f"{key}={value}\n")
    return True


def write_step_summary(markdown: str, path: Optional[str] = None) -> bool:
    """Append Markdown to GITHUB_STEP_SUMMARY, if configured."""
    target = path or os.environ.get("GITHUB_STEP_SUMMARY")
    if not target:
        return False
    with open(target, "a") as f:
        f.write(markdown)
    return True
