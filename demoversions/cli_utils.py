"""
Common CLI utilities and decorators for consistent command behavior.
"""

import logging
import sys
from functools import wraps

import click

from .exit_codes import (
    INTERRUPTED,
    CommandError,
    get_exit_code_for_exception,
)
from .output import emit_error

logger = logging.getLogger("demoversions")


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Clean data output on stdout, errors as JSON on stderr
    - CommandError subclasses exit with their own exit code
    - Other exceptions exit with a code mapped from the exception type
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            emit_error("Interrupted by user", type="KeyboardInterrupt")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            # Click exceptions already have their exit code
            raise
        except CommandError as e:
            logger.error(str(e))
            context = {}
            if hasattr(e, 'succeeded'):
                context = {'succeeded': e.succeeded, 'failed': e.failed}
            emit_error(str(e), type=type(e).__name__, context=context or None)
            sys.exit(e.exit_code)
        except Exception as e:
            logger.error(f"Command failed: {e}")
            emit_error(str(e), type=type(e).__name__)
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


# Standard options that many commands share
common_options = {
    'repo': click.option('--repo', 'repo', default='.', show_default=True,
                         type=click.Path(file_okay=False),
                         help='Path to the git repository holding the version tags'),
    'pretty': click.option('--pretty', is_flag=True,
                           help='Human-readable output instead of JSON/JSONL'),
    'dry_run': click.option('--dry-run', is_flag=True,
                            help='Preview changes without touching disk'),
    'github_output': click.option('--github-output', is_flag=True,
                                  help='Also write step outputs to $GITHUB_OUTPUT'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('repo', 'pretty')
        def my_command(repo, pretty):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
