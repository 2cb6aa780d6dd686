"""
Garbage-collection command for demoversions.

Removes deployment directories of prereleases whose development cycle has
ended. Stable releases, the current cycle, dist-tag versions and any
non-version directory (latest, pr-123, ...) are always kept.
"""

import click

from ..cli_utils import add_common_options, standard_command
from ..exit_codes import PartialSuccessError
from ..infra.actions import write_github_outputs, write_step_summary
from ..output import emit, emit_json
from ..services.gc_service import (
    GarbageCollectionService,
    github_outputs,
    render_step_summary,
)
from ..services.version_service import VersionService


@click.command('gc')
@click.argument('pages_dir', required=False, type=click.Path(file_okay=False))
@click.option('--plan-only', is_flag=True, help='Print only the remove/keep plan')
@add_common_options('repo', 'dry_run', 'github_output', 'pretty')
@click.pass_context
@standard_command
def gc_cmd(ctx, pages_dir, plan_only, repo, dry_run, github_output, pretty):
    """Remove deployments of past development cycles from PAGES_DIR.

    PAGES_DIR defaults to the configured ``deployment.pages_dir``. Tags
    are read from the repository given by --repo. Always preview with
    --dry-run first.

    \b
    Examples:
        demoversions gc gh-pages --dry-run
        demoversions gc gh-pages --repo ../main --github-output
    """
    config = ctx.obj['config']
    service = GarbageCollectionService(VersionService(repo, config=config), config=config)
    summary = service.run(pages_dir, dry_run=dry_run or plan_only)

    if github_output:
        write_github_outputs(github_outputs(summary))
    write_step_summary(render_step_summary(summary))

    if plan_only:
        emit_json(summary.plan, pretty=pretty)
        return

    emit(summary.details, pretty=pretty, columns=['directory', 'status', 'action', 'error'])
    if not pretty:
        emit_json(summary)

    if summary.failed:
        raise PartialSuccessError(
            f"Failed to remove {len(summary.failed)} deployment(s)",
            succeeded=len(summary.removed),
            failed=len(summary.failed),
        )
