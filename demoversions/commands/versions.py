"""
Version query commands for demoversions.

These print the data the demo workflows consume: version lists, the
current development cycle, stale prereleases, dist-tags and deployment
paths. Lists stream as JSONL, single objects as one JSON document.
"""

import json

import click

from ..cli_utils import add_common_options, standard_command
from ..domain.deployment import get_deployment_path
from ..domain.semver import filter_versions, parse
from ..exit_codes import InvalidVersionError
from ..infra.actions import write_github_outputs
from ..infra.npm_client import NpmRegistryClient
from ..output import emit, emit_json
from ..services.version_service import VersionService

VERSION_COLUMNS = ['tag', 'commit', 'date', 'is_prerelease']


def _service(ctx, repo):
    return VersionService(repo, config=ctx.obj['config'])


def _version_row(version):
    return {
        'tag': version.tag,
        'commit': version.commit[:12],
        'date': version.date.strftime('%Y-%m-%d %H:%M'),
        'is_prerelease': version.is_prerelease,
    }


def _emit_versions(versions, pretty, title=None):
    if pretty:
        emit([_version_row(v) for v in versions], pretty=True, columns=VERSION_COLUMNS, title=title)
    else:
        emit(versions)


@click.command('versions')
@click.option('--since', help='Only versions at or above this version')
@click.option('--skip', multiple=True, help='Tag to leave out (with --since; repeatable)')
@click.option('--minimum', help='Only versions at or above this version (invalid values are ignored)')
@click.option('--kind', type=click.Choice(['all', 'stable', 'prerelease']), default='all',
              show_default=True, help='Which versions to list')
@add_common_options('repo', 'pretty')
@click.pass_context
@standard_command
def versions_cmd(ctx, since, skip, minimum, kind, repo, pretty):
    """List semver tags with their commits, newest first.

    \b
    Examples:
        demoversions versions
        demoversions versions --kind prerelease --pretty
        demoversions versions --since 1.0.0 --skip 1.0.1
    """
    service = _service(ctx, repo)

    if since:
        versions = service.versions_since(since, skip)
    else:
        versions = service.deployment_history(minimum)

    if kind != 'all':
        keep = set(filter_versions([v.tag for v in versions], kind))
        versions = [v for v in versions if v.tag in keep]

    _emit_versions(versions, pretty)


@click.command('cycle')
@click.option('--tags-only', is_flag=True, help='Print only the tags of the cycle')
@add_common_options('repo', 'pretty', 'github_output')
@click.pass_context
@standard_command
def cycle_cmd(ctx, tags_only, repo, pretty, github_output):
    """Show the current development cycle.

    The cycle is the latest stable release plus every prerelease newer
    than it. Without any stable release, every version is in the cycle.
    """
    cycle = _service(ctx, repo).current_cycle()

    if github_output:
        write_github_outputs({
            'stable': cycle.stable.tag if cycle.stable else '',
            'versions': json.dumps(list(cycle.tags)),
        })

    if tags_only:
        emit_json(list(cycle.tags), pretty=pretty)
    else:
        emit_json(cycle, pretty=pretty)


@click.command('past')
@add_common_options('repo', 'pretty')
@click.pass_context
@standard_command
def past_cmd(ctx, repo, pretty):
    """List prereleases of past development cycles (garbage-collection candidates)."""
    _emit_versions(_service(ctx, repo).past_cycles(), pretty, title='Past cycle prereleases')


@click.command('dist-tags')
@click.argument('names', nargs=-1)
@add_common_options('repo', 'pretty')
@click.pass_context
@standard_command
def dist_tags_cmd(ctx, names, repo, pretty):
    """Resolve dist-tag refs (latest, next, ...) to commits and semver tags.

    With no NAMES, the configured ``deployment.dist_tags`` are resolved.
    Refs that do not exist are omitted.
    """
    dist_tags = _service(ctx, repo).list_dist_tags(names or None)
    emit(dist_tags, pretty=pretty, columns=['name', 'semver_tag', 'commit'])


@click.command('catalog')
@add_common_options('repo', 'pretty')
@click.pass_context
@standard_command
def catalog_cmd(ctx, repo, pretty):
    """Show every version grouped by kind, plus the dist-tag mapping."""
    emit_json(_service(ctx, repo).catalog(), pretty=pretty)


@click.command('buildable')
@click.option('--matrix', is_flag=True, help='Print a JSON array of tags for a workflow matrix')
@add_common_options('repo', 'pretty', 'github_output')
@click.pass_context
@standard_command
def buildable_cmd(ctx, matrix, repo, pretty, github_output):
    """List current-cycle versions that meet the configured minimum version."""
    buildable = _service(ctx, repo).buildable_versions()

    if github_output:
        write_github_outputs({
            'versions': json.dumps(buildable.to_matrix()),
            'has_versions': 'true' if buildable.has_versions else 'false',
        })

    if matrix:
        click.echo(json.dumps(buildable.to_matrix()))
    else:
        emit_json(buildable, pretty=pretty)


@click.command('path')
@click.argument('version')
@click.option('--stable/--prerelease', 'stable', default=None,
              help='Override stability (default: derived from VERSION)')
@click.option('--base-path', default=None, help='Site prefix (default: deployment.base_path)')
@click.pass_context
@standard_command
def path_cmd(ctx, version, stable, base_path):
    """Print the deployment path for VERSION.

    \b
    Examples:
        demoversions path 1.2.3                 # /latest/
        demoversions path 2.0.0-beta.1          # /2.0.0-beta.1/
        demoversions path 1.2.3 --base-path /polen
    """
    if stable is None:
        info = parse(version)
        if info is None:
            raise InvalidVersionError(version)
        stable = not info.is_prerelease

    if base_path is None:
        base_path = ctx.obj['config']['deployment']['base_path']

    click.echo(get_deployment_path(version, stable, base_path))


@click.command('npm-dist-tags')
@click.argument('package', required=False)
@click.option('--pretty', is_flag=True, help='Indented JSON output')
@click.pass_context
@standard_command
def npm_dist_tags_cmd(ctx, package, pretty):
    """Show the dist-tags published on the npm registry for PACKAGE.

    PACKAGE defaults to the configured ``npm.package``.
    """
    npm = ctx.obj['config']['npm']
    package = package or npm['package']
    if not package:
        raise click.UsageError("No package given and npm.package is not configured")

    client = NpmRegistryClient(registry_url=npm['registry_url'], timeout=npm['timeout_seconds'])
    emit_json(client.dist_tags(package), pretty=pretty)


@click.group('tag')
def tag_cmd():
    """Create or delete version tags."""
    pass


@tag_cmd.command('create')
@click.argument('name')
@click.option('-m', '--message', default=None, help='Tag message (default: the tag name)')
@click.option('--commit', default='HEAD', show_default=True, help='Commit to tag')
@click.option('--push', is_flag=True, help='Push the tag to origin')
@add_common_options('repo')
@click.pass_context
@standard_command
def tag_create(ctx, name, message, commit, push, repo):
    """Create an annotated tag NAME."""
    if parse(name) is None:
        raise InvalidVersionError(name)
    _service(ctx, repo).create_tag(name, message or name, commit=commit, push=push)
    emit_json({'tag': name, 'commit': commit, 'pushed': push, 'action': 'created'})


@tag_cmd.command('delete')
@click.argument('name')
@click.option('--push', is_flag=True, help='Also delete the tag on origin')
@add_common_options('repo')
@click.pass_context
@standard_command
def tag_delete(ctx, name, push, repo):
    """Delete tag NAME."""
    _service(ctx, repo).delete_tag(name, push=push)
    emit_json({'tag': name, 'pushed': push, 'action': 'deleted'})
