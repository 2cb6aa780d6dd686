#!/usr/bin/env python3

import click
from pathlib import Path
import sys

from demoversions.config import configure_logging, load_config
from demoversions.exit_codes import ConfigError
from demoversions.output import emit_error

from demoversions.commands.versions import (
    versions_cmd,
    cycle_cmd,
    past_cmd,
    dist_tags_cmd,
    catalog_cmd,
    buildable_cmd,
    path_cmd,
    npm_dist_tags_cmd,
    tag_cmd,
)
from demoversions.commands.gc import gc_cmd
from demoversions.commands.config import config_cmd


@click.group()
@click.version_option(package_name='demoversions')
@click.option('--config', 'config_file', type=click.Path(dir_okay=False, path_type=Path),
              default=None, help='Configuration file (default: .github/demo-config.*)')
@click.option('-v', '--verbose', is_flag=True, help='Debug logging on stderr')
@click.pass_context
def cli(ctx, config_file, verbose):
    """demoversions - Version history and deployment tooling for demo sites.

    Resolves semver tags and dist-tags, computes the current development
    cycle, maps versions to deployment paths and garbage-collects stale
    prerelease deployments.
    """
    ctx.ensure_object(dict)
    try:
        config = load_config(config_file)
    except ConfigError as e:
        configure_logging()
        emit_error(str(e), type=type(e).__name__)
        sys.exit(e.exit_code)

    logging_config = config["logging"]
    configure_logging("DEBUG" if verbose else logging_config["level"], logging_config["format"])

    ctx.obj['config'] = config
    ctx.obj['config_path'] = config_file


cli.add_command(versions_cmd)
cli.add_command(cycle_cmd)
cli.add_command(past_cmd)
cli.add_command(dist_tags_cmd)
cli.add_command(catalog_cmd)
cli.add_command(buildable_cmd)
cli.add_command(path_cmd)
cli.add_command(npm_dist_tags_cmd)
cli.add_command(tag_cmd)
cli.add_command(gc_cmd)
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
