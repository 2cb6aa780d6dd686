import json

import click

from ..cli_utils import standard_command
from ..config import get_config_path, get_default_config, save_config


@click.group("config")
def config_cmd():
    """Configuration management commands."""
    pass


@config_cmd.command("show")
@click.option("--pretty", is_flag=True, help="Display as formatted JSON instead of single-line JSON")
@click.pass_context
def show_config(ctx, pretty):
    """Show the current configuration with all merges applied."""
    config = ctx.obj['config']
    if pretty:
        click.echo(json.dumps(config, indent=2, ensure_ascii=False))
    else:
        click.echo(json.dumps(config, ensure_ascii=False))


@config_cmd.command("path")
@click.pass_context
def config_path(ctx):
    """Show the config file path being used."""
    path = ctx.obj.get('config_path') or get_config_path()
    click.echo(json.dumps({"config_path": str(path), "exists": path.exists()}))


@config_cmd.command("init")
@click.option("--format", "fmt", type=click.Choice(["json", "toml", "yaml"]), default="json",
              show_default=True, help="File format to write")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@standard_command
def init_config(fmt, force):
    """Write the default configuration to .github/demo-config.<format>."""
    path = get_config_path().with_suffix(f".{fmt}")
    if path.exists() and not force:
        raise click.ClickException(f"Configuration already exists at {path} (use --force to overwrite)")
    save_config(get_default_config(), path)
    click.echo(json.dumps({"config_path": str(path), "action": "created"}))
