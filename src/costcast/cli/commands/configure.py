from pathlib import Path

import click
from rich.panel import Panel

from ...core.config import Settings
from ..output import render


@click.command()
@click.option('--show', is_flag=True, help="Show current configuration (default)")
@click.option('--init', 'init_path', type=click.Path(dir_okay=False, path_type=Path),
              help='Write a default configuration file to this path')
@click.option('--force', is_flag=True, help='Overwrite an existing file with --init')
@click.pass_context
def configure(ctx, show, init_path, force):
    """
    Show or initialise forecasting configuration

    Examples:
        costcast configure --show
        costcast configure --init ~/.costcast/config.yaml
    """
    console = ctx.obj['console']
    settings = ctx.obj['settings']

    if init_path:
        if init_path.exists() and not force:
            raise click.ClickException(f"{init_path} already exists, use --force to overwrite")
        Settings().save(init_path)
        console.print(f"[green]✓ Default configuration written to {init_path}[/green]")
        return

    _show_configuration(console, settings, ctx.obj['config_file'])


def _show_configuration(console, settings, config_file):
    """Display current configuration"""
    sections = settings.model_dump(mode="json", include={'forecast', 'trend', 'summary', 'budget'})
    console.print(Panel(render(sections, 'yaml').rstrip(),
                        title=f"Configuration ({config_file})",
                        border_style="blue"))
