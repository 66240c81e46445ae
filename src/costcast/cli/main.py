import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from ..core.config import get_settings, reload_settings
from ..core.exceptions import CostcastError
from ..core.logging import setup_logging_from_config
from .commands import budget, configure, forecast, seasonal

console = Console()
log_console = Console(stderr=True)


@click.group()
@click.version_option(version='0.1.0', prog_name='costcast')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--config', type=click.Path(dir_okay=False, path_type=Path),
              help='Path to configuration file')
@click.pass_context
def cli(ctx, debug, config):
    """
    costcast - project cost forecasting and budget variance

    Forecast daily spend with confidence bands, estimate monthly seasonality
    and reconcile project budgets.
    """
    ctx.ensure_object(dict)

    try:
        settings = reload_settings(config) if config else get_settings()
    except CostcastError as e:
        raise click.ClickException(str(e))

    setup_logging_from_config(
        settings.logging,
        handler=RichHandler(console=log_console, rich_tracebacks=True, show_path=False),
    )
    if debug or settings.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    ctx.obj['config_file'] = config or Path.home() / '.costcast' / 'config.yaml'
    ctx.obj['settings'] = settings
    ctx.obj['console'] = console


cli.add_command(forecast.forecast)
cli.add_command(seasonal.seasonal)
cli.add_command(budget.budget)
cli.add_command(configure.configure)


if __name__ == '__main__':
    cli()
