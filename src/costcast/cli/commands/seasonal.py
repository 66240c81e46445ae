import calendar

import click
from rich.table import Table

from ...analysis.seasonal import compute_seasonal_factors
from ...core.data_loader import load_daily_spend
from ...core.exceptions import CostcastError
from ..output import date_range, emit


@click.command()
@click.argument('series_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--start', type=click.DateTime(formats=['%Y-%m-%d']),
              help='Ignore spend recorded before this date')
@click.option('--end', type=click.DateTime(formats=['%Y-%m-%d']),
              help='Ignore spend recorded after this date')
@click.option('--output', '-o', type=click.Path(), help='Output file for seasonal factors')
@click.option('--format', '-f', type=click.Choice(['json', 'yaml', 'table']),
              default='table', help='Output format')
@click.pass_context
def seasonal(ctx, series_file, start, end, output, format):
    """
    Estimate monthly seasonal spend factors

    Examples:
        costcast seasonal daily_spend.csv
        costcast seasonal daily_spend.csv -f yaml
    """
    console = ctx.obj['console']
    start, end = date_range(start, end)

    try:
        factors = compute_seasonal_factors(load_daily_spend(series_file, start, end))
    except CostcastError as e:
        raise click.ClickException(str(e))

    payload = {calendar.month_name[i + 1]: factor for i, factor in enumerate(factors)}

    if format != 'table':
        emit(console, payload, format, output)
        return

    table = Table(title="Monthly Seasonal Factors", show_header=True, header_style="bold cyan")
    table.add_column("Month", style="cyan")
    table.add_column("Factor", justify="right")
    table.add_column("vs. Average", justify="right")

    for month, factor in payload.items():
        deviation = (factor - 1) * 100
        style = "red" if deviation > 0 else "green" if deviation < 0 else "white"
        table.add_row(month, f"{factor:.2f}", f"[{style}]{deviation:+.1f}%[/{style}]")

    console.print(table)
