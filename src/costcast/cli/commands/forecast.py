import click
from rich.panel import Panel
from rich.table import Table

from ...analysis.engine import CostForecastingEngine
from ...core.data_loader import load_daily_spend
from ...core.exceptions import CostcastError
from ..output import date_range, emit

RISK_COLORS = {'low': 'green', 'medium': 'yellow', 'high': 'red'}


@click.command()
@click.argument('series_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--start', type=click.DateTime(formats=['%Y-%m-%d']),
              help='Ignore spend recorded before this date')
@click.option('--end', type=click.DateTime(formats=['%Y-%m-%d']),
              help='Ignore spend recorded after this date')
@click.option('--days', '-d', type=int, help='Forecast horizon in days')
@click.option('--confidence', '-c', type=click.Choice(['0.90', '0.95', '0.99']),
              help='Confidence level for the forecast band')
@click.option('--budget', '-b', type=float, help='Total budget to assess risk against')
@click.option('--seasonal/--no-seasonal', default=None,
              help='Apply monthly seasonal factors to predictions')
@click.option('--output', '-o', type=click.Path(), help='Output file for forecast results')
@click.option('--format', '-f', type=click.Choice(['json', 'yaml', 'table']),
              default='table', help='Output format')
@click.pass_context
def forecast(ctx, series_file, start, end, days, confidence, budget, seasonal, output, format):
    """
    Forecast daily cost from a historical spend series

    SERIES_FILE is a CSV or JSON file with date and cost columns.

    Examples:
        costcast forecast daily_spend.csv --days 60 --confidence 0.99
        costcast forecast daily_spend.json --budget 250000 -f json -o forecast.json
        costcast forecast daily_spend.csv --start 2024-01-01 --end 2024-06-30
    """
    console = ctx.obj['console']
    engine = CostForecastingEngine(ctx.obj['settings'])
    start, end = date_range(start, end)

    try:
        series = load_daily_spend(series_file, start, end)
        report = engine.run(
            series,
            forecast_days=days,
            confidence_level=float(confidence) if confidence else None,
            budget=budget,
            seasonal_adjustment=seasonal,
        )
    except CostcastError as e:
        raise click.ClickException(str(e))

    if format == 'table':
        _display_forecast(console, report)
        if output:
            emit(console, report.to_dict(), 'json', output)
    else:
        emit(console, report.to_dict(), format, output)


def _display_forecast(console, report):
    """Display forecast points and the summary panel"""
    table = Table(
        title=f"Cost Forecast ({report.forecast_days} days, {report.confidence_level:.0%} confidence)",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Date", style="dim")
    table.add_column("Predicted", justify="right", style="white")
    table.add_column("Lower", justify="right", style="blue")
    table.add_column("Upper", justify="right", style="blue")

    for point in report.forecast_points:
        table.add_row(
            point.date.isoformat(),
            f"${point.predicted_cost:,.2f}",
            f"${point.confidence_lower:,.2f}",
            f"${point.confidence_upper:,.2f}",
        )

    console.print("\n")
    console.print(table)

    summary = report.summary
    risk = summary.risk_level.value
    color = RISK_COLORS[risk]
    summary_text = f"""[bold green]Forecast Complete![/bold green]

Projected Total Cost: [bold yellow]${summary.projected_total_cost:,.2f}[/bold yellow]
Current Burn Rate: [bold]${summary.current_burn_rate:,.2f}/day[/bold]
Average Daily Cost: ${summary.average_daily_cost:,.2f}
Trend: [cyan]{summary.trend.value}[/cyan]
Recent Trend: {summary.recent_trend_percentage:+.1f}% vs previous window
Risk Level: [{color}]{risk.upper()}[/{color}]
Forecast Accuracy: {summary.forecast_accuracy:.0%}
Projected Through: {summary.projected_end_date.isoformat()}"""

    if report.seasonally_adjusted:
        summary_text += "\n\n[dim]Predictions include monthly seasonal adjustment[/dim]"

    console.print("\n")
    console.print(Panel(summary_text, title="Forecast Summary", border_style="green"))
