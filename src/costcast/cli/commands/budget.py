import click
from rich.table import Table

from ...analysis.budget import analyze_budgets, detect_budget_alerts, project_costs_by_growth
from ...core.data_loader import load_cost_map, load_project_costs
from ...core.exceptions import CostcastError
from ..output import emit

STATUS_COLORS = {'under_budget': 'green', 'at_risk': 'yellow', 'over_budget': 'red'}


@click.command()
@click.argument('projects_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--budgets', '-b', 'budgets_file', type=click.Path(exists=True, dir_okay=False),
              help='YAML or JSON map of project name to budget')
@click.option('--projected', '-p', 'projected_file', type=click.Path(exists=True, dir_okay=False),
              help='YAML or JSON map of project name to projected cost')
@click.option('--growth', '-g', type=float,
              help='Project costs with a flat growth rate (e.g. 0.15) instead of a file')
@click.option('--output', '-o', type=click.Path(), help='Output file for budget analysis')
@click.option('--format', '-f', type=click.Choice(['json', 'yaml', 'table']),
              default='table', help='Output format')
@click.pass_context
def budget(ctx, projects_file, budgets_file, projected_file, growth, output, format):
    """
    Reconcile budgeted, actual and projected cost per project

    PROJECTS_FILE is a CSV or JSON file with project_name and actual_cost columns.

    Examples:
        costcast budget projects.csv --budgets budgets.yaml --growth 0.15
        costcast budget projects.json -b budgets.json -p projected.json -f json
    """
    console = ctx.obj['console']
    settings = ctx.obj['settings']

    if projected_file and growth is not None:
        raise click.UsageError("Use either --projected or --growth, not both")

    try:
        projects = load_project_costs(projects_file)
        budgets = load_cost_map(budgets_file) if budgets_file else None

        if projected_file:
            projected = load_cost_map(projected_file)
        elif growth is not None:
            projected = project_costs_by_growth(projects, growth, settings=settings)
        else:
            projected = None

        results = analyze_budgets(projects, budgets, projected)
        alerts = detect_budget_alerts(results, settings=settings)
    except CostcastError as e:
        raise click.ClickException(str(e))

    payload = {
        'projects': [r.to_dict() for r in results],
        'alerts': [a.to_dict() for a in alerts],
    }

    if format != 'table':
        emit(console, payload, format, output)
        return

    _display_budget_table(console, results)
    if alerts:
        console.print("\n[bold]Budget Alerts[/bold]")
        for alert in alerts:
            color = 'red' if alert.is_critical else 'yellow'
            console.print(f"  [{color}]{alert.severity.value.upper()}[/{color}] "
                          f"{alert.project_name}: {alert.description}")
    if output:
        emit(console, payload, 'json', output)


def _display_budget_table(console, results):
    """Display budget analysis in a table"""
    table = Table(title="Project Budgets", show_header=True, header_style="bold cyan")
    table.add_column("Project", style="white")
    table.add_column("Budgeted", justify="right")
    table.add_column("Actual", justify="right")
    table.add_column("Projected", justify="right")
    table.add_column("Variance", justify="right")
    table.add_column("Status", justify="center")

    for result in results:
        status = result.status.value
        color = STATUS_COLORS[status]
        variance_color = 'red' if result.variance > 0 else 'green'
        table.add_row(
            result.project_name,
            f"${result.budgeted_cost:,.2f}",
            f"${result.actual_cost:,.2f}",
            f"${result.projected_cost:,.2f}",
            f"[{variance_color}]${result.variance:,.2f}[/{variance_color}]",
            f"[{color}]{status.replace('_', ' ').upper()}[/{color}]",
        )

    console.print("\n")
    console.print(table)
