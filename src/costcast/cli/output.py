import json
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional, Tuple

import click
import yaml


def render(payload: Any, fmt: str) -> str:
    """Serialise a payload as JSON or YAML"""
    if fmt == 'yaml':
        return yaml.safe_dump(payload, default_flow_style=False, sort_keys=False)
    return json.dumps(payload, indent=2)


def emit(console, payload: Any, fmt: str, output: Optional[str]) -> None:
    """Print a payload, or write it to ``output`` when given"""
    text = render(payload, fmt)
    if output:
        path = Path(output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        console.print(f"✓ Results saved to [green]{output}[/green]")
    else:
        # Plain echo keeps machine-readable output unwrapped
        click.echo(text)


def date_range(start: Optional[datetime], end: Optional[datetime]) -> Tuple[Optional[date], Optional[date]]:
    """Convert --start/--end options to dates, rejecting an inverted range"""
    start = start.date() if start else None
    end = end.date() if end else None
    if start and end and start > end:
        raise click.UsageError(f"--start {start} is after --end {end}")
    return start, end
