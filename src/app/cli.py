"""Click CLI for indicator-lab.

Entry point: ``ilab`` (installed via pyproject.toml) or ``python -m app.cli``.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Optional

import click
import pandas as pd
from rich.console import Console
from rich.table import Table

from app.config import get_config, indicator_defaults
from app.logging import get_logger
from indicators.models import EPOCH_UNIT

logger = get_logger(__name__)
console = Console()

_DEFAULT_TAIL = 10


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _error(message: str) -> None:
    """Print a styled error message and exit."""
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise SystemExit(1)


def _parse_value(raw: str) -> Any:
    """Parse a ``--param`` value as int, then float, falling back to str."""
    for cast in (int, float):
        try:
            return cast(raw)
        except ValueError:
            continue
    return raw


def _parse_params(pairs: tuple[str, ...]) -> dict[str, Any]:
    params: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            _error(f"Invalid --param '{pair}', expected key=value")
        params[key.strip()] = _parse_value(raw.strip())
    return params


def _read_ohlcv(path: Path) -> pd.DataFrame:
    """Read an OHLCV CSV, parsing the ``timestamp`` column when present.

    Numeric timestamps are Unix epoch milliseconds, the unit
    :class:`indicators.models.CryptoDataPoint` uses.
    """
    df = pd.read_csv(path)
    if "timestamp" in df.columns:
        if pd.api.types.is_numeric_dtype(df["timestamp"]):
            df["timestamp"] = pd.to_datetime(df["timestamp"], unit=EPOCH_UNIT, utc=True)
        else:
            df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
        df = df.set_index("timestamp", drop=False)
    return df


def _format_number(value: float) -> str:
    if math.isnan(value):
        return "[dim]NaN[/dim]"
    if math.isinf(value):
        return "[yellow]inf[/yellow]" if value > 0 else "[yellow]-inf[/yellow]"
    return f"{value:,.4f}"


def _tail_default() -> int:
    cli_cfg = get_config().get("cli") or {}
    return int(cli_cfg.get("tail", _DEFAULT_TAIL))


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.version_option(package_name="indicator-lab")
def cli() -> None:
    """indicator-lab -- technical indicators over OHLCV price data."""


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------

@cli.command("list")
def list_indicators() -> None:
    """List registered indicators and their configured defaults."""
    from indicators.frame import INDICATOR_REGISTRY  # lazy import

    table = Table(title=f"Indicators ({len(INDICATOR_REGISTRY)})")
    table.add_column("Name", style="bold")
    table.add_column("Defaults", style="dim")

    for name in sorted(INDICATOR_REGISTRY):
        defaults = indicator_defaults(name)
        shown = ", ".join(f"{k}={v}" for k, v in defaults.items()) or "-"
        table.add_row(name, shown)

    console.print(table)


# ---------------------------------------------------------------------------
# compute
# ---------------------------------------------------------------------------

@cli.command()
@click.argument("name")
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--source", default=None, help="Input column (default: from config or close).")
@click.option(
    "--param",
    "param_pairs",
    multiple=True,
    help="Indicator parameter as key=value (repeatable), e.g. --param period=14.",
)
@click.option("--tail", default=None, type=int, help="Number of trailing rows to print.")
def compute(
    name: str,
    csv_path: Path,
    source: Optional[str],
    param_pairs: tuple[str, ...],
    tail: Optional[int],
) -> None:
    """Compute indicator NAME over the OHLCV data in CSV_PATH."""
    from indicators.frame import compute_indicator  # lazy import

    params = indicator_defaults(name)
    params.update(_parse_params(param_pairs))
    if source:
        params["source"] = source

    logger.info("compute: %s %s params=%s", name, csv_path, params)

    try:
        df = _read_ohlcv(csv_path)
        result = compute_indicator(df, name, params)
    except (KeyError, ValueError) as exc:
        logger.debug("compute failed", exc_info=True)
        _error(str(exc).strip("'\""))

    rows = result.tail(tail if tail is not None else _tail_default())

    table = Table(title=f"{name} ({len(result):,} rows)", show_lines=False)
    table.add_column("Index", style="bold")
    for column in rows.columns:
        table.add_column(str(column), justify="right")

    for idx, row in rows.iterrows():
        table.add_row(str(idx), *(_format_number(float(v)) for v in row))

    console.print(table)


# ---------------------------------------------------------------------------
# ma
# ---------------------------------------------------------------------------

@cli.command()
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--n", "n", required=True, type=int, help="Number of trailing points to average.")
@click.option("--source", default="close", show_default=True, help="Input column.")
def ma(csv_path: Path, n: int, source: str) -> None:
    """Print the moving average of the last N values in CSV_PATH."""
    from indicators.core import moving_average  # lazy import

    try:
        df = _read_ohlcv(csv_path)
        if source not in df.columns:
            raise KeyError(f"Column '{source}' not found in {csv_path}")
        value = moving_average(df[source], n)
    except (KeyError, ValueError) as exc:
        logger.debug("ma failed", exc_info=True)
        _error(str(exc).strip("'\""))

    console.print(f"[bold cyan]MA({n})[/bold cyan] of {source}: {_format_number(value)}")


if __name__ == "__main__":
    cli()
