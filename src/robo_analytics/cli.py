"""CLI entry point for the analytics engine."""

from __future__ import annotations

import asyncio
import dataclasses
import json
from datetime import date, datetime
from typing import Any

import click
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from .core.clock import FixedClock, WallClock
from .core.config import Settings, load_settings
from .core.enums import DateMode
from .core.errors import AnalyticsError
from .core.models import FilterSpec, TradeRecord
from .journal.monte_carlo import MonteCarloProjector
from .journal.risk_alerts import evaluate_risk_alerts
from .observability.logger import new_run_id, setup_logging
from .pipeline import AnalyticsPipeline
from .storage.csv_source import CsvRecordSource
from .storage.pagination import fetch_all_trade_records
from .storage.postgres.repos import load_trade_records

_DATE = click.DateTime(formats=["%Y-%m-%d"])


def _to_date(value: datetime | None) -> date | None:
    return value.date() if value is not None else None


def _echo_json(payload: Any) -> None:
    if dataclasses.is_dataclass(payload) and not isinstance(payload, type):
        payload = dataclasses.asdict(payload)
    click.echo(json.dumps(payload, indent=2, default=str))


_source_argument = click.argument(
    "file", required=False, type=click.Path(exists=True, dir_okay=False)
)


def _load_records(obj: _Context, path: str | None) -> list[TradeRecord]:
    """Read from the CSV export at *path*, or from Postgres with --postgres-user."""
    if obj.postgres_user is not None:
        if path is not None:
            raise click.UsageError("Give either FILE or --postgres-user, not both")
        return asyncio.run(load_trade_records(obj.settings.store, obj.postgres_user))
    if path is None:
        raise click.UsageError("Missing FILE (or --postgres-user)")
    source = CsvRecordSource(path)
    return asyncio.run(
        fetch_all_trade_records(source, "csv", page_size=obj.settings.store.page_size)
    )


def _filter_options(func: Any) -> Any:
    options = [
        click.option(
            "--date-mode",
            type=click.Choice([m.value for m in DateMode]),
            default=DateMode.ALL.value,
            help="Date window",
        ),
        click.option("--start", type=_DATE, default=None, help="Custom start date (YYYY-MM-DD)"),
        click.option("--end", type=_DATE, default=None, help="Custom end date (YYYY-MM-DD)"),
        click.option("--strategy", "strategies", multiple=True, help="Strategy (repeatable)"),
        click.option("--hour", "hours", type=int, multiple=True, help="Hour 0-23 (repeatable)"),
        click.option(
            "--weekday", "weekdays", type=int, multiple=True,
            help="Weekday 0=Sunday..6 (repeatable)",
        ),
        click.option(
            "--month", "months", type=int, multiple=True,
            help="Month 0=January..11 (repeatable)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_spec(
    date_mode: str,
    start: datetime | None,
    end: datetime | None,
    strategies: tuple[str, ...],
    hours: tuple[int, ...],
    weekdays: tuple[int, ...],
    months: tuple[int, ...],
) -> FilterSpec:
    mode = DateMode(date_mode)
    if mode == DateMode.ALL and (start or end):
        mode = DateMode.CUSTOM
    return FilterSpec(
        date_mode=mode,
        custom_start=_to_date(start),
        custom_end=_to_date(end),
        strategies=frozenset(strategies),
        hours=frozenset(hours),
        weekdays=frozenset(weekdays),
        months=frozenset(months),
    )


class _Context:
    def __init__(
        self, settings: Settings, today: date | None, postgres_user: str | None = None
    ) -> None:
        self.settings = settings
        self.postgres_user = postgres_user
        self.clock = FixedClock(today) if today else WallClock()
        self.pipeline = AnalyticsPipeline(settings, clock=self.clock)


def _run(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Turn input errors into a non-zero exit with the message."""
    try:
        return func(*args, **kwargs)
    except (AnalyticsError, ValidationError, OSError, SQLAlchemyError) as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.option("--config", default=None, help="Config file path (TOML)")
@click.option("--today", type=_DATE, default=None, help="Reference date for relative windows")
@click.option(
    "--postgres-user",
    default=None,
    help="Read this user's operations from Postgres instead of a CSV FILE",
)
@click.pass_context
def main(
    ctx: click.Context,
    config: str | None,
    today: datetime | None,
    postgres_user: str | None,
) -> None:
    """Trading performance analytics over a CSV export or the operations database."""
    settings = _run(load_settings, config)
    setup_logging(
        level=settings.observability.log_level,
        format=settings.observability.log_format,
    )
    new_run_id()
    ctx.obj = _Context(settings, _to_date(today), postgres_user)


@main.command()
@_source_argument
@_filter_options
@click.pass_obj
def stats(obj: _Context, file: str | None, **filters: Any) -> None:
    """Print overall statistics for the filtered records."""
    spec = _run(_build_spec, **filters)
    records = _run(_load_records, obj, file)
    _echo_json(obj.pipeline.compute_stats(records, spec).to_dict())


@main.command()
@_source_argument
@_filter_options
@click.pass_obj
def strategies(obj: _Context, file: str | None, **filters: Any) -> None:
    """Print strategies ranked by total result."""
    spec = _run(_build_spec, **filters)
    records = _run(_load_records, obj, file)
    aggregates = obj.pipeline.compute_strategy_aggregates(records, spec)
    _echo_json([
        {k: v for k, v in dataclasses.asdict(a).items() if k != "records"}
        for a in aggregates
    ])


@main.command()
@_source_argument
@click.option("--strategy", default=None, help="Single strategy (default: every strategy)")
@click.pass_obj
def optimize(obj: _Context, file: str | None, strategy: str | None) -> None:
    """Recommend profitable hours, weekdays and months per strategy."""
    records = _run(_load_records, obj, file)
    if strategy:
        names = [strategy]
    else:
        names = [a.strategy for a in obj.pipeline.compute_strategy_aggregates(records)]
    _echo_json([obj.pipeline.optimize_strategy(records, name).to_dict() for name in names])


@main.command()
@_source_argument
@_filter_options
@click.pass_obj
def correlations(obj: _Context, file: str | None, **filters: Any) -> None:
    """Print strategy pairs ranked by diversification score."""
    spec = _run(_build_spec, **filters)
    records = _run(_load_records, obj, file)
    pairs = obj.pipeline.compute_correlations(records, spec)
    _echo_json([
        {**dataclasses.asdict(p), "complementarity": p.label}
        for p in pairs
    ])


@main.command()
@_source_argument
@click.option("--simulations", type=int, default=None, help="Number of simulated paths")
@click.option("--seed", type=int, default=None, help="Random seed")
@click.pass_obj
def montecarlo(
    obj: _Context, file: str | None, simulations: int | None, seed: int | None
) -> None:
    """Project the range of outcomes from the daily results."""
    cfg = obj.settings.monte_carlo
    records = obj.pipeline.apply_filters(_run(_load_records, obj, file))
    projector = MonteCarloProjector(
        n_simulations=simulations if simulations is not None else cfg.n_simulations,
        seed=seed if seed is not None else cfg.seed,
        max_points=cfg.max_points,
    )
    projection = projector.project(records)
    if projection is None:
        raise click.ClickException("Monte Carlo needs at least two trading days")
    _echo_json(projection)


@main.command()
@_source_argument
@click.pass_obj
def alerts(obj: _Context, file: str | None) -> None:
    """Print risk alerts."""
    records = obj.pipeline.apply_filters(_run(_load_records, obj, file))
    found = evaluate_risk_alerts(
        records, today=obj.clock.today(), config=obj.settings.risk_alerts
    )
    _echo_json([dataclasses.asdict(a) for a in found])


@main.command()
@_source_argument
@_filter_options
@click.pass_obj
def session(obj: _Context, file: str | None, **filters: Any) -> None:
    """Print intraday decay and the weekday/hour cross-validation heatmap."""
    spec = _run(_build_spec, **filters)
    records = _run(_load_records, obj, file)
    decay = obj.pipeline.intraday_decay(records, spec)
    heatmap = obj.pipeline.cross_validation_heatmap(records, spec)
    _echo_json({
        "first_hour": obj.settings.session.first_hour,
        "last_hour": obj.settings.session.last_hour,
        "intraday_decay": dataclasses.asdict(decay) if decay is not None else None,
        "heatmap": dataclasses.asdict(heatmap),
    })


@main.command()
@_source_argument
@click.option("--capital", type=click.FloatRange(min=0, min_open=True), required=True,
              help="Starting capital")
@_filter_options
@click.pass_obj
def simulate(obj: _Context, file: str | None, capital: float, **filters: Any) -> None:
    """Replay the daily results against a starting capital."""
    spec = _run(_build_spec, **filters)
    records = _run(_load_records, obj, file)
    simulation = obj.pipeline.simulate_capital(records, capital, spec)
    if simulation is None:
        raise click.ClickException("No operations to simulate")
    _echo_json({**dataclasses.asdict(simulation), "survived": simulation.survived})


if __name__ == "__main__":
    main()
