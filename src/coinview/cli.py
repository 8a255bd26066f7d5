"""coinview command line interface."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from coinview import __version__
from coinview.alerting import ErrorRouter
from coinview.client.request import RequestClient
from coinview.config.loader import get_runtime_config, section, set_runtime_config
from coinview.errors import MalformedPayload
from coinview.gui.widgets import default_range, model_option_label, model_summary
from coinview.normalize.model import VisualizationModel
from coinview.report.aggregate import aggregate, detail_display
from coinview.scenario.forms import RangeForm, RunForm, TrainForm
from coinview.session import DashboardSession

logger = logging.getLogger(__name__)

DATE_FORMATS = ["%Y-%m-%d"]


def _config() -> dict[str, Any]:
    return get_runtime_config()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _session() -> DashboardSession:
    router = ErrorRouter(lambda message: click.echo(f"Error: {message}", err=True))
    return DashboardSession(RequestClient.from_config(_config()), router)


def _resolve(value: Any | None, section_name: str, key: str) -> Any:
    if value not in (None, ""):
        return value
    defaults = section(section_name, _config())
    if key not in defaults:
        raise click.UsageError(f"--{key.replace('_', '-')} is required (no default in config)")
    return defaults[key]


def _dates(from_dt: datetime | None, to_dt: datetime | None) -> tuple[date, date]:
    start, end = default_range()
    return (
        from_dt.date() if from_dt is not None else start,
        to_dt.date() if to_dt is not None else end,
    )


def _build_form(form_cls: type, **values: Any) -> Any:
    try:
        return form_cls(**values)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'form'}: {err['msg']}"
            for err in exc.errors()
        )
        raise click.BadParameter(details) from exc


def _echo_model(model: VisualizationModel, as_json: bool) -> None:
    metrics = aggregate(model.reports)
    if as_json:
        payload = model_summary(model)
        payload["details"] = [detail_display(detail) for detail in model.run_details]
        payload["reports"] = {coin: m.to_dict() for coin, m in metrics.items()}
        click.echo(json.dumps(payload, indent=2))
        return

    summary = model_summary(model)
    click.echo(f"Coin        : {summary['coin']}")
    click.echo(f"Price points: {summary['points']}")
    click.echo(f"Trades      : {summary['trades']}")
    click.echo(f"Strategies  : {', '.join(summary['strategies']) or '-'}")
    click.echo(f"Buy / Sell  : {summary['buys']} / {summary['sells']}")
    if summary["loss_points"] is not None:
        click.echo(f"Loss points : {summary['loss_points']}")
    for detail in model.run_details:
        line = ", ".join(f"{label}={value}" for label, value in detail_display(detail).items())
        click.echo(f"Run: {line}")
    for coin, m in metrics.items():
        line = ", ".join(f"{label}={value}" for label, value in m.to_display().items())
        click.echo(f"Report {coin}: {line}")


def _finish(
    ctx: click.Context,
    model: VisualizationModel | None,
    as_json: bool,
    session: DashboardSession,
) -> None:
    if model is None:
        ctx.exit(1)
    try:
        _echo_model(model, as_json)
    except MalformedPayload as exc:
        session.router.report(exc)
        ctx.exit(1)


@click.group(name="coinview", invoke_without_command=True)
@click.option(
    "--config",
    type=click.Path(exists=False, dir_okay=False, file_okay=True, path_type=Path),
    default=None,
    help="Path to configuration file (overrides COINVIEW_CONFIG).",
)
@click.option("--version", is_flag=True, help="Show version and exit.")
@click.pass_context
def _cli(ctx: click.Context, config: Path | None, version: bool) -> None:
    cfg = set_runtime_config(config)
    _configure_logging(str(cfg.get("log_level", "INFO")))
    if version:
        click.echo(__version__)
        ctx.exit()
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()


def _range_options(func: Any) -> Any:
    func = click.option(
        "--to",
        "to_dt",
        type=click.DateTime(DATE_FORMATS),
        default=None,
        help="End date (YYYY-MM-DD), defaults to today.",
    )(func)
    func = click.option(
        "--from",
        "from_dt",
        type=click.DateTime(DATE_FORMATS),
        default=None,
        help="Start date (YYYY-MM-DD), defaults to yesterday.",
    )(func)
    return click.option("--coin", default=None, help="Coin symbol (defaults to config).")(func)


@_cli.command("run")
@_range_options
@click.option("--interval", type=int, default=None, help="Interval length in minutes.")
@click.option("--prev", type=int, default=None, help="Look-back window.")
@click.option("--next", "next_", type=int, default=None, help="Look-ahead window.")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.pass_context
def run_cmd(
    ctx: click.Context,
    coin: str | None,
    from_dt: datetime | None,
    to_dt: datetime | None,
    interval: int | None,
    prev: int | None,
    next_: int | None,
    as_json: bool,
) -> None:
    """Run a backtest scenario and summarise the result."""
    start, end = _dates(from_dt, to_dt)
    form = _build_form(
        RunForm,
        coin=_resolve(coin, "scenario", "coin"),
        from_date=start,
        to_date=end,
        interval=_resolve(interval, "scenario", "interval"),
        prev=_resolve(prev, "scenario", "prev"),
        next=_resolve(next_, "scenario", "next"),
    )
    session = _session()
    _finish(ctx, session.run_scenario(form), as_json, session)


@_cli.command("train")
@_range_options
@click.option("--model", "models", multiple=True, help="Model id (repeatable).")
@click.option("--precision", type=float, default=None)
@click.option("--size", type=int, default=None)
@click.option("--buffer", type=int, default=None)
@click.option("--features", type=int, default=None)
@click.option("--look-back", type=int, default=None)
@click.option("--look-ahead", type=int, default=None)
@click.option("--gap", type=float, default=None)
@click.option("--buffer-time", type=float, default=None)
@click.option("--price-threshold", type=float, default=None)
@click.option("--stop-loss", type=float, default=None)
@click.option("--take-profit", type=float, default=None)
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.pass_context
def train_cmd(
    ctx: click.Context,
    coin: str | None,
    from_dt: datetime | None,
    to_dt: datetime | None,
    models: tuple[str, ...],
    as_json: bool,
    **tuning: Any,
) -> None:
    """Train models over a range and summarise the signals."""
    start, end = _dates(from_dt, to_dt)
    values = {key: _resolve(value, "train", key) for key, value in tuning.items()}
    form = _build_form(
        TrainForm,
        coin=_resolve(coin, "train", "coin"),
        from_date=start,
        to_date=end,
        models=models,
        **values,
    )
    session = _session()
    _finish(ctx, session.train_model(form), as_json, session)


@_cli.command("history")
@_range_options
@click.pass_context
def history_cmd(ctx: click.Context, coin: str | None, from_dt: datetime | None, to_dt: datetime | None) -> None:
    """List the stored history ranges for a coin."""
    start, end = _dates(from_dt, to_dt)
    form = _build_form(RangeForm, coin=_resolve(coin, "scenario", "coin"), from_date=start, to_date=end)
    history = _session().load_history(form)
    if history is None:
        ctx.exit(1)
    click.echo(f"{history.coin}: {len(history.points)} stored ranges")
    for point in history.points:
        click.echo(f"  {point.instant.isoformat()}")


@_cli.command("load")
@_range_options
@click.pass_context
def load_cmd(ctx: click.Context, coin: str | None, from_dt: datetime | None, to_dt: datetime | None) -> None:
    """Ask the backend to load trade history for a range."""
    start, end = _dates(from_dt, to_dt)
    form = _build_form(RangeForm, coin=_resolve(coin, "scenario", "coin"), from_date=start, to_date=end)
    if not _session().trigger_load(form):
        ctx.exit(1)
    click.echo(f"Load requested for {form.coin} {start} → {end}")


@_cli.command("models")
@click.option("--coin", default=None, help="Only list models for this coin.")
@click.pass_context
def models_cmd(ctx: click.Context, coin: str | None) -> None:
    """List trained models, best accuracy first."""
    options = _session().refresh_models()
    if options is None:
        ctx.exit(1)
    for option in options:
        if coin and option.coin != coin:
            continue
        click.echo(model_option_label(option))


def main() -> None:
    """Entry point used by tests and scripts."""
    _cli.main(standalone_mode=False)


if __name__ == "__main__":
    _cli()
