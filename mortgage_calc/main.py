"""Command-line interface for the mortgage calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full SAC or PRICE amortization schedules, view
summaries or yearly totals, and compare both systems for the same loan.
Results can be printed to the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Optional

import click

from .config import AppConfig
from .data_models import AmortizationSystem, ExtraAmortizationMode, LoanParameters
from .engine import compute_schedule
from .exceptions import ConfigurationError, InvalidParameterError
from .formatter import (
    export_to_csv,
    export_to_json,
    print_comparison,
    print_schedule,
    print_summary,
    print_years,
)
from .logging import setup_logging
from .reporting import aggregate_by_year, compare_schedules, summarize
from .utils import parse_amount, parse_percent

MAX_PRINTED_ROWS = 120

OPTION_HINTS = {
    "principal": "--principal",
    "term_months": "--term",
    "annual_rate": "--rate",
    "monetary_correction_rate": "--correction",
    "target_installment": "--target-installment",
    "extra_amortization": "--extra",
    "extra_amortization_mode": "--mode",
    "system": "--system",
}


def _amount(ctx: click.Context, param: click.Parameter, value: Optional[str]):
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


def _percent(ctx: click.Context, param: click.Parameter, value: Optional[str]):
    if value is None:
        return None
    try:
        return parse_percent(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


def loan_options(func: Callable) -> Callable:
    """Attach the loan parameter options shared by every command."""
    options = [
        click.option("--principal", "-p", required=True, callback=_amount, help="Financed amount (accepts 200k, 1.5m)"),
        click.option("--term", "-t", "term_months", required=True, type=int, help="Term in months"),
        click.option("--rate", "-r", "annual_rate", required=True, callback=_percent, help="Nominal annual interest rate (percent)"),
        click.option("--correction", "-c", "correction", default="0", callback=_percent, help="Monetary correction per month (percent)"),
        click.option("--target-installment", "target_installment", callback=_amount, help="Installment you aim for (informational)"),
        click.option("--extra", "-e", "extra", default="0", callback=_amount, help="Extra amortization paid every month"),
        click.option(
            "--mode",
            "mode",
            type=click.Choice([m.value for m in ExtraAmortizationMode], case_sensitive=False),
            default=ExtraAmortizationMode.NONE.value,
            help="How extra amortization affects the schedule",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def system_option(func: Callable) -> Callable:
    return click.option(
        "--system",
        "system",
        type=click.Choice([s.value for s in AmortizationSystem], case_sensitive=False),
        default=AmortizationSystem.SAC.value,
        help="Amortization system",
    )(func)


def build_parameters(
    principal,
    term_months: int,
    annual_rate,
    correction,
    target_installment,
    extra,
    mode: str,
    system: str = AmortizationSystem.SAC.value,
) -> LoanParameters:
    """Assemble validated ``LoanParameters`` from parsed CLI options."""
    try:
        return LoanParameters.from_mapping(
            {
                "principal": principal,
                "term_months": term_months,
                "annual_rate": annual_rate,
                "monetary_correction_rate": correction,
                "target_installment": target_installment,
                "extra_amortization": extra,
                "extra_amortization_mode": mode,
                "system": system,
            }
        )
    except InvalidParameterError as exc:
        hint = OPTION_HINTS.get(exc.field) if exc.field else None
        raise click.BadParameter(str(exc), param_hint=hint) from exc


@click.group()
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING...)")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str]) -> None:
    """A command-line mortgage calculator for SAC and PRICE schedules."""
    try:
        config = AppConfig.from_env()
    except ConfigurationError as exc:
        raise click.UsageError(str(exc)) from exc
    setup_logging(log_level or config.log_level, config.log_format)
    ctx.obj = config


@cli.command()
@loan_options
@system_option
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
@click.option("--all-rows", is_flag=True, help="Print every row instead of the first 120")
@click.pass_obj
def schedule(config: AppConfig, output: Optional[str], all_rows: bool, **options) -> None:
    """Compute and print the full amortization schedule."""
    params = build_parameters(**options)
    rows = compute_schedule(params, config.insurance)
    summary_data = summarize(params, rows)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, rows, summary_data)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, rows)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv", param_hint="--output")
        click.echo(f"Schedule exported to {path}")
        return

    print_summary(summary_data)
    if len(rows) > MAX_PRINTED_ROWS and not all_rows:
        click.echo(f"Schedule has {len(rows)} rows; showing first {MAX_PRINTED_ROWS} rows.")
        print_schedule(rows[:MAX_PRINTED_ROWS])
    else:
        print_schedule(rows)


@cli.command()
@loan_options
@system_option
@click.option("--output", "output", type=str, help="Output file path (.json)")
@click.pass_obj
def summary(config: AppConfig, output: Optional[str], **options) -> None:
    """Compute and print only the summary metrics for a loan."""
    params = build_parameters(**options)
    summary_data = summarize(params, compute_schedule(params, config.insurance))
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension", param_hint="--output")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": summary_data}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(summary_data)


@cli.command()
@loan_options
@system_option
@click.pass_obj
def yearly(config: AppConfig, **options) -> None:
    """Print yearly totals of the schedule."""
    params = build_parameters(**options)
    print_years(aggregate_by_year(compute_schedule(params, config.insurance)))


@cli.command()
@loan_options
@click.pass_obj
def compare(config: AppConfig, **options) -> None:
    """Compare SAC and PRICE schedules for the same loan.

    Example:

        mortgage-calc compare -p 166078 -t 420 -r 5.64 -c 0.17
    """
    sac_params = build_parameters(system=AmortizationSystem.SAC.value, **options)
    price_params = build_parameters(system=AmortizationSystem.PRICE.value, **options)
    sac_rows = compute_schedule(sac_params, config.insurance)
    price_rows = compute_schedule(price_params, config.insurance)
    print_comparison(
        summarize(sac_params, sac_rows),
        summarize(price_params, price_rows),
        compare_schedules(sac_rows, price_rows),
    )


if __name__ == "__main__":
    cli()
