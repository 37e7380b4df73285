"""Command-line interface for the loan simulator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full repayment schedules, view summaries,
compare two loan scenarios or list the supported loan types. Results can be
printed to the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
import logging
import shlex
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import click

from .catalog import DEFAULT_LOAN_TYPE, LOAN_TYPES, get_loan_type, list_loan_types
from .data_models import FloatingRate, Installment, InterestType, LoanRequest, LoanSummary
from .engine import compute_schedule
from .formatter import print_comparison, print_loan_types, print_schedule, print_summary
from .utils import parse_amount, parse_percent

MAX_PRINTED_ROWS = 120
DEFAULT_FIXED_PERIOD_YEARS = 3


def build_request(
    asset_price: str,
    income: str,
    tenor: int,
    down_payment: str = "20",
    loan_type: str = DEFAULT_LOAN_TYPE,
    interest_type: str = InterestType.EFFECTIVE.value,
    rate: Optional[str] = None,
    fixed_period: Optional[int] = None,
    floating_rate: Iterable[str] = (),
) -> LoanRequest:
    """Build a ``LoanRequest`` from raw user input.

    Amounts and percentages are parsed leniently, the loan type supplies the
    default rate when ``rate`` is empty and floating rates are clamped into
    the accepted range. Parsing problems raise ``ValueError``; whether the
    resulting request is acceptable is left to ``engine.validate``.
    """
    product = get_loan_type(loan_type)
    rate_value = parse_percent(rate) if rate not in (None, "") else product.default_rate
    if fixed_period is None:
        fixed_period = min(DEFAULT_FIXED_PERIOD_YEARS, tenor)
    try:
        kind = InterestType(interest_type.lower())
    except ValueError:
        raise ValueError(f"Interest type must be 'effective' or 'flat'; got {interest_type}") from None
    return LoanRequest(
        asset_price=parse_amount(asset_price),
        down_payment_percent=parse_percent(down_payment),
        monthly_income=parse_amount(income),
        tenor_years=int(tenor),
        interest_type=kind,
        fixed_rate=rate_value,
        fixed_period_years=int(fixed_period),
        floating_rates=tuple(FloatingRate.clamp(parse_percent(r)) for r in floating_rate),
        loan_type=product,
    )


def _compute(params: Dict[str, Any]) -> Tuple[List[Installment], LoanSummary]:
    """Run the engine for CLI parameters, turning input errors into click errors."""
    try:
        request = build_request(**params)
        return compute_schedule(request)
    except ValueError as exc:
        raise click.ClickException(str(exc))


def export_to_json(path: Path, schedule: List[Installment], summary: LoanSummary) -> None:
    """Export schedule and summary to a JSON file."""
    data = {
        "summary": summary.as_dict(),
        "schedule": [entry.as_dict() for entry in schedule],
    }
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, schedule: List[Installment]) -> None:
    """Export schedule to a CSV file."""
    header = ["Month", "Phase", "Rate", "Payment", "Principal", "Interest", "Balance"]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for e in schedule:
            writer.writerow(
                [
                    e.month,
                    e.phase,
                    float(e.rate),
                    float(e.payment),
                    float(e.principal),
                    float(e.interest),
                    float(e.balance),
                ]
            )


def loan_options(func: Callable) -> Callable:
    """Attach the loan input options shared by every computing command."""
    options = [
        click.option("--asset-price", "-a", "asset_price", required=True, help="Asset price, e.g. 500000000 or 500m"),
        click.option("--income", "-i", "income", required=True, help="Monthly income"),
        click.option("--tenor", "-t", "tenor", required=True, type=int, help="Loan tenor in years"),
        click.option("--down-payment", "-d", "down_payment", default="20", show_default=True, help="Down payment in percent of the asset price"),
        click.option("--loan-type", "loan_type", type=click.Choice(list(LOAN_TYPES)), default=DEFAULT_LOAN_TYPE, show_default=True, help="Loan product"),
        click.option("--interest-type", "interest_type", type=click.Choice([t.value for t in InterestType]), default=InterestType.EFFECTIVE.value, show_default=True, help="Interest regime"),
        click.option("--rate", "-r", "rate", help="Annual interest rate in percent (defaults to the loan type's rate)"),
        click.option("--fixed-period", "fixed_period", type=int, help="Fixed-rate years for effective loans (default: 3, capped at the tenor)"),
        click.option("--floating-rate", "floating_rate", multiple=True, help="Annual rate for each floating year, in order; missing years use 11%"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log calculation details")
def cli(verbose: bool) -> None:
    """A loan simulator for flat, effective and fixed/floating loans."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(output: Optional[str], **params: Any) -> None:
    """Compute and print the full repayment schedule."""
    schedule_entries, summary = _compute(params)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, schedule_entries, summary)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, schedule_entries)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
        return
    print_summary(summary)
    # Limit schedule length printed to avoid flooding the terminal
    if len(schedule_entries) > MAX_PRINTED_ROWS:
        click.echo(
            f"Schedule has {len(schedule_entries)} rows; showing first {MAX_PRINTED_ROWS} rows."
        )
    print_schedule(schedule_entries[:MAX_PRINTED_ROWS])


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(output: Optional[str], **params: Any) -> None:
    """Compute and print only the summary metrics for a loan."""
    _, summary_data = _compute(params)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": summary_data.as_dict()}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(summary_data)


@click.command("scenario")
@loan_options
def _scenario(**params: Any) -> None:
    """Option parser for one ``compare`` scenario; never invoked directly."""


def parse_scenario_opts(opts: str) -> Dict[str, Any]:
    """Turn a quoted option string into ``build_request`` keyword arguments."""
    ctx = _scenario.make_context("scenario", shlex.split(opts))
    return dict(ctx.params)


@cli.command()
@click.option("--scenario1", "scenario1", required=True, help="First scenario options quoted string")
@click.option("--scenario2", "scenario2", required=True, help="Second scenario options quoted string")
def compare(scenario1: str, scenario2: str) -> None:
    """Compare two loan scenarios.

    Scenarios are provided as quoted option strings, for example:

        smartloan compare --scenario1 "-a 500m -i 15m -t 15" --scenario2 "-a 500m -i 15m -t 20 --interest-type flat"
    """
    _, summary1 = _compute(parse_scenario_opts(scenario1))
    _, summary2 = _compute(parse_scenario_opts(scenario2))
    print_comparison(summary1, summary2)


@cli.command("loan-types")
def loan_types() -> None:
    """List the supported loan products."""
    print_loan_types(list_loan_types())


if __name__ == "__main__":
    cli()
