"""Output helpers for the loan simulator.

This module provides simple functions to render repayment schedules and
summaries in a tabular text format. ``click.echo`` is used instead of
``print`` so output is captured correctly by the CLI test runner.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple

import click

from .catalog import LoanType
from .data_models import Installment, LoanSummary

RISK_COLORS = {"safe": "green", "caution": "yellow", "risky": "red"}


def print_summary(summary: LoanSummary) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    click.echo("Summary")
    click.echo("-" * 72)
    click.echo(f"Loan amount        : {summary.loan_amount:,.2f}")
    click.echo(f"Interest type      : {summary.interest_type.value}")
    click.echo(f"Monthly payment    : {summary.monthly_payment:,.2f}")
    # Effective loans change installment between fixed and floating years
    if summary.highest_payment != summary.lowest_payment:
        click.echo(f"Payment range      : {summary.lowest_payment:,.2f} - {summary.highest_payment:,.2f}")
    click.echo(f"Total interest     : {summary.total_interest:,.2f}")
    click.echo(f"Total payment      : {summary.total_payment:,.2f}")
    risk = summary.risk_level
    dti = click.style(f"{summary.dti_ratio:.1f}% ({risk})", fg=RISK_COLORS[risk])
    click.echo(f"DTI ratio          : {dti}")
    click.echo(f"Months             : {summary.number_of_months}")
    click.echo("-" * 72)


def print_schedule(schedule: Iterable[Installment]) -> None:
    """Print the repayment schedule as a simple table."""
    headers = ["Month", "Phase", "Rate", "Payment", "Principal", "Interest", "Balance"]
    click.echo("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.month),
            entry.phase,
            f"{entry.rate:.2f}%",
            f"{entry.payment:.2f}",
            f"{entry.principal:.2f}",
            f"{entry.interest:.2f}",
            f"{entry.balance:.2f}",
        ]
        click.echo("\t".join(row))


def print_loan_types(loan_types: Sequence[LoanType]) -> None:
    click.echo(f"{'Id':12s} {'Label':20s} {'Max tenor':>10s} {'Rate':>8s}")
    for lt in loan_types:
        click.echo(f"{lt.id:12s} {lt.label:20s} {lt.max_tenor_years:>8d} y {lt.default_rate:>7.2f}%")


def comparison_rows(s1: LoanSummary, s2: LoanSummary) -> List[Tuple[str, float, float, float]]:
    """Return ``(metric, scenario1, scenario2, difference)`` rows."""
    rows = []
    for key in ("monthly_payment", "total_payment", "total_interest", "dti_ratio"):
        v1 = float(getattr(s1, key))
        v2 = float(getattr(s2, key))
        rows.append((key, v1, v2, v2 - v1))
    return rows


def print_comparison(s1: LoanSummary, s2: LoanSummary) -> None:
    """Print a comparison of two loan summaries side by side.

    The difference column is scenario2 - scenario1, so a negative value means
    the second scenario is cheaper.
    """
    click.echo("Comparison")
    click.echo("=" * 72)
    click.echo(f"{'Metric':20s} {'Scenario1':>15s} {'Scenario2':>15s} {'Difference':>15s}")
    for key, v1, v2, diff in comparison_rows(s1, s2):
        click.echo(f"{key:20s} {v1:15.2f} {v2:15.2f} {diff:15.2f}")
    click.echo("=" * 72)


def summary_lines(summary: LoanSummary) -> Dict[str, str]:
    """Label -> formatted value pairs, used by the web templates."""
    return {
        "Loan amount": f"{summary.loan_amount:,.2f}",
        "Monthly payment": f"{summary.monthly_payment:,.2f}",
        "Total interest": f"{summary.total_interest:,.2f}",
        "Total payment": f"{summary.total_payment:,.2f}",
        "DTI ratio": f"{summary.dti_ratio:.1f}%",
    }
