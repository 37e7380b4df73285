"""Core calculation engine for the loan simulator.

This module implements the financial logic required to build monthly
repayment schedules for flat-rate loans and for effective (annuity) loans,
including loans that start with a fixed-rate window and then reset to a new
floating rate every year. Results are returned as a list of ``Installment``
objects along with a ``LoanSummary``.

The engine keeps no state between calls; every invocation works on its own
local balance and returns freshly built objects.
"""

from __future__ import annotations

import logging
from decimal import Decimal, getcontext
from typing import List, Tuple

from .data_models import (
    Installment,
    InterestType,
    LoanRequest,
    LoanSummary,
    ValidationResult,
    dti_risk_level,
)
from .errors import (
    InvalidAmount,
    InvalidFixedPeriod,
    InvalidIncome,
    InvalidRate,
    InvalidTenor,
    TenorExceedsMaximum,
)

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

# Residual balances smaller than half a cent are treated as fully repaid
_RESIDUAL = Decimal("0.005")
_ZERO = Decimal("0")


def _calculate_annuity_payment(principal: Decimal, rate_per_month: Decimal, term: int) -> Decimal:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``.
    """
    if term <= 0:
        raise ValueError("Term must be positive")
    if rate_per_month == 0:
        return principal / Decimal(term)
    factor = (1 + rate_per_month) ** term
    return principal * (rate_per_month * factor) / (factor - 1)


def _monthly_rate(annual_percent: Decimal) -> Decimal:
    return annual_percent / Decimal(100) / Decimal(12)


def _settle(balance: Decimal) -> Decimal:
    """Floor a running balance at zero and drop sub-cent residue."""
    if balance < _RESIDUAL:
        return _ZERO
    return balance


def validate(request: LoanRequest) -> ValidationResult:
    """Check a request before any schedule is built.

    Returns a ``ValidationResult`` holding the first problem found, or an
    empty result when the request can be computed. Never raises for bad
    input.
    """
    error = None
    max_tenor = request.max_tenor_years
    if not 0 <= request.down_payment_percent <= 100:
        error = InvalidAmount("Down payment must be between 0% and 100% of the asset price.")
    elif request.loan_amount <= 0:
        error = InvalidAmount("Loan amount must be greater than zero; check the asset price and down payment.")
    elif request.monthly_income <= 0:
        error = InvalidIncome("Monthly income must be greater than zero.")
    elif request.tenor_years <= 0:
        error = InvalidTenor("Tenor must be at least one year.")
    elif max_tenor is not None and request.tenor_years > max_tenor:
        error = TenorExceedsMaximum(
            f"Maximum tenor for {request.loan_type.label} is {max_tenor} years.",
            max_tenor,
        )
    elif request.fixed_rate <= 0:
        error = InvalidRate("Interest rate must be greater than zero.")
    elif request.interest_type is InterestType.EFFECTIVE and not (
        0 <= request.fixed_period_years <= request.tenor_years
    ):
        error = InvalidFixedPeriod(
            f"Fixed period must be between 0 and {request.tenor_years} years."
        )
    if error is not None:
        logger.info("Rejected loan request: %s", error)
    return ValidationResult(error)


def _flat_schedule(request: LoanRequest) -> List[Installment]:
    loan_amount = request.loan_amount
    number_of_months = request.tenor_years * 12
    # Simple interest on the original principal for the whole tenor
    total_interest = loan_amount * (request.fixed_rate / Decimal(100)) * request.tenor_years
    monthly_principal = loan_amount / Decimal(number_of_months)
    monthly_interest = total_interest / Decimal(number_of_months)
    monthly_payment = (loan_amount + total_interest) / Decimal(number_of_months)

    schedule: List[Installment] = []
    balance = loan_amount
    for month in range(1, number_of_months + 1):
        balance = _settle(balance - monthly_principal)
        schedule.append(
            Installment(
                month=month,
                payment=monthly_payment,
                principal=monthly_principal,
                interest=monthly_interest,
                balance=balance,
                rate=request.fixed_rate,
                phase="flat",
            )
        )
    return schedule


def _effective_schedule(request: LoanRequest) -> List[Installment]:
    number_of_months = request.tenor_years * 12
    fixed_months = request.fixed_period_years * 12
    floating_months = number_of_months - fixed_months

    schedule: List[Installment] = []
    balance = request.loan_amount
    month = 1

    # The fixed-window payment is sized over the whole tenor, not only the
    # fixed months; the floating years then re-amortize what is left.
    if fixed_months > 0:
        fixed_rate = _monthly_rate(request.fixed_rate)
        fixed_payment = _calculate_annuity_payment(balance, fixed_rate, number_of_months)
        for _ in range(fixed_months):
            interest = balance * fixed_rate
            principal = fixed_payment - interest
            balance = _settle(balance - principal)
            schedule.append(
                Installment(month, fixed_payment, principal, interest, balance, request.fixed_rate, "fixed")
            )
            month += 1

    year = 0
    while floating_months - year * 12 > 0:
        remaining_horizon = floating_months - year * 12
        months_in_chunk = min(12, remaining_horizon)
        annual_rate = request.floating_rate_for_year(year)
        rate = _monthly_rate(annual_rate)
        if balance > 0:
            payment = _calculate_annuity_payment(balance, rate, remaining_horizon)
        else:
            payment = _ZERO
        for _ in range(months_in_chunk):
            if balance > 0:
                interest = balance * rate
                principal = payment - interest
            else:
                # Loan already repaid; trailing months carry nothing
                payment = interest = principal = _ZERO
            balance = _settle(balance - principal)
            schedule.append(
                Installment(month, payment, principal, interest, balance, annual_rate, "floating")
            )
            month += 1
        year += 1

    return schedule


def summarize(request: LoanRequest, schedule: List[Installment]) -> LoanSummary:
    """Derive the summary metrics for ``schedule``.

    The representative monthly payment is the average over the schedule,
    which for flat loans is simply the constant installment.
    """
    number_of_months = len(schedule)
    payments = [entry.payment for entry in schedule]
    total_payment = sum(payments, _ZERO)
    monthly_payment = total_payment / Decimal(number_of_months)
    dti_ratio = monthly_payment / request.monthly_income * Decimal(100)
    return LoanSummary(
        loan_amount=request.loan_amount,
        monthly_payment=monthly_payment,
        total_payment=total_payment,
        total_interest=total_payment - request.loan_amount,
        dti_ratio=dti_ratio,
        number_of_months=number_of_months,
        interest_type=request.interest_type,
        highest_payment=max(payments),
        lowest_payment=min(payments),
    )


def compute_schedule(request: LoanRequest) -> Tuple[List[Installment], LoanSummary]:
    """Compute the repayment schedule and summary for a loan.

    Parameters
    ----------
    request: LoanRequest
        The loan inputs. ``validate`` is run first; a rejected request raises
        the corresponding ``LoanValidationError`` and nothing is returned.

    Returns
    -------
    schedule: List[Installment]
        One installment per month, ``tenor_years * 12`` entries.
    summary: LoanSummary
        Average monthly payment, totals, DTI ratio and payment range.
    """
    validate(request).raise_for_error()

    if request.interest_type is InterestType.FLAT:
        schedule = _flat_schedule(request)
    else:
        schedule = _effective_schedule(request)

    summary = summarize(request, schedule)
    logger.debug(
        "Computed %s schedule: %d months, total payment %.2f, DTI %.2f%%",
        request.interest_type.value,
        summary.number_of_months,
        summary.total_payment,
        summary.dti_ratio,
    )
    return schedule, summary
