"""Data models for the loan simulator.

This module defines dataclasses representing the entities used by the
simulator: the loan request collected from the user, range-checked floating
rates, individual installments of the repayment schedule and the summary
derived from them. Every model is frozen; a new set is created on each
calculation and thrown away once it has been rendered.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .catalog import DEFAULT_FLOATING_RATE, LoanType
from .errors import InvalidFloatingRate, LoanValidationError

FLOATING_RATE_MIN = Decimal("5")
FLOATING_RATE_MAX = Decimal("25")

# Upper DTI bounds, in percent, of the "safe" and "caution" bands
DTI_SAFE_LIMIT = Decimal("30")
DTI_CAUTION_LIMIT = Decimal("40")


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so floats like 6.5 do not carry binary noise into the Decimal
    return Decimal(str(value))


def dti_risk_level(dti_ratio: Decimal) -> str:
    """Classify a debt-to-income ratio as ``safe``, ``caution`` or ``risky``."""
    if dti_ratio <= DTI_SAFE_LIMIT:
        return "safe"
    if dti_ratio <= DTI_CAUTION_LIMIT:
        return "caution"
    return "risky"


class InterestType(str, Enum):
    FLAT = "flat"
    EFFECTIVE = "effective"


@dataclass(frozen=True)
class FloatingRate:
    """Annual rate in percent for one floating year.

    Rates outside ``[FLOATING_RATE_MIN, FLOATING_RATE_MAX]`` are rejected on
    construction. Use :meth:`clamp` to pull arbitrary user input into range
    the way the calculator's sliders do.
    """

    percent: Decimal

    def __post_init__(self) -> None:
        percent = _to_decimal(self.percent)
        if not FLOATING_RATE_MIN <= percent <= FLOATING_RATE_MAX:
            raise InvalidFloatingRate(
                f"Floating rate must be between {FLOATING_RATE_MIN}% and "
                f"{FLOATING_RATE_MAX}%; got {percent}%"
            )
        object.__setattr__(self, "percent", percent)

    @classmethod
    def clamp(cls, value: Any) -> "FloatingRate":
        percent = _to_decimal(value)
        return cls(max(FLOATING_RATE_MIN, min(FLOATING_RATE_MAX, percent)))


@dataclass(frozen=True)
class LoanRequest:
    """All inputs of a single simulation.

    Attributes
    ----------
    asset_price: Decimal
        Price of the asset being financed.
    down_payment_percent: Decimal
        Share of the asset price paid up front, 0-100.
    monthly_income: Decimal
        Borrower's monthly income, used for the DTI ratio.
    tenor_years: int
        Loan duration in years.
    interest_type: InterestType
        ``FLAT`` or ``EFFECTIVE``.
    fixed_rate: Decimal
        Annual rate in percent. The flat rate for flat loans, the rate of the
        fixed window for effective loans.
    fixed_period_years: int
        Length of the fixed-rate window (effective loans only).
    floating_rates: tuple of FloatingRate
        One rate per year after the fixed window. Plain numbers are accepted
        and converted.
    loan_type: LoanType, optional
        Product the request belongs to; supplies the tenor ceiling.
    """

    asset_price: Decimal
    down_payment_percent: Decimal
    monthly_income: Decimal
    tenor_years: int
    interest_type: InterestType
    fixed_rate: Decimal
    fixed_period_years: int = 0
    floating_rates: Tuple[FloatingRate, ...] = field(default_factory=tuple)
    loan_type: Optional[LoanType] = None

    def __post_init__(self) -> None:
        for name in ("asset_price", "down_payment_percent", "monthly_income", "fixed_rate"):
            object.__setattr__(self, name, _to_decimal(getattr(self, name)))
        object.__setattr__(self, "interest_type", InterestType(self.interest_type))
        rates = tuple(
            r if isinstance(r, FloatingRate) else FloatingRate(r) for r in self.floating_rates
        )
        object.__setattr__(self, "floating_rates", rates)

    @property
    def loan_amount(self) -> Decimal:
        return self.asset_price * (1 - self.down_payment_percent / Decimal(100))

    @property
    def max_tenor_years(self) -> Optional[int]:
        return self.loan_type.max_tenor_years if self.loan_type else None

    @property
    def floating_years(self) -> int:
        if self.interest_type is not InterestType.EFFECTIVE:
            return 0
        return max(0, self.tenor_years - self.fixed_period_years)

    def floating_rate_for_year(self, year: int) -> Decimal:
        """Return the annual rate for floating year ``year`` (0-indexed).

        Years the caller did not supply a rate for fall back to
        ``DEFAULT_FLOATING_RATE``.
        """
        if year < len(self.floating_rates):
            return self.floating_rates[year].percent
        return DEFAULT_FLOATING_RATE


@dataclass(frozen=True)
class Installment:
    """One month of the repayment schedule.

    ``payment`` always equals ``principal + interest``. ``balance`` is the
    outstanding principal after the payment, never negative. ``phase`` is
    ``"flat"``, ``"fixed"`` or ``"floating"`` and ``rate`` the annual rate in
    force that month.
    """

    month: int
    payment: Decimal
    principal: Decimal
    interest: Decimal
    balance: Decimal
    rate: Decimal
    phase: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "phase": self.phase,
            "rate": float(self.rate),
            "payment": float(self.payment),
            "principal": float(self.principal),
            "interest": float(self.interest),
            "balance": float(self.balance),
        }


@dataclass(frozen=True)
class LoanSummary:
    """Aggregates derived from a schedule.

    For effective loans ``monthly_payment`` is the average payment over the
    whole schedule because the installment changes between the fixed window
    and each floating year.
    """

    loan_amount: Decimal
    monthly_payment: Decimal
    total_payment: Decimal
    total_interest: Decimal
    dti_ratio: Decimal
    number_of_months: int
    interest_type: InterestType
    highest_payment: Decimal
    lowest_payment: Decimal

    @property
    def risk_level(self) -> str:
        return dti_risk_level(self.dti_ratio)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "loan_amount": float(self.loan_amount),
            "monthly_payment": float(self.monthly_payment),
            "total_payment": float(self.total_payment),
            "total_interest": float(self.total_interest),
            "dti_ratio": float(self.dti_ratio),
            "risk_level": self.risk_level,
            "number_of_months": self.number_of_months,
            "interest_type": self.interest_type.value,
            "highest_payment": float(self.highest_payment),
            "lowest_payment": float(self.lowest_payment),
        }


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of :func:`smartloan.engine.validate`."""

    error: Optional[LoanValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error
