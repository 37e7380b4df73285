"""Catalog of supported loan products.

Each loan type carries the longest tenor a lender offers for it and the
annual rate used to pre-fill the calculator. The engine only consumes the
tenor ceiling; the default rate is a convenience for the CLI and web form.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List

from .errors import UnknownLoanType


@dataclass(frozen=True)
class LoanType:
    """A loan product offered by the simulator.

    Attributes
    ----------
    id: str
        Stable identifier used in forms and on the command line.
    label: str
        Display name, also used in validation messages.
    max_tenor_years: int
        Longest tenor accepted for this product.
    default_rate: Decimal
        Annual interest rate in percent suggested for this product.
    """

    id: str
    label: str
    max_tenor_years: int
    default_rate: Decimal


LOAN_TYPES: Dict[str, LoanType] = {
    "KPR_Rumah": LoanType("KPR_Rumah", "KPR Rumah", 30, Decimal("6.5")),
    "Mobil_Baru": LoanType("Mobil_Baru", "Kredit Mobil Baru", 7, Decimal("5.5")),
    "Multiguna": LoanType("Multiguna", "Kredit Multiguna", 10, Decimal("8.0")),
}

DEFAULT_LOAN_TYPE = "KPR_Rumah"

# Rate pre-filled for every floating year until the user adjusts it
DEFAULT_FLOATING_RATE = Decimal("11")


def get_loan_type(loan_type_id: str) -> LoanType:
    try:
        return LOAN_TYPES[loan_type_id]
    except KeyError:
        choices = ", ".join(LOAN_TYPES)
        raise UnknownLoanType(
            f"Unknown loan type '{loan_type_id}'; choose one of: {choices}"
        ) from None


def list_loan_types() -> List[LoanType]:
    return list(LOAN_TYPES.values())
