"""Error types raised by the loan simulator.

Every error in this module describes a problem with the user's input. They
all derive from ``ValueError`` so callers that already catch ``ValueError``
(the CLI parsers and the web form handler) surface them without special
casing. Messages are written for end users and are shown verbatim.
"""

from __future__ import annotations


class LoanValidationError(ValueError):
    """Base class for rejected loan requests."""


class InvalidAmount(LoanValidationError):
    pass


class InvalidIncome(LoanValidationError):
    pass


class InvalidTenor(LoanValidationError):
    pass


class TenorExceedsMaximum(LoanValidationError):
    """The tenor is longer than the loan type allows.

    ``max_tenor_years`` carries the ceiling so a front end can offer it as a
    correction.
    """

    def __init__(self, message: str, max_tenor_years: int) -> None:
        super().__init__(message)
        self.max_tenor_years = max_tenor_years


class InvalidRate(LoanValidationError):
    pass


class InvalidFixedPeriod(LoanValidationError):
    pass


class InvalidFloatingRate(LoanValidationError):
    pass


class UnknownLoanType(LoanValidationError):
    pass
