"""Shared fixtures for the loan simulator tests."""

from decimal import Decimal

import pytest

from smartloan.catalog import get_loan_type
from smartloan.data_models import InterestType, LoanRequest
from smartloan_web.app import create_app


def make_request(**overrides):
    """Build a valid ``LoanRequest`` with a 100,000,000 loan, overriding any field.

    Defaults: asset price 125,000,000 with 20 % down, income 15,000,000,
    one-year effective loan at 12 % with the whole tenor fixed.
    """
    fields = {
        "asset_price": Decimal("125000000"),
        "down_payment_percent": Decimal("20"),
        "monthly_income": Decimal("15000000"),
        "tenor_years": 1,
        "interest_type": InterestType.EFFECTIVE,
        "fixed_rate": Decimal("12"),
        "fixed_period_years": 1,
        "floating_rates": (),
        "loan_type": get_loan_type("KPR_Rumah"),
    }
    fields.update(overrides)
    return LoanRequest(**fields)


@pytest.fixture()
def app():
    flask_app = create_app({"TESTING": True, "COMPARISON_DATABASE_URL": "sqlite://"})
    yield flask_app


@pytest.fixture()
def client(app):
    with app.test_client() as test_client:
        yield test_client
