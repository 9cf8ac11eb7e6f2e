"""
Shared fixtures.
"""

from datetime import date

import pytest

from ratecurves.conventions import BusinessDayConvention, Calendar, DayCount
from ratecurves.curves import DepositRateHelper
from ratecurves.quotes import SimpleQuote
from ratecurves.settings import settings


EVALUATION_DATE = date(2020, 3, 11)
REFERENCE_DATE = date(2020, 3, 13)

DEPOSIT_QUOTES = [
    ("1W", -0.00523),
    ("1M", -0.00503),
    ("3M", -0.00473),
    ("6M", -0.00429),
    ("1Y", -0.00339),
]


@pytest.fixture(autouse=True)
def reset_settings():
    """Every test starts from default settings."""
    settings.reset()
    yield
    settings.reset()


def make_deposits(quotes=DEPOSIT_QUOTES, evaluation_date=EVALUATION_DATE):
    """Fresh EUR-style deposit helpers (T+2, ACT/360, modified following, end of month)."""
    return [
        DepositRateHelper(
            SimpleQuote(rate, name=tenor),
            tenor,
            fixing_days=2,
            calendar=Calendar(),
            convention=BusinessDayConvention.MODIFIED_FOLLOWING,
            end_of_month=True,
            day_count=DayCount.ACT_360,
            evaluation_date=evaluation_date,
        )
        for tenor, rate in quotes
    ]


@pytest.fixture
def deposit_helpers():
    return make_deposits()
