"""
Module: money_engines.deposits
Responsibility:
    Maturity arithmetic for fixed and recurring deposits and the current
    value of unit-based pension holdings.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Fixed deposit: A = P x (1 + r/n)^(n x t), r = rate / 100,
      t = tenure_months / 12, n = 12 / 4 / 1 for monthly / quarterly /
      yearly compounding.
    - Recurring deposit: every monthly instalment compounds for the months
      left in the tenure, the first instalment for the full tenure.
    - Money results are rounded half-up to 2 places.

Failure modes:
    - ValueError for an unknown compounding frequency, negative tenure, or
      yearly compounding on a recurring deposit.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from money_engines.ratios import percentage
from money_engines.tracer import traced_engine

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")
TWELVE = Decimal("12")
CENT = Decimal("0.01")


class Compounding(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

    @property
    def periods_per_year(self) -> Decimal:
        return {
            Compounding.MONTHLY: Decimal("12"),
            Compounding.QUARTERLY: Decimal("4"),
            Compounding.YEARLY: Decimal("1"),
        }[self]


@dataclass(frozen=True)
class MaturityResult:
    maturity_amount: Decimal
    total_deposited: Decimal
    interest_earned: Decimal


@dataclass(frozen=True)
class UnitValue:
    current_value: Decimal
    absolute_return: Decimal
    percentage_return: Decimal


def _round(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def _growth(rate: Decimal, compounding: Compounding, months: Decimal) -> Decimal:
    n = compounding.periods_per_year
    r = rate / HUNDRED
    return (ONE + r / n) ** (n * months / TWELVE)


@traced_engine(
    "deposits.fixed",
    "1.0",
    fingerprint_fields=("principal", "rate", "tenure_months", "compounding"),
)
def fixed_deposit_maturity(
    *,
    principal: Decimal,
    rate: Decimal,
    tenure_months: int,
    compounding: Compounding = Compounding.QUARTERLY,
) -> MaturityResult:
    compounding = Compounding(compounding)
    if tenure_months < 0:
        raise ValueError("tenure_months cannot be negative")
    amount = principal * _growth(rate, compounding, Decimal(tenure_months))
    return MaturityResult(
        maturity_amount=_round(amount),
        total_deposited=principal,
        interest_earned=_round(amount - principal),
    )


@traced_engine(
    "deposits.recurring",
    "1.0",
    fingerprint_fields=("monthly_deposit", "rate", "tenure_months", "compounding"),
)
def recurring_deposit_maturity(
    *,
    monthly_deposit: Decimal,
    rate: Decimal,
    tenure_months: int,
    compounding: Compounding = Compounding.QUARTERLY,
) -> MaturityResult:
    compounding = Compounding(compounding)
    if compounding == Compounding.YEARLY:
        raise ValueError("recurring deposits compound monthly or quarterly")
    if tenure_months < 0:
        raise ValueError("tenure_months cannot be negative")

    amount = ZERO
    for instalment in range(1, tenure_months + 1):
        remaining = Decimal(tenure_months - instalment + 1)
        amount += monthly_deposit * _growth(rate, compounding, remaining)

    deposited = monthly_deposit * tenure_months
    return MaturityResult(
        maturity_amount=_round(amount),
        total_deposited=deposited,
        interest_earned=_round(amount - deposited),
    )


def unit_holding_value(
    total_units: Decimal,
    current_nav: Decimal,
    total_contributed: Decimal,
) -> UnitValue:
    """Value of a NAV-priced holding (e.g. pension units) against contributions."""
    value = total_units * current_nav
    gain = value - total_contributed
    return UnitValue(
        current_value=_round(value),
        absolute_return=_round(gain),
        percentage_return=_round(percentage(gain, total_contributed)),
    )
