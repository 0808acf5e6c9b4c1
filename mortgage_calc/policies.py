"""Rate, insurance and extra-payment rules shared by both amortization systems.

Everything here is stateless: each function takes the values it needs and
returns a new value, so the SAC and PRICE recurrences in ``engine`` can call
them freely from independent calculations.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_CEILING, Decimal, getcontext

from .data_models import ExtraAmortizationMode

getcontext().prec = 28  # increase precision for financial calculations

ONE = Decimal(1)
HUNDRED = Decimal(100)
ZERO = Decimal(0)
# Residual balances below half a cent are treated as fully repaid.
BALANCE_EPSILON = Decimal("0.005")
# Residuals this small relative to the principal are arithmetic dust.
DUST_RATIO = Decimal("1e-12")


def settle_tolerance(principal: Decimal) -> Decimal:
    """Largest residual balance of a ``principal`` loan counted as repaid.

    Capped at half a cent, and scaled down for tiny loans so that a real
    balance is never mistaken for dust.
    """
    return min(BALANCE_EPSILON, principal * DUST_RATIO)


def monthly_rate_from_annual(annual_rate: Decimal) -> Decimal:
    """Convert a nominal annual percentage into an effective monthly fraction.

    ``(1 + annual/100) ** (1/12) - 1``. A plain division by 12 gives a
    different, higher rate and must not be used in its place.
    """
    return (ONE + annual_rate / HUNDRED) ** (ONE / Decimal(12)) - ONE


def effective_annual_rate(monthly_rate: Decimal) -> Decimal:
    """Inverse of :func:`monthly_rate_from_annual`, as a fraction."""
    return (ONE + monthly_rate) ** 12 - ONE


def correction_factor(monetary_correction_rate: Decimal) -> Decimal:
    """Return the per-period uplift multiplier for a correction percentage."""
    return ONE + monetary_correction_rate / HUNDRED


def annuity_payment(principal: Decimal, rate_per_month: Decimal, term: int) -> Decimal:
    """Return the constant installment that amortizes ``principal``.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    When the interest rate is zero the formula is undefined and the payment
    simplifies to ``P / n``.
    """
    if term <= 0:
        raise ValueError("Term must be positive")
    if rate_per_month == 0:
        return principal / Decimal(term)
    factor = (ONE + rate_per_month) ** term
    return principal * (rate_per_month * factor) / (factor - ONE)


@dataclass(frozen=True)
class InsurancePolicy:
    """Flat monthly insurance premium.

    The fee is ``principal * premium_rate / term + fixed_fee`` and stays the
    same for every installment of a loan.
    """

    premium_rate: Decimal = Decimal("0.185")
    fixed_fee: Decimal = Decimal("25")

    def fee(self, principal: Decimal, term_months: int) -> Decimal:
        return principal * self.premium_rate / Decimal(term_months) + self.fixed_fee


DEFAULT_INSURANCE = InsurancePolicy()


@dataclass(frozen=True)
class ExtraPayment:
    """Outcome of applying the extra-amortization policy to one period.

    Attributes
    ----------
    applied: Decimal
        Extra principal actually deducted this period, after clamping.
    reshapes_installment: bool
        True when the scheduled amortization or installment must be
        recomputed from the reduced balance for the following periods.
    """

    applied: Decimal
    reshapes_installment: bool


def apply_extra_amortization(
    mode: ExtraAmortizationMode,
    requested: Decimal,
    balance: Decimal,
    amortization: Decimal,
) -> ExtraPayment:
    """Decide how much extra principal is paid this period and its effect.

    ``balance`` is the balance the period's amortization is deducted from.
    The extra payment is clamped so that it never takes the balance below
    zero and is never negative. Both reducing modes deduct the same amount;
    they differ only in whether future installments are recomputed.
    """
    if mode is ExtraAmortizationMode.NONE or requested <= 0:
        return ExtraPayment(applied=ZERO, reshapes_installment=False)
    applied = max(ZERO, min(requested, balance - amortization))
    reshape = mode is ExtraAmortizationMode.REDUCE_INSTALLMENT and applied > 0
    return ExtraPayment(applied=applied, reshapes_installment=reshape)


def _ceil(value: Decimal) -> int:
    # Tolerate rounding dust so that 11.0000000001 periods count as 11.
    return int((value - Decimal("1e-9")).to_integral_value(rounding=ROUND_CEILING))


def periods_to_repay_constant_amortization(balance: Decimal, amortization: Decimal) -> int:
    """Number of constant-amortization periods needed to clear ``balance``."""
    if balance <= 0:
        return 0
    if amortization <= 0:
        raise ValueError("Amortization must be positive")
    return _ceil(balance / amortization)


def periods_to_repay_annuity(balance: Decimal, rate_per_month: Decimal, installment: Decimal) -> int:
    """Number of annuity periods needed to clear ``balance``.

    Solves ``B = P * (1 - (1 + i)^-n) / i`` for ``n``. Raises ``ValueError``
    when the installment does not even cover the interest, in which case the
    balance is never repaid.
    """
    if balance <= 0:
        return 0
    if installment <= 0:
        raise ValueError("Installment must be positive")
    if rate_per_month == 0:
        return _ceil(balance / installment)
    coverage = ONE - balance * rate_per_month / installment
    if coverage <= 0:
        raise ValueError("Installment does not cover interest")
    return _ceil(-coverage.ln() / (ONE + rate_per_month).ln())
