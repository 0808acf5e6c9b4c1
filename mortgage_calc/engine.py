"""Core calculation engine for the mortgage calculator.

This module builds month-by-month amortization schedules for the two
supported systems:

* SAC, where the scheduled amortization is constant and the installment
  decreases as interest falls;
* PRICE, where the installment (amortization plus interest) is constant and
  the amortization grows over time.

Both recurrences apply a periodic monetary correction to the balance, add a
flat insurance fee to every installment and honor an optional extra
principal payment per period. The functions are pure: every call owns its
own balance and returns a fresh list of ``InstallmentRow`` objects.
"""

from __future__ import annotations

import logging
from decimal import Decimal, getcontext
from typing import Callable, Dict, List

from .data_models import (
    AmortizationSystem,
    ExtraAmortizationMode,
    InstallmentRow,
    LoanParameters,
)
from .policies import (
    DEFAULT_INSURANCE,
    ZERO,
    InsurancePolicy,
    annuity_payment,
    apply_extra_amortization,
    correction_factor,
    monthly_rate_from_annual,
    periods_to_repay_annuity,
    periods_to_repay_constant_amortization,
    settle_tolerance,
)

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

ScheduleGenerator = Callable[..., List[InstallmentRow]]


def _settle(balance: Decimal, tolerance: Decimal) -> Decimal:
    """Clamp a post-payment balance, dropping rounding dust to zero."""
    if balance < tolerance:
        return ZERO
    return balance


def _note_ignored_extra(params: LoanParameters) -> None:
    if params.extra_amortization_mode is ExtraAmortizationMode.NONE and params.extra_amortization > 0:
        logger.debug(
            "Extra amortization of %.2f ignored: mode is %s",
            params.extra_amortization,
            ExtraAmortizationMode.NONE.value,
        )


def _report_unamortized(params: LoanParameters, rows: List[InstallmentRow]) -> None:
    last = rows[-1]
    if last.closing_balance > 0:
        logger.warning(
            "%s schedule ended after %d months with %.2f still outstanding",
            params.system.value,
            last.month,
            last.closing_balance,
        )


def compute_schedule_sac(
    params: LoanParameters, insurance: InsurancePolicy = DEFAULT_INSURANCE
) -> List[InstallmentRow]:
    """Compute a constant-amortization (SAC) schedule.

    Each period the balance is first corrected by the monetary index, then
    interest is charged on the corrected balance, and the constant scheduled
    amortization ``principal / term`` plus any extra payment is deducted.
    Under ``REDUCE_INSTALLMENT`` an extra payment re-spreads the remaining
    balance over the remaining months, lowering later amortizations.

    Raises
    ------
    InvalidParameterError
        If ``params`` fails validation. No rows are produced in that case.
    """
    params.validate()
    term = params.term_months
    rate_per_month = monthly_rate_from_annual(params.annual_rate)
    correction = correction_factor(params.monetary_correction_rate)
    fee = insurance.fee(params.principal, term)
    mode = params.extra_amortization_mode
    tolerance = settle_tolerance(params.principal)
    _note_ignored_extra(params)

    scheduled_amortization = params.principal / Decimal(term)
    balance = params.principal
    rows: List[InstallmentRow] = []

    for month in range(1, term + 1):
        opening_balance = balance
        balance = balance * correction
        interest = balance * rate_per_month
        amortization = min(scheduled_amortization, balance)
        installment = amortization + interest + fee

        extra = apply_extra_amortization(mode, params.extra_amortization, balance, amortization)
        balance = _settle(balance - amortization - extra.applied, tolerance)
        remaining = term - month

        if extra.reshapes_installment and balance > 0 and remaining > 0:
            scheduled_amortization = balance / Decimal(remaining)

        if balance == 0:
            estimate = 0
        elif mode is ExtraAmortizationMode.REDUCE_TERM:
            estimate = min(
                remaining,
                periods_to_repay_constant_amortization(balance, scheduled_amortization),
            )
        else:
            estimate = remaining

        rows.append(
            InstallmentRow(
                month=month,
                opening_balance=opening_balance,
                interest=interest,
                amortization=amortization,
                installment=installment,
                extra_amortization_applied=extra.applied,
                amortization_mode=mode,
                remaining_installments=remaining,
                final_term_estimate=estimate,
                insurance_fee=fee,
                closing_balance=balance,
            )
        )
        if balance == 0:
            break

    logger.debug("SAC schedule computed: %d of %d months", len(rows), term)
    _report_unamortized(params, rows)
    return rows


def compute_schedule_price(
    params: LoanParameters, insurance: InsurancePolicy = DEFAULT_INSURANCE
) -> List[InstallmentRow]:
    """Compute a constant-installment (PRICE) schedule.

    The installment is fixed once with the annuity formula on the principal.
    The balance is seeded with the first period's correction already
    applied, and afterwards the correction is compounded onto each
    post-payment balance. A zero monthly rate falls back to ``principal /
    term`` with no interest. Under ``REDUCE_INSTALLMENT`` an extra payment
    re-amortizes the installment over the remaining months; under
    ``REDUCE_TERM`` the installment is kept and the loan ends earlier.

    Raises
    ------
    InvalidParameterError
        If ``params`` fails validation. No rows are produced in that case.
    """
    params.validate()
    term = params.term_months
    rate_per_month = monthly_rate_from_annual(params.annual_rate)
    correction = correction_factor(params.monetary_correction_rate)
    fee = insurance.fee(params.principal, term)
    mode = params.extra_amortization_mode
    tolerance = settle_tolerance(params.principal)
    _note_ignored_extra(params)

    fixed_installment =annuity_payment(params.principal, rate_per_month, term)
    balance = params.principal * correction
    rows: List[InstallmentRow] = []

    for month in range(1, term + 1):
        opening_balance = balance
        interest = balance * rate_per_month
        amortization = min(fixed_installment - interest, balance)
        installment = amortization + interest + fee

        extra = apply_extra_amortization(mode, params.extra_amortization, balance, amortization)
        balance = _settle((balance - amortization - extra.applied) * correction, tolerance)
        remaining = term - month

        if extra.reshapes_installment and balance > 0 and remaining > 0:
            fixed_installment = annuity_payment(balance, rate_per_month, remaining)

        if balance == 0:
            estimate = 0
        elif mode is ExtraAmortizationMode.REDUCE_TERM:
            try:
                needed = periods_to_repay_annuity(balance, rate_per_month, fixed_installment)
            except ValueError:
                # The installment no longer covers interest; the term caps the loan.
                needed = remaining
            estimate = min(remaining, needed)
        else:
            estimate = remaining

        rows.append(
            InstallmentRow(
                month=month,
                opening_balance=opening_balance,
                interest=interest,
                amortization=amortization,
                installment=installment,
                extra_amortization_applied=extra.applied,
                amortization_mode=mode,
                remaining_installments=remaining,
                final_term_estimate=estimate,
                insurance_fee=fee,
                closing_balance=balance,
            )
        )
        if balance == 0:
            break

    logger.debug("PRICE schedule computed: %d of %d months", len(rows), term)
    _report_unamortized(params, rows)
    return rows


SCHEDULE_GENERATORS: Dict[AmortizationSystem, ScheduleGenerator] = {
    AmortizationSystem.SAC: compute_schedule_sac,
    AmortizationSystem.PRICE: compute_schedule_price,
}


def compute_schedule(
    params: LoanParameters, insurance: InsurancePolicy = DEFAULT_INSURANCE
) -> List[InstallmentRow]:
    """Compute the schedule for the system selected in ``params.system``."""
    params.validate()
    generator = SCHEDULE_GENERATORS[params.system]
    return generator(params, insurance)
