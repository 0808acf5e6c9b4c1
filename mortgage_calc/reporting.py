"""Read-only views over a computed schedule.

The functions here never mutate the rows they receive. They derive the
figures shown next to a schedule: totals for the summary, yearly buckets for
charts, pages for the installment table and a month-by-month comparison of
two schedules (usually SAC against PRICE for the same loan).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from .data_models import InstallmentRow, LoanParameters
from .policies import ZERO, effective_annual_rate, monthly_rate_from_annual

DEFAULT_PAGE_SIZE = 10


def summarize(params: LoanParameters, rows: Sequence[InstallmentRow]) -> Dict[str, object]:
    """Return aggregate metrics for a schedule.

    Amounts are converted to ``float`` so the result can be dumped to JSON
    directly. ``fully_amortized`` is False when the term ran out before the
    balance reached zero.
    """
    monthly_rate = monthly_rate_from_annual(params.annual_rate)
    total_interest = sum((r.interest for r in rows), ZERO)
    total_amortization = sum((r.amortization for r in rows), ZERO)
    total_insurance = sum((r.insurance_fee for r in rows), ZERO)
    total_extra = sum((r.extra_amortization_applied for r in rows), ZERO)
    total_installments = sum((r.installment for r in rows), ZERO)
    final_balance = rows[-1].closing_balance if rows else ZERO

    return {
        "system": params.system.value,
        "amortization_mode": params.extra_amortization_mode.value,
        "principal": float(params.principal),
        "term_months": params.term_months,
        "monthly_rate": float(monthly_rate),
        "effective_annual_rate": float(effective_annual_rate(monthly_rate)),
        "total_interest": float(total_interest),
        "total_amortization": float(total_amortization),
        "total_insurance": float(total_insurance),
        "total_extra_amortization": float(total_extra),
        "total_paid": float(total_installments + total_extra),
        "payments_made": len(rows),
        "first_installment": float(rows[0].installment) if rows else 0.0,
        "last_installment": float(rows[-1].installment) if rows else 0.0,
        "max_installment": float(max((r.installment for r in rows), default=ZERO)),
        "final_balance": float(final_balance),
        "fully_amortized": final_balance == 0,
        "target_installment": (
            float(params.target_installment) if params.target_installment is not None else None
        ),
    }


@dataclass(frozen=True)
class YearBucket:
    """Totals for one loan year (months 1-12 are year 1, and so on)."""

    year: int
    first_month: int
    opening_balance: Decimal
    first_installment: Decimal
    amortization: Decimal
    interest: Decimal
    insurance: Decimal
    extra_amortization: Decimal
    cumulative_paid: Decimal
    cumulative_interest: Decimal


def aggregate_by_year(rows: Sequence[InstallmentRow]) -> List[YearBucket]:
    """Bucket rows by loan year, with running totals of payments and interest."""
    buckets: List[YearBucket] = []
    cumulative_paid = ZERO
    cumulative_interest = ZERO
    for start in range(0, len(rows), 12):
        chunk = rows[start : start + 12]
        first = chunk[0]
        paid = sum((r.installment + r.extra_amortization_applied for r in chunk), ZERO)
        interest = sum((r.interest for r in chunk), ZERO)
        cumulative_paid += paid
        cumulative_interest += interest
        buckets.append(
            YearBucket(
                year=math.ceil(first.month / 12),
                first_month=first.month,
                opening_balance=first.opening_balance,
                first_installment=first.installment,
                amortization=sum((r.amortization for r in chunk), ZERO),
                interest=interest,
                insurance=sum((r.insurance_fee for r in chunk), ZERO),
                extra_amortization=sum((r.extra_amortization_applied for r in chunk), ZERO),
                cumulative_paid=cumulative_paid,
                cumulative_interest=cumulative_interest,
            )
        )
    return buckets


def first_year_breakdown(rows: Sequence[InstallmentRow]) -> Dict[str, float]:
    """Split the first twelve installments into amortization, interest and insurance."""
    first_year = rows[:12]
    return {
        "amortization": float(sum((r.amortization for r in first_year), ZERO)),
        "interest": float(sum((r.interest for r in first_year), ZERO)),
        "insurance": float(sum((r.insurance_fee for r in first_year), ZERO)),
    }


@dataclass(frozen=True)
class Page:
    """A slice of schedule rows for tabular display."""

    items: List[InstallmentRow]
    page: int
    per_page: int
    total_pages: int
    total_items: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def paginate(rows: Sequence[InstallmentRow], page: int = 1, per_page: int = DEFAULT_PAGE_SIZE) -> Page:
    """Return page ``page`` (1-based) of ``rows``.

    Out-of-range page numbers are clamped to the first or last page. An
    empty schedule yields a single empty page.
    """
    if per_page <= 0:
        raise ValueError("per_page must be positive")
    total_pages = max(1, math.ceil(len(rows) / per_page))
    page = min(max(page, 1), total_pages)
    start = (page - 1) * per_page
    return Page(
        items=list(rows[start : start + per_page]),
        page=page,
        per_page=per_page,
        total_pages=total_pages,
        total_items=len(rows),
    )


@dataclass(frozen=True)
class ComparisonPoint:
    month: int
    installment_a: Decimal
    installment_b: Decimal
    balance_a: Decimal
    balance_b: Decimal
    interest_a: Decimal
    interest_b: Decimal
    amortization_a: Decimal
    amortization_b: Decimal


@dataclass(frozen=True)
class CumulativeCheckpoint:
    month: int
    total_paid_a: Decimal
    total_paid_b: Decimal
    total_interest_a: Decimal
    total_interest_b: Decimal

    @property
    def paid_difference(self) -> Decimal:
        """Total paid under ``b`` minus total paid under ``a``."""
        return self.total_paid_b - self.total_paid_a

    @property
    def interest_difference(self) -> Decimal:
        return self.total_interest_b - self.total_interest_a


@dataclass(frozen=True)
class Comparison:
    points: List[ComparisonPoint] = field(default_factory=list)
    checkpoints: List[CumulativeCheckpoint] = field(default_factory=list)

    @property
    def final(self) -> Optional[CumulativeCheckpoint]:
        return self.checkpoints[-1] if self.checkpoints else None


def compare_schedules(a: Sequence[InstallmentRow], b: Sequence[InstallmentRow]) -> Comparison:
    """Zip two schedules month by month up to the shorter one.

    Besides the per-month points, cumulative totals are checkpointed every
    twelve months and at the last compared month.
    """
    length = min(len(a), len(b))
    points: List[ComparisonPoint] = []
    checkpoints: List[CumulativeCheckpoint] = []
    paid_a = paid_b = interest_a = interest_b = ZERO
    for i in range(length):
        row_a, row_b = a[i], b[i]
        paid_a += row_a.installment
        paid_b += row_b.installment
        interest_a += row_a.interest
        interest_b += row_b.interest
        points.append(
            ComparisonPoint(
                month=row_a.month,
                installment_a=row_a.installment,
                installment_b=row_b.installment,
                balance_a=row_a.opening_balance,
                balance_b=row_b.opening_balance,
                interest_a=row_a.interest,
                interest_b=row_b.interest,
                amortization_a=row_a.amortization,
                amortization_b=row_b.amortization,
            )
        )
        if i % 12 == 0 or i == length - 1:
            checkpoints.append(
                CumulativeCheckpoint(
                    month=row_a.month,
                    total_paid_a=paid_a,
                    total_paid_b=paid_b,
                    total_interest_a=interest_a,
                    total_interest_b=interest_b,
                )
            )
    return Comparison(points=points, checkpoints=checkpoints)
