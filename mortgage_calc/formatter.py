"""Output helpers for the mortgage calculator.

This module renders schedules, summaries and comparisons in a tabular text
format for the terminal, and converts schedule rows into plain dictionaries
for JSON and CSV export. We rely only on built-in printing and string
formatting here; the CLI decides where the text goes.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence

from .data_models import InstallmentRow
from .reporting import Comparison, YearBucket

CSV_HEADER = [
    "Month",
    "Opening_Balance",
    "Amortization",
    "Interest",
    "Insurance",
    "Installment",
    "Extra_Amortization",
    "Closing_Balance",
    "Amortization_Mode",
    "Remaining_Installments",
    "Final_Term_Estimate",
]


def serialize_row(row: InstallmentRow) -> Dict[str, Any]:
    """Convert an installment row into a JSON-serialisable dictionary."""
    return {
        "month": row.month,
        "opening_balance": float(row.opening_balance),
        "interest": float(row.interest),
        "amortization": float(row.amortization),
        "installment": float(row.installment),
        "insurance_fee": float(row.insurance_fee),
        "extra_amortization_applied": float(row.extra_amortization_applied),
        "amortization_mode": row.amortization_mode.value,
        "remaining_installments": row.remaining_installments,
        "final_term_estimate": row.final_term_estimate,
        "closing_balance": float(row.closing_balance),
    }


def serialize_schedule(rows: Iterable[InstallmentRow]) -> List[Dict[str, Any]]:
    return [serialize_row(row) for row in rows]


def serialize_years(buckets: Iterable[YearBucket]) -> List[Dict[str, Any]]:
    """Convert yearly buckets into dictionaries for chart payloads."""
    return [
        {
            "year": b.year,
            "first_month": b.first_month,
            "opening_balance": float(b.opening_balance),
            "first_installment": float(b.first_installment),
            "amortization": float(b.amortization),
            "interest": float(b.interest),
            "insurance": float(b.insurance),
            "extra_amortization": float(b.extra_amortization),
            "cumulative_paid": float(b.cumulative_paid),
            "cumulative_interest": float(b.cumulative_interest),
        }
        for b in buckets
    ]


def serialize_comparison(comparison: Comparison) -> Dict[str, Any]:
    return {
        "points": [
            {
                "month": p.month,
                "installment_sac": float(p.installment_a),
                "installment_price": float(p.installment_b),
                "balance_sac": float(p.balance_a),
                "balance_price": float(p.balance_b),
                "interest_sac": float(p.interest_a),
                "interest_price": float(p.interest_b),
                "amortization_sac": float(p.amortization_a),
                "amortization_price": float(p.amortization_b),
            }
            for p in comparison.points
        ],
        "checkpoints": [
            {
                "month": c.month,
                "total_paid_sac": float(c.total_paid_a),
                "total_paid_price": float(c.total_paid_b),
                "total_interest_sac": float(c.total_interest_a),
                "total_interest_price": float(c.total_interest_b),
                "paid_difference": float(c.paid_difference),
                "interest_difference": float(c.interest_difference),
            }
            for c in comparison.checkpoints
        ],
    }


def export_to_json(path: Path, rows: Sequence[InstallmentRow], summary: Dict[str, Any]) -> None:
    """Export schedule and summary to a JSON file."""
    data = {"summary": summary, "installments": serialize_schedule(rows)}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, rows: Iterable[InstallmentRow]) -> None:
    """Export schedule to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)
        for r in rows:
            writer.writerow(
                [
                    r.month,
                    float(r.opening_balance),
                    float(r.amortization),
                    float(r.interest),
                    float(r.insurance_fee),
                    float(r.installment),
                    float(r.extra_amortization_applied),
                    float(r.closing_balance),
                    r.amortization_mode.value,
                    r.remaining_installments,
                    r.final_term_estimate,
                ]
            )


def print_summary(summary: Dict[str, Any]) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    print(f"Summary ({summary['system']})")
    print("-" * 72)
    print(f"Principal          : {summary['principal']:.2f}")
    print(f"Monthly rate       : {summary['monthly_rate'] * 100:.4f}%")
    print(f"Total interest     : {summary['total_interest']:.2f}")
    print(f"Total insurance    : {summary['total_insurance']:.2f}")
    if summary.get("total_extra_amortization"):
        print(f"Extra amortization : {summary['total_extra_amortization']:.2f}")
    print(f"Total paid         : {summary['total_paid']:.2f}")
    print(f"Payments made      : {summary['payments_made']} of {summary['term_months']}")
    print(f"First installment  : {summary['first_installment']:.2f}")
    print(f"Last installment   : {summary['last_installment']:.2f}")
    if summary.get("target_installment") is not None:
        print(f"Target installment : {summary['target_installment']:.2f}")
    if not summary["fully_amortized"]:
        print(f"Balance not fully amortized: {summary['final_balance']:.2f} outstanding")
    print("-" * 72)


def print_schedule(rows: Iterable[InstallmentRow]) -> None:
    """Print the amortization schedule as a simple table."""
    headers = ["Month", "OpenBal", "Amort", "Interest", "Install", "Extra", "Remaining", "Estimate"]
    print("\t".join(headers))
    for r in rows:
        print(
            "\t".join(
                [
                    str(r.month),
                    f"{r.opening_balance:.2f}",
                    f"{r.amortization:.2f}",
                    f"{r.interest:.2f}",
                    f"{r.installment:.2f}",
                    f"{r.extra_amortization_applied:.2f}",
                    str(r.remaining_installments),
                    str(r.final_term_estimate),
                ]
            )
        )


def print_years(buckets: Iterable[YearBucket]) -> None:
    """Print one line per loan year with running totals."""
    print(f"{'Year':>4s} {'OpenBal':>14s} {'Amort':>12s} {'Interest':>12s} {'Paid to date':>14s}")
    for b in buckets:
        print(
            f"{b.year:4d} {b.opening_balance:14.2f} {b.amortization:12.2f} "
            f"{b.interest:12.2f} {b.cumulative_paid:14.2f}"
        )


def print_comparison(s1: Dict[str, Any], s2: Dict[str, Any], comparison: Comparison) -> None:
    """Print a comparison of two schedule summaries side by side.

    The difference column is scenario2 - scenario1; a negative difference
    means the second schedule is cheaper or shorter.
    """
    print("Comparison")
    print("=" * 72)
    keys = ["first_installment", "last_installment", "total_interest", "total_paid", "payments_made"]
    print(f"{'Metric':20s} {s1['system']:>15s} {s2['system']:>15s} {'Difference':>15s}")
    for key in keys:
        v1 = s1[key]
        v2 = s2[key]
        print(f"{key:20s} {v1:15.2f} {v2:15.2f} {v2 - v1:15.2f}")
    final = comparison.final
    if final is not None:
        print(f"Over the first {final.month} months, {s2['system']} pays "
              f"{final.paid_difference:.2f} more than {s1['system']}")
    print("=" * 72)
