"""Data models for the mortgage calculator.

This module defines the dataclasses and enumerations exchanged between the
engine and its consumers: the loan parameters a calculation is requested
with, and the installment rows the schedule is made of. Both are frozen so
that a schedule handed to a table, chart or comparison cannot be altered by
it.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional

from .exceptions import InvalidParameterError
from .utils import decimal_from_value, normalize_label


class AmortizationSystem(str, Enum):
    """Amortization system used to build the schedule."""

    SAC = "SAC"  # constant amortization, decreasing installments
    PRICE = "PRICE"  # constant installment (French amortization)

    @classmethod
    def parse(cls, value: Any) -> "AmortizationSystem":
        if isinstance(value, cls):
            return value
        label = normalize_label(str(value))
        for member in cls:
            if member.value == label:
                return member
        raise InvalidParameterError(
            f"System must be one of {', '.join(m.value for m in cls)}; got {value!r}",
            field="system",
        )


class ExtraAmortizationMode(str, Enum):
    """How an extra principal payment reshapes the rest of the schedule.

    ``REDUCE_INSTALLMENT`` keeps the term and lowers future installments;
    ``REDUCE_TERM`` keeps the installment and ends the loan earlier.
    """

    NONE = "NONE"
    REDUCE_INSTALLMENT = "REDUCE_INSTALLMENT"
    REDUCE_TERM = "REDUCE_TERM"

    @classmethod
    def parse(cls, value: Any) -> "ExtraAmortizationMode":
        if isinstance(value, cls):
            return value
        label = normalize_label(str(value))
        member = _MODE_ALIASES.get(label)
        if member is None:
            raise InvalidParameterError(
                f"Extra amortization mode must be one of "
                f"{', '.join(m.value for m in cls)}; got {value!r}",
                field="extra_amortization_mode",
            )
        return member


# Labels accepted besides the member names. The Portuguese ones are the
# options offered by the original calculator form.
_MODE_ALIASES = {
    "NONE": ExtraAmortizationMode.NONE,
    "SEM_AMORTIZACAO": ExtraAmortizationMode.NONE,
    "REDUCE_INSTALLMENT": ExtraAmortizationMode.REDUCE_INSTALLMENT,
    "INSTALLMENT": ExtraAmortizationMode.REDUCE_INSTALLMENT,
    "REDUZIR_PARCELA": ExtraAmortizationMode.REDUCE_INSTALLMENT,
    "REDUCE_TERM": ExtraAmortizationMode.REDUCE_TERM,
    "TERM": ExtraAmortizationMode.REDUCE_TERM,
    "REDUZIR_PRAZO": ExtraAmortizationMode.REDUCE_TERM,
}

# Payload keys used by the original front end, mapped to field names.
FIELD_ALIASES = {
    "valor": "principal",
    "num_parcelas": "term_months",
    "taxa_anual": "annual_rate",
    "tr": "monetary_correction_rate",
    "parcela_alvo": "target_installment",
    "amortizacao_extra": "extra_amortization",
    "tipo_amortizacao": "extra_amortization_mode",
    "sistema": "system",
}

_AMOUNT_FIELDS = (
    "principal",
    "annual_rate",
    "monetary_correction_rate",
    "target_installment",
    "extra_amortization",
)


@dataclass(frozen=True)
class LoanParameters:
    """Inputs of a single schedule calculation.

    Attributes
    ----------
    principal: Decimal
        Financed amount.
    term_months: int
        Maximum number of installments.
    annual_rate: Decimal
        Nominal annual interest rate in percent (``5.64`` means 5.64 %).
    monetary_correction_rate: Decimal
        Index correction in percent applied to the balance once per period.
    target_installment: Optional[Decimal]
        Installment the borrower aims for. Carried through to the summary
        for display; the recurrence does not use it.
    extra_amortization: Decimal
        Additional principal paid every period.
    extra_amortization_mode: ExtraAmortizationMode
        Whether extra payments shorten the term or shrink the installment.
    system: AmortizationSystem
        SAC or PRICE.
    """

    principal: Decimal
    term_months: int
    annual_rate: Decimal
    monetary_correction_rate: Decimal = Decimal("0")
    target_installment: Optional[Decimal] = None
    extra_amortization: Decimal = Decimal("0")
    extra_amortization_mode: ExtraAmortizationMode = ExtraAmortizationMode.NONE
    system: AmortizationSystem = AmortizationSystem.SAC

    def __post_init__(self) -> None:
        # Whole-number amounts are exact, so they are stored as Decimal.
        # Floats and bools are left alone for validate() to reject.
        for name in _AMOUNT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, int) and not isinstance(value, bool):
                object.__setattr__(self, name, Decimal(value))

    def validate(self) -> None:
        """Raise ``InvalidParameterError`` if any field is out of range."""
        if isinstance(self.term_months, bool) or not isinstance(self.term_months, int):
            raise InvalidParameterError("Term must be a whole number of months", field="term_months")
        if self.term_months <= 0:
            raise InvalidParameterError("Term must be positive", field="term_months")
        _require_finite(self.principal, "principal")
        if self.principal <= 0:
            raise InvalidParameterError("Principal must be positive", field="principal")
        _require_finite(self.annual_rate, "annual_rate")
        # Zero is accepted so that the zero-rate PRICE fallback stays reachable.
        if self.annual_rate < 0:
            raise InvalidParameterError("Annual rate must not be negative", field="annual_rate")
        _require_finite(self.monetary_correction_rate, "monetary_correction_rate")
        if self.monetary_correction_rate < 0:
            raise InvalidParameterError(
                "Monetary correction rate must not be negative", field="monetary_correction_rate"
            )
        _require_finite(self.extra_amortization, "extra_amortization")
        if self.extra_amortization < 0:
            raise InvalidParameterError(
                "Extra amortization must not be negative", field="extra_amortization"
            )
        if self.target_installment is not None:
            _require_finite(self.target_installment, "target_installment")
            if self.target_installment <= 0:
                raise InvalidParameterError(
                    "Target installment must be positive", field="target_installment"
                )
        if not isinstance(self.extra_amortization_mode, ExtraAmortizationMode):
            raise InvalidParameterError(
                "Unknown extra amortization mode", field="extra_amortization_mode"
            )
        if not isinstance(self.system, AmortizationSystem):
            raise InvalidParameterError("Unknown amortization system", field="system")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LoanParameters":
        """Build validated parameters from form fields, JSON or CLI options.

        Values may be strings or numbers. Blank optional values fall back to
        their defaults. Keys of the original calculator payload (``valor``,
        ``num_parcelas``...) are accepted as aliases.
        """
        fields = {}
        for key, value in data.items():
            name = FIELD_ALIASES.get(key, key)
            if isinstance(value, str):
                value = value.strip()
            if value is None or value == "":
                continue
            fields[name] = value

        for required in ("principal", "term_months", "annual_rate"):
            if required not in fields:
                raise InvalidParameterError(f"Missing required field {required}", field=required)

        params = cls(
            principal=_decimal_field(fields, "principal"),
            term_months=_int_field(fields, "term_months"),
            annual_rate=_decimal_field(fields, "annual_rate"),
            monetary_correction_rate=_decimal_field(fields, "monetary_correction_rate", "0"),
            target_installment=_decimal_field(fields, "target_installment", None),
            extra_amortization=_decimal_field(fields, "extra_amortization", "0"),
            extra_amortization_mode=ExtraAmortizationMode.parse(
                fields.get("extra_amortization_mode", ExtraAmortizationMode.NONE)
            ),
            system=AmortizationSystem.parse(fields.get("system", AmortizationSystem.SAC)),
        )
        params.validate()
        return params


@dataclass(frozen=True)
class InstallmentRow:
    """One period of an amortization schedule.

    ``installment`` is the total cash due: amortization, interest and the
    insurance fee. The extra payment is reported separately in
    ``extra_amortization_applied``. ``closing_balance`` is the balance
    carried into the next period; a positive value on the last row means the
    loan was not fully amortized within the term.
    """

    month: int
    opening_balance: Decimal
    interest: Decimal
    amortization: Decimal
    installment: Decimal
    extra_amortization_applied: Decimal
    amortization_mode: ExtraAmortizationMode
    remaining_installments: int
    final_term_estimate: int
    insurance_fee: Decimal
    closing_balance: Decimal


def _require_finite(value: Decimal, name: str) -> None:
    if not isinstance(value, Decimal) or not value.is_finite():
        raise InvalidParameterError(f"{name} must be a finite number", field=name)


def _decimal_field(fields: Mapping[str, Any], name: str, default: Optional[str] = None) -> Optional[Decimal]:
    if name not in fields:
        return None if default is None else Decimal(default)
    try:
        return decimal_from_value(fields[name])
    except ValueError as exc:
        raise InvalidParameterError(str(exc), field=name) from exc


def _int_field(fields: Mapping[str, Any], name: str) -> int:
    value = fields[name]
    if isinstance(value, bool):
        raise InvalidParameterError(f"{name} must be a whole number", field=name)
    if isinstance(value, int):
        return value
    try:
        number = decimal_from_value(value)
    except ValueError as exc:
        raise InvalidParameterError(str(exc), field=name) from exc
    if not number.is_finite() or number != number.to_integral_value():
        raise InvalidParameterError(f"{name} must be a whole number", field=name)
    return int(number)
