"""Tests for loan parameter construction and validation."""

from dataclasses import FrozenInstanceError
from decimal import Decimal

import pytest

from mortgage_calc.data_models import AmortizationSystem, ExtraAmortizationMode, LoanParameters
from mortgage_calc.exceptions import InvalidParameterError


class TestValidation:
    def test_valid_parameters_pass(self, make_params) -> None:
        make_params().validate()

    def test_zero_rate_is_accepted(self, make_params) -> None:
        make_params(annual_rate=Decimal("0")).validate()

    @pytest.mark.parametrize(
        "field,value",
        [
            ("principal", Decimal("0")),
            ("principal", Decimal("-100")),
            ("term_months", 0),
            ("term_months", -12),
            ("term_months", True),
            ("term_months", 12.5),
            ("annual_rate", Decimal("-1")),
            ("annual_rate", Decimal("NaN")),
            ("monetary_correction_rate", Decimal("-0.1")),
            ("extra_amortization", Decimal("-1")),
            ("target_installment", Decimal("0")),
            ("principal", Decimal("Infinity")),
        ],
    )
    def test_invalid_field(self, make_params, field, value) -> None:
        with pytest.raises(InvalidParameterError) as exc_info:
            make_params(**{field: value}).validate()

        assert exc_info.value.field == field

    def test_whole_number_amounts_become_decimals(self) -> None:
        params = LoanParameters(principal=200000, term_months=360, annual_rate=9, extra_amortization=100)
        params.validate()

        assert params.principal == Decimal("200000")
        assert isinstance(params.principal, Decimal)
        assert isinstance(params.annual_rate, Decimal)
        assert isinstance(params.extra_amortization, Decimal)

    @pytest.mark.parametrize("field,value", [("principal", 1500.5), ("principal", True), ("annual_rate", 5.64)])
    def test_float_and_bool_amounts_rejected(self, make_params, field, value) -> None:
        with pytest.raises(InvalidParameterError) as exc_info:
            make_params(**{field: value}).validate()

        assert exc_info.value.field == field

    def test_unknown_mode_rejected(self, make_params) -> None:
        with pytest.raises(InvalidParameterError):
            make_params(extra_amortization_mode="SOMETIMES").validate()

    def test_parameters_are_frozen(self, make_params) -> None:
        params = make_params()
        with pytest.raises(FrozenInstanceError):
            params.principal = Decimal("1")


class TestFromMapping:
    def test_english_field_names(self) -> None:
        params = LoanParameters.from_mapping(
            {
                "principal": "200000",
                "term_months": "360",
                "annual_rate": "8.99",
                "monetary_correction_rate": "0.5",
                "extra_amortization": "100",
                "extra_amortization_mode": "reduce_term",
                "system": "price",
            }
        )

        assert params.principal == Decimal("200000")
        assert params.term_months == 360
        assert params.annual_rate == Decimal("8.99")
        assert params.monetary_correction_rate == Decimal("0.5")
        assert params.extra_amortization == Decimal("100")
        assert params.extra_amortization_mode is ExtraAmortizationMode.REDUCE_TERM
        assert params.system is AmortizationSystem.PRICE
        assert params.target_installment is None

    def test_original_payload_keys(self, original_form_payload) -> None:
        params = LoanParameters.from_mapping(original_form_payload)

        assert params.principal == Decimal("166078")
        assert params.term_months == 420
        assert params.annual_rate == Decimal("5.64")
        assert params.monetary_correction_rate == Decimal("0.17")
        assert params.target_installment == Decimal("1200")
        assert params.extra_amortization_mode is ExtraAmortizationMode.NONE
        assert params.system is AmortizationSystem.SAC

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("REDUZIR PARCELA", ExtraAmortizationMode.REDUCE_INSTALLMENT),
            ("Reduzir prazo", ExtraAmortizationMode.REDUCE_TERM),
            ("reduce-installment", ExtraAmortizationMode.REDUCE_INSTALLMENT),
            ("none", ExtraAmortizationMode.NONE),
        ],
    )
    def test_mode_labels(self, label, expected) -> None:
        assert ExtraAmortizationMode.parse(label) is expected

    def test_blank_optional_fields_use_defaults(self) -> None:
        params = LoanParameters.from_mapping(
            {
                "principal": "1000",
                "term_months": "10",
                "annual_rate": "5",
                "monetary_correction_rate": "",
                "target_installment": " ",
                "extra_amortization_mode": "",
            }
        )

        assert params.monetary_correction_rate == 0
        assert params.target_installment is None
        assert params.extra_amortization_mode is ExtraAmortizationMode.NONE

    def test_missing_required_field(self) -> None:
        with pytest.raises(InvalidParameterError) as exc_info:
            LoanParameters.from_mapping({"principal": "1000", "annual_rate": "5"})

        assert exc_info.value.field == "term_months"

    @pytest.mark.parametrize("term", ["12.5", "abc", True])
    def test_bad_term(self, term) -> None:
        with pytest.raises(InvalidParameterError) as exc_info:
            LoanParameters.from_mapping({"principal": "1000", "term_months": term, "annual_rate": "5"})

        assert exc_info.value.field == "term_months"

    def test_whole_number_term_string(self) -> None:
        params = LoanParameters.from_mapping({"principal": "1000", "term_months": "12.0", "annual_rate": "5"})

        assert params.term_months == 12

    def test_bad_number(self) -> None:
        with pytest.raises(InvalidParameterError) as exc_info:
            LoanParameters.from_mapping({"principal": "lots", "term_months": "12", "annual_rate": "5"})

        assert exc_info.value.field == "principal"

    def test_unknown_system(self) -> None:
        with pytest.raises(InvalidParameterError) as exc_info:
            LoanParameters.from_mapping(
                {"principal": "1000", "term_months": "12", "annual_rate": "5", "system": "GERMAN"}
            )

        assert exc_info.value.field == "system"
