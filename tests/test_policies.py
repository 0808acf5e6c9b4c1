"""Tests for rate conversion, insurance and extra-payment rules."""

from decimal import Decimal

import pytest

from mortgage_calc.data_models import ExtraAmortizationMode
from mortgage_calc.policies import (
    DEFAULT_INSURANCE,
    InsurancePolicy,
    annuity_payment,
    apply_extra_amortization,
    correction_factor,
    effective_annual_rate,
    monthly_rate_from_annual,
    periods_to_repay_annuity,
    periods_to_repay_constant_amortization,
)


class TestRates:
    def test_monthly_rate_is_effective_not_linear(self) -> None:
        monthly = monthly_rate_from_annual(Decimal("12"))

        assert float(monthly) == pytest.approx(0.0094887929, rel=1e-8)
        assert monthly < Decimal("0.01")

    def test_round_trip_to_annual(self) -> None:
        monthly = monthly_rate_from_annual(Decimal("5.64"))

        assert effective_annual_rate(monthly) == pytest.approx(Decimal("0.0564"))

    def test_zero_rate(self) -> None:
        assert monthly_rate_from_annual(Decimal("0")) == 0

    def test_correction_factor(self) -> None:
        assert correction_factor(Decimal("0.17")) == Decimal("1.0017")
        assert correction_factor(Decimal("0")) == 1


class TestAnnuityPayment:
    def test_standard_formula(self) -> None:
        payment = annuity_payment(Decimal("1000"), Decimal("0.01"), 12)

        assert float(payment) == pytest.approx(88.8488, abs=1e-4)

    def test_zero_rate_divides_evenly(self) -> None:
        assert annuity_payment(Decimal("1200"), Decimal("0"), 12) == Decimal("100")

    def test_term_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            annuity_payment(Decimal("1000"), Decimal("0.01"), 0)


class TestInsurancePolicy:
    def test_default_fee(self) -> None:
        fee = DEFAULT_INSURANCE.fee(Decimal("166078"), 420)

        assert float(fee) == pytest.approx(98.1534, abs=1e-4)

    def test_custom_constants(self) -> None:
        policy = InsurancePolicy(premium_rate=Decimal("0.1"), fixed_fee=Decimal("10"))

        assert policy.fee(Decimal("1200"), 12) == Decimal("20")


class TestExtraAmortizationPolicy:
    def test_none_applies_nothing(self) -> None:
        extra = apply_extra_amortization(
            ExtraAmortizationMode.NONE, Decimal("500"), Decimal("10000"), Decimal("100")
        )

        assert extra.applied == 0
        assert extra.reshapes_installment is False

    def test_reduce_term_holds_installment(self) -> None:
        extra = apply_extra_amortization(
            ExtraAmortizationMode.REDUCE_TERM, Decimal("500"), Decimal("10000"), Decimal("100")
        )

        assert extra.applied == Decimal("500")
        assert extra.reshapes_installment is False

    def test_reduce_installment_reshapes(self) -> None:
        extra = apply_extra_amortization(
            ExtraAmortizationMode.REDUCE_INSTALLMENT, Decimal("500"), Decimal("10000"), Decimal("100")
        )

        assert extra.applied == Decimal("500")
        assert extra.reshapes_installment is True

    @pytest.mark.parametrize(
        "mode", [ExtraAmortizationMode.REDUCE_TERM, ExtraAmortizationMode.REDUCE_INSTALLMENT]
    )
    def test_clamped_to_remaining_balance(self, mode) -> None:
        extra = apply_extra_amortization(mode, Decimal("5000"), Decimal("1000"), Decimal("100"))

        assert extra.applied == Decimal("900")

    def test_never_negative(self) -> None:
        extra = apply_extra_amortization(
            ExtraAmortizationMode.REDUCE_INSTALLMENT, Decimal("500"), Decimal("100"), Decimal("150")
        )

        assert extra.applied == 0
        assert extra.reshapes_installment is False


class TestPeriodsToRepay:
    def test_constant_amortization(self) -> None:
        assert periods_to_repay_constant_amortization(Decimal("1000"), Decimal("300")) == 4
        assert periods_to_repay_constant_amortization(Decimal("900"), Decimal("300")) == 3
        assert periods_to_repay_constant_amortization(Decimal("0"), Decimal("300")) == 0

    def test_annuity_inverts_payment_formula(self) -> None:
        rate = Decimal("0.01")
        payment = annuity_payment(Decimal("1000"), rate, 12)

        assert periods_to_repay_annuity(Decimal("1000"), rate, payment) == 12
        assert periods_to_repay_annuity(Decimal("500"), rate, payment) == 6

    def test_annuity_zero_rate(self) -> None:
        assert periods_to_repay_annuity(Decimal("1000"), Decimal("0"), Decimal("100")) == 10

    def test_installment_below_interest(self) -> None:
        with pytest.raises(ValueError):
            periods_to_repay_annuity(Decimal("100000"), Decimal("0.01"), Decimal("500"))
