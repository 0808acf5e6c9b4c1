"""Pytest configuration and fixtures."""

import logging
from decimal import Decimal

import pytest

from mortgage_calc.data_models import AmortizationSystem, ExtraAmortizationMode, LoanParameters


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo handler changes made by ``setup_logging`` during a test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def make_params():
    """Factory for loan parameters with small, easy-to-check defaults."""

    def _make(**overrides) -> LoanParameters:
        values = {
            "principal": Decimal("120000"),
            "term_months": 120,
            "annual_rate": Decimal("6"),
            "monetary_correction_rate": Decimal("0"),
            "target_installment": None,
            "extra_amortization": Decimal("0"),
            "extra_amortization_mode": ExtraAmortizationMode.NONE,
            "system": AmortizationSystem.SAC,
        }
        values.update(overrides)
        return LoanParameters(**values)

    return _make


@pytest.fixture
def original_form_payload() -> dict:
    """Payload in the shape sent by the original calculator front end."""
    return {
        "valor": 166078,
        "num_parcelas": 420,
        "taxa_anual": 5.64,
        "tr": 0.17,
        "parcela_alvo": 1200,
        "amortizacao_extra": 0,
        "tipo_amortizacao": "SEM AMORTIZAÇÃO",
        "sistema": "SAC",
    }
