import pytest

from lbo.model.assumptions import AssumptionSet, CompanySnapshot


@pytest.fixture
def snapshot():
    return CompanySnapshot(
        base_revenue=1_000.0,
        base_ebitda=100.0,
        current_share_price=20.0,
        shares_outstanding=50.0,
        current_debt=200.0,
        current_cash=50.0,
        base_capex=40.0,
        ticker="TEST",
    )


@pytest.fixture
def assumptions():
    return AssumptionSet()


@pytest.fixture
def zero_equity_assumptions():
    """No fees; revolver sized so the sponsor equity plug is exactly 0 at 12.0x."""
    return AssumptionSet(transaction_fee_pct=0.0, revolver_size=800.0)
