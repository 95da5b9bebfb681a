"""
Unit tests for the year-by-year projection and debt waterfall
"""

import pytest

from lbo.model.assumptions import AssumptionSet, CompanySnapshot
from lbo.model.entry_valuation import build_entry_valuation
from lbo.model.projection import ProjectionState, project_year, project_years, projections_df, seed_state


def _run(snapshot, a):
    return project_years(snapshot, build_entry_valuation(snapshot, a), a)


STRESS_CASES = [
    AssumptionSet(),
    AssumptionSet(ebitda_margin=0.05, senior_multiple=8.0, subordinated_multiple=3.0),
    AssumptionSet(revenue_growth=(-0.30,), ebitda_margin=0.02, capex_pct_revenue=0.08),
    AssumptionSet(ebitda_margin=0.60, cash_sweep_pct=1.0, senior_amort_pct=0.5,
                  subordinated_amort_pct=0.3, holding_period=8),
]


class TestOperatingBuild:

    def test_single_year(self):
        # revenue0 = 1000, growth 10%, margin 25%
        snap = CompanySnapshot(1_000.0, 250.0, 10.0, 100.0, 0.0, 0.0)
        a = AssumptionSet(holding_period=1, revenue_growth=(0.10,), ebitda_margin=0.25)
        (p,) = _run(snap, a)
        assert p.revenue == pytest.approx(1_100.0)
        assert p.ebitda == pytest.approx(275.0)
        assert p.depreciation == pytest.approx(27.5)
        assert p.ebit == pytest.approx(247.5)
        assert p.ebitda_margin == pytest.approx(0.25)

    def test_growth_list_shorter_than_hold(self, snapshot):
        a = AssumptionSet(holding_period=4, revenue_growth=(0.10, 0.02))
        projs = _run(snapshot, a)
        assert [p.revenue_growth for p in projs] == [0.10, 0.02, 0.02, 0.02]
        assert projs[-1].revenue == pytest.approx(1_000 * 1.10 * 1.02 ** 3)

    def test_depreciation_rate_is_configurable(self, snapshot):
        a = AssumptionSet(da_pct_revenue=0.04)
        p = _run(snapshot, a)[0]
        assert p.depreciation == pytest.approx(p.revenue * 0.04)

    def test_taxes_floored_at_zero(self, snapshot):
        a = AssumptionSet(ebitda_margin=0.01)
        p = _run(snapshot, a)[0]
        assert p.ebt < 0
        assert p.taxes == 0.0
        assert p.net_income == p.ebt


class TestYearOneWaterfall:
    """Default assumptions, hand-computed."""

    @pytest.fixture
    def year1(self, snapshot, assumptions):
        return _run(snapshot, assumptions)[0]

    def test_interest(self, year1):
        assert year1.senior_interest == pytest.approx(26.0)
        assert year1.subordinated_interest == pytest.approx(13.5)
        assert year1.revolver_interest == pytest.approx(2.75)
        assert year1.interest == pytest.approx(42.25)

    def test_fcf(self, year1):
        assert year1.net_income == pytest.approx(150.5625)
        assert year1.fcf == pytest.approx(134.3625)
        assert year1.cash_available_for_debt_service == pytest.approx(184.3625)

    def test_waterfall(self, year1):
        assert year1.mandatory_amortization == pytest.approx(20.0)
        assert year1.cash_sweep == pytest.approx(91.584375)
        assert year1.subordinated_amortization == 0.0
        assert year1.total_debt_service == pytest.approx(153.834375)

    def test_balances_and_dividend(self, year1):
        assert year1.senior_debt == pytest.approx(288.415625)
        assert year1.subordinated_debt == 150.0
        assert year1.cash_flow_to_equity == pytest.approx(30.528125)
        assert year1.dividend_payment == pytest.approx(15.2640625)
        assert year1.ending_cash == pytest.approx(15.2640625)
        assert year1.net_debt == pytest.approx(288.415625 + 150.0 - 15.2640625)


class TestStateCarry:

    def test_seed_uses_entry_cash(self, snapshot, assumptions):
        state = seed_state(snapshot, build_entry_valuation(snapshot, assumptions))
        assert state == ProjectionState(400.0, 150.0, 50.0, 1_000.0)

    def test_balances_roll_forward(self, snapshot, assumptions):
        projs = _run(snapshot, assumptions)
        for prev, cur in zip(projs, projs[1:]):
            assert cur.beginning_cash == prev.ending_cash
            assert cur.beginning_senior_debt == prev.senior_debt
            assert cur.beginning_subordinated_debt == prev.subordinated_debt

    def test_interest_on_beginning_balances(self, snapshot, assumptions):
        projs = _run(snapshot, assumptions)
        for p in projs:
            assert p.senior_interest == p.beginning_senior_debt * assumptions.senior_rate
            assert p.subordinated_interest == p.beginning_subordinated_debt * assumptions.subordinated_rate

    def test_revolver_interest_on_full_facility(self, snapshot, assumptions):
        for p in _run(snapshot, assumptions):
            assert p.revolver_interest == pytest.approx(50.0 * 0.055)

    def test_project_year_is_pure(self, assumptions):
        state = ProjectionState(400.0, 150.0, 50.0, 1_000.0)
        assert project_year(1, state, assumptions) == project_year(1, state, assumptions)

    def test_negative_cash_available_draws_senior(self, snapshot):
        # -5% margin: year-1 FCF of -139.45 swamps the 50.0 opening cash
        p = _run(snapshot, AssumptionSet(ebitda_margin=-0.05))[0]
        assert p.cash_available_for_debt_service == pytest.approx(-89.45)
        assert p.mandatory_amortization == pytest.approx(-89.45)
        assert p.cash_sweep == 0.0
        assert p.subordinated_amortization == 0.0
        assert p.senior_debt == pytest.approx(489.45)
        assert p.senior_debt > p.beginning_senior_debt
        assert p.dividend_payment == 0.0
        assert p.ending_cash == 0.0


@pytest.mark.parametrize("a", STRESS_CASES)
class TestBalanceGuarantees:

    def test_non_negative_balances(self, snapshot, a):
        for p in _run(snapshot, a):
            assert p.senior_debt >= 0
            assert p.subordinated_debt >= 0
            assert p.ending_cash >= 0

    def test_sweep_cap(self, snapshot, a):
        for p in _run(snapshot, a):
            assert p.cash_sweep <= p.beginning_senior_debt - p.mandatory_amortization

    def test_leverage_definition(self, snapshot, a):
        for p in _run(snapshot, a):
            assert p.leverage_ratio == (p.senior_debt + p.subordinated_debt) / p.ebitda

    def test_holding_period_length(self, snapshot, a):
        projs = _run(snapshot, a)
        assert [p.year for p in projs] == list(range(1, a.holding_period + 1))


class TestNotMeaningful:

    def test_zero_interest_coverage(self, snapshot):
        a = AssumptionSet(senior_multiple=0.0, subordinated_multiple=0.0, revolver_size=0.0)
        for p in _run(snapshot, a):
            assert p.interest == 0.0
            assert p.interest_coverage is None

    def test_zero_ebitda_leverage(self, snapshot):
        a = AssumptionSet(ebitda_margin=0.0)
        for p in _run(snapshot, a):
            assert p.ebitda == 0.0
            assert p.leverage_ratio is None

    def test_zero_revenue_margin(self):
        snap = CompanySnapshot(0.0, 0.0, 10.0, 10.0, 0.0, 0.0)
        p = _run(snap, AssumptionSet())[0]
        assert p.ebitda_margin is None


class TestProjectionTable:

    def test_wide_layout(self, snapshot, assumptions):
        projs = _run(snapshot, assumptions)
        df = projections_df(projs)
        assert list(df.columns) == [f"Year {i}" for i in range(1, 6)]
        assert df.loc["Revenue", "Year 1"] == pytest.approx(1_080.0)
        assert df.loc["Ending Cash", "Year 5"] == pytest.approx(projs[-1].ending_cash)

    def test_not_meaningful_renders_as_nan(self, snapshot):
        a = AssumptionSet(senior_multiple=0.0, subordinated_multiple=0.0, revolver_size=0.0)
        df = projections_df(_run(snapshot, a))
        assert df.loc["Interest Coverage (x)"].isna().all()
