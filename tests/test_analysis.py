"""
Unit tests for credit metrics and scenario comparison
"""

import pytest

from lbo.analysis.credit_metrics import (build_credit_dashboard, max_leverage_covenant,
                                         min_coverage_covenant)
from lbo.analysis.scenarios import SCENARIO_NAMES, run_scenarios
from lbo.model.assumptions import AssumptionSet
from lbo.model.lbo_engine import run_model


class TestCovenantSchedule:

    def test_leverage_steps_down_to_floor(self):
        assert [max_leverage_covenant(y) for y in (1, 2, 5, 8, 10)] == [6.5, 6.0, 4.5, 3.0, 3.0]

    def test_coverage_steps_up_to_cap(self):
        assert [min_coverage_covenant(y) for y in (1, 2, 3, 5, 9, 12)] == [2.0, 2.0, 2.25, 2.5, 3.0, 3.0]


class TestCreditDashboard:

    @pytest.fixture
    def dashboard(self, snapshot, assumptions):
        return build_credit_dashboard(run_model(snapshot, assumptions))

    def test_frames(self, dashboard):
        assert len(dashboard["credit_df"]) == 5
        assert list(dashboard["waterfall_df"].index) == ["Entry"] + [f"Year {i}" for i in range(1, 6)]
        assert len(dashboard["covenant_df"]) == 5

    def test_entry_balances(self, dashboard):
        entry = dashboard["waterfall_df"].loc["Entry"]
        assert entry["Senior Debt"] == 400.0
        assert entry["Subordinated Debt"] == 150.0

    def test_paydown_increases(self, dashboard):
        paydown = list(dashboard["credit_df"]["Cumulative Paydown"])
        assert paydown == sorted(paydown)
        assert paydown[0] > 0

    def test_deleveraging_deal_is_compliant(self, dashboard):
        cov = dashboard["covenant_df"]
        assert cov["In Compliance (Leverage)"].all()
        assert cov["In Compliance (Coverage)"].all()

    def test_no_interest_is_not_compliant(self, snapshot):
        a = AssumptionSet(senior_multiple=0.0, subordinated_multiple=0.0, revolver_size=0.0)
        cov = build_credit_dashboard(run_model(snapshot, a))["covenant_df"]
        assert not cov["In Compliance (Coverage)"].any()
        assert cov["Coverage Headroom (x)"].isna().all()

    def test_negative_ebitda_is_not_rated(self, snapshot):
        a = AssumptionSet(ebitda_margin=-0.05)
        dash = build_credit_dashboard(run_model(snapshot, a))
        credit = dash["credit_df"]
        assert (credit["EBITDA ($M)"] < 0).all()
        assert credit["Gross Leverage (x)"].isna().all()
        assert credit["Net Leverage (x)"].isna().all()
        assert credit["FCF / EBITDA"].isna().all()
        assert (credit["Implied Rating"] == "NR").all()
        assert not dash["covenant_df"]["In Compliance (Leverage)"].any()


class TestScenarios:

    def test_ordering(self, snapshot):
        out = run_scenarios(snapshot)
        df = out["comparison_df"]
        assert list(df.index) == SCENARIO_NAMES
        assert df.loc["Bear", "IRR"] < df.loc["Base", "IRR"] < df.loc["Bull", "IRR"]

    def test_base_matches_direct_run(self, snapshot, assumptions):
        out = run_scenarios(snapshot, assumptions)
        assert out["results"]["Base"] == run_model(snapshot, assumptions)
        assert out["assumptions"]["Bull"].exit_multiple == 13.5

    def test_revenue_cagr(self, snapshot):
        a = AssumptionSet(revenue_growth=(0.05,))
        df = run_scenarios(snapshot, a)["comparison_df"]
        assert df.loc["Base", "Revenue CAGR"] == pytest.approx(0.05)
