"""
scenarios.py
------------
Defines Bull / Base / Bear scenarios and runs the LBO model for each.
Returns a comparison DataFrame plus the individual LBOResults.
"""

from typing import Optional

import pandas as pd

from lbo.model.assumptions import AssumptionSet, CompanySnapshot, bear_case, bull_case
from lbo.model.lbo_engine import run_model


SCENARIO_NAMES = ["Bear", "Base", "Bull"]


def make_scenario_assumptions(base: Optional[AssumptionSet] = None) -> dict[str, AssumptionSet]:
    base = base or AssumptionSet()
    return {
        "Bear": bear_case(base),
        "Base": base,
        "Bull": bull_case(base),
    }


def run_scenarios(snapshot: CompanySnapshot, base: Optional[AssumptionSet] = None) -> dict:
    """
    Run all three scenarios.

    Returns
    -------
    {
      "results"      : {scenario_name: LBOResult},
      "assumptions"  : {scenario_name: AssumptionSet},
      "comparison_df": pd.DataFrame  (key metrics across scenarios),
    }
    """
    scenarios = make_scenario_assumptions(base)
    results = {name: run_model(snapshot, a) for name, a in scenarios.items()}

    rows = []
    for name in SCENARIO_NAMES:
        a = scenarios[name]
        r = results[name]
        final = r.final_projection
        rows.append({
            "Scenario":           name,
            "Revenue CAGR":       _cagr(snapshot.base_revenue, final.revenue, a.holding_period),
            "EBITDA Margin":      a.ebitda_margin,
            "Exit EV/EBITDA":     a.exit_multiple,
            "Entry EV ($M)":      r.entry_valuation.enterprise_value,
            "Sponsor Equity ($M)": r.entry_valuation.sponsor_equity,
            "Exit EV ($M)":       r.exit_analysis.exit_enterprise_value,
            "Exit Net Debt ($M)": r.exit_analysis.exit_net_debt,
            "Exit Equity ($M)":   r.exit_analysis.exit_equity_value,
            "IRR":                r.exit_analysis.irr,
            "Cash Flow IRR":      r.cash_flow_irr,
            "MOIC":               r.exit_analysis.moic,
            "Exit Leverage (x)":  final.leverage_ratio,
        })

    comparison_df = pd.DataFrame(rows).set_index("Scenario")

    return {
        "results":       results,
        "assumptions":   scenarios,
        "comparison_df": comparison_df,
    }


def _cagr(start: float, end: float, years: int) -> Optional[float]:
    if start <= 0 or end < 0 or years <= 0:
        return None
    return (end / start) ** (1 / years) - 1
