"""
credit_metrics.py
-----------------
Extended credit analysis on the projected LBO capital structure.

Computed metrics (by year):
  - Gross / Net Leverage (Total Debt / EBITDA  and  Net Debt / EBITDA)
  - Interest Coverage Ratio (EBITDA / Total Interest)
  - Fixed Charge Coverage Ratio (EBITDA / (Interest + Mandatory Amort))
  - FCF / EBITDA
  - Cumulative Debt Paydown vs. Entry
  - Implied Credit Rating Proxy (simplistic mapping)

Also generates a debt waterfall DataFrame (senior / subordinated balances)
and covenant headroom.  Ratios over EBITDA are None when EBITDA <= 0.
Not-meaningful ratios are None (NaN in the frames) and are treated as out
of compliance.
"""

from typing import Optional

import pandas as pd

from lbo.model.numerics import positive_div, safe_div


# Simplified leverage → implied credit rating mapping
LEVERAGE_RATING_MAP = [
    (2.0,  "BBB+/Baa1"),
    (3.0,  "BBB/Baa2"),
    (3.5,  "BBB-/Baa3"),
    (4.5,  "BB+/Ba1"),
    (5.5,  "BB/Ba2"),
    (6.5,  "BB-/Ba3"),
    (7.5,  "B+/B1"),
    (9.0,  "B/B2"),
    (99.0, "B-/B3 or below"),
]


def _implied_rating(leverage: Optional[float]) -> str:
    if leverage is None:
        return "NR"
    for threshold, rating in LEVERAGE_RATING_MAP:
        if leverage <= threshold:
            return rating
    return "CCC"


def max_leverage_covenant(year: int) -> float:
    """Steps down 0.5x/yr from 6.5x, floored at 3.0x."""
    return max(3.0, 6.5 - 0.5 * (year - 1))


def min_coverage_covenant(year: int) -> float:
    """Steps up 0.25x every two years from 2.0x, capped at 3.0x."""
    return min(3.0, 2.0 + 0.25 * ((year - 1) // 2))


def build_credit_dashboard(result) -> dict:
    """
    Build extended credit metrics from an LBOResult.

    Returns
    -------
    {
      "credit_df"   : year-by-year metrics DataFrame,
      "waterfall_df": debt balances by tranche (Entry + each year),
      "covenant_df" : covenant headroom DataFrame,
    }
    """
    sources = result.entry_valuation.sources_and_uses.sources
    entry_debt = sources.senior_debt + sources.subordinated_debt

    rows = []
    for p in result.projections:
        gross_lev = positive_div(p.total_debt, p.ebitda)
        fixed_charges = p.interest + p.mandatory_amortization
        rows.append({
            "Year":                      p.year,
            "Revenue ($M)":              p.revenue,
            "EBITDA ($M)":               p.ebitda,
            "EBITDA Margin":             p.ebitda_margin,
            "Total Debt ($M)":           p.total_debt,
            "Net Debt ($M)":             p.net_debt,
            "Gross Leverage (x)":        gross_lev,
            "Net Leverage (x)":          positive_div(p.net_debt, p.ebitda),
            "Interest ($M)":             p.interest,
            "Interest Coverage (x)":     p.interest_coverage,
            "Fixed Charge Coverage (x)": safe_div(p.ebitda, fixed_charges),
            "Free Cash Flow ($M)":       p.fcf,
            "FCF / EBITDA":              positive_div(p.fcf, p.ebitda),
            "Cumulative Paydown":        positive_div(entry_debt - p.total_debt, entry_debt),
            "Implied Rating":            _implied_rating(gross_lev),
        })
    credit_df = pd.DataFrame(rows)

    # ---- Debt Waterfall ----
    waterfall_rows = [{
        "Year":              "Entry",
        "Senior Debt":       sources.senior_debt,
        "Subordinated Debt": sources.subordinated_debt,
    }]
    for p in result.projections:
        waterfall_rows.append({
            "Year":              f"Year {p.year}",
            "Senior Debt":       p.senior_debt,
            "Subordinated Debt": p.subordinated_debt,
        })
    waterfall_df = pd.DataFrame(waterfall_rows).set_index("Year")

    # ---- Covenant Headroom ----
    cov_rows = []
    for p in result.projections:
        act_lev = positive_div(p.total_debt, p.ebitda)
        act_cov = p.interest_coverage
        lev_covenant = max_leverage_covenant(p.year)
        cov_covenant = min_coverage_covenant(p.year)
        cov_rows.append({
            "Year":                     p.year,
            "Gross Leverage":           act_lev,
            "Max Leverage Covenant":    lev_covenant,
            "Leverage Headroom (x)":    None if act_lev is None else lev_covenant - act_lev,
            "In Compliance (Leverage)": act_lev is not None and 0 <= act_lev <= lev_covenant,
            "Interest Coverage":        act_cov,
            "Min Coverage Covenant":    cov_covenant,
            "Coverage Headroom (x)":    None if act_cov is None else act_cov - cov_covenant,
            "In Compliance (Coverage)": act_cov is not None and act_cov >= cov_covenant,
        })
    covenant_df = pd.DataFrame(cov_rows)

    return {
        "credit_df":    credit_df,
        "waterfall_df": waterfall_df,
        "covenant_df":  covenant_df,
    }
