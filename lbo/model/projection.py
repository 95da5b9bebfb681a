"""
projection.py
-------------
Year-by-year operating and debt projection.

Each call to ``project_year`` advances the model one fiscal year:

  Revenue → EBITDA → D&A → EBIT → Interest → EBT → Taxes → Net Income
  → FCF → Debt-service waterfall → Balance rollforward → Dividend

Key mechanics:
  - Interest is charged on BEGINNING-of-year balances (no circularity)
  - Revolver interest is charged on the full facility size every year
  - Waterfall order: mandatory senior amort → cash sweep (senior) →
    subordinated amort
  - Debt and cash balances are floored at zero

``project_years`` folds ``project_year`` over the holding period, feeding
each year's ending balances into the next.  All values in $M.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from lbo.model.assumptions import AssumptionSet, CompanySnapshot
from lbo.model.entry_valuation import EntryValuation
from lbo.model.numerics import safe_div

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectionState:
    """Balances carried from one year into the next."""
    senior_debt: float
    subordinated_debt: float
    cash: float
    revenue: float


@dataclass(frozen=True)
class YearProjection:
    year: int

    # --- Income statement ---
    revenue: float
    revenue_growth: float
    ebitda: float
    ebitda_margin: Optional[float]
    depreciation: float
    ebit: float
    senior_interest: float
    subordinated_interest: float
    revolver_interest: float
    interest: float
    ebt: float
    taxes: float
    net_income: float

    # --- Free cash flow ---
    capex: float
    working_capital_change: float
    fcf: float

    # --- Debt service waterfall ---
    cash_available_for_debt_service: float
    mandatory_amortization: float
    cash_sweep: float
    subordinated_amortization: float
    total_debt_service: float

    # --- Cash flow to equity ---
    cash_flow_to_equity: float
    beginning_cash: float
    dividend_payment: float
    ending_cash: float

    # --- Debt balances ---
    beginning_senior_debt: float
    beginning_subordinated_debt: float
    senior_debt: float
    subordinated_debt: float
    total_debt: float
    net_debt: float

    # --- Credit metrics ---
    leverage_ratio: Optional[float]
    interest_coverage: Optional[float]

    def next_state(self) -> ProjectionState:
        return ProjectionState(
            senior_debt=self.senior_debt,
            subordinated_debt=self.subordinated_debt,
            cash=self.ending_cash,
            revenue=self.revenue,
        )


def seed_state(snapshot: CompanySnapshot, entry: EntryValuation) -> ProjectionState:
    """
    Opening balances for Year 1: new debt from Sources & Uses, and the
    target's cash as of the snapshot (pre-transaction cash).
    """
    src = entry.sources_and_uses.sources
    return ProjectionState(
        senior_debt=src.senior_debt,
        subordinated_debt=src.subordinated_debt,
        cash=snapshot.current_cash,
        revenue=snapshot.base_revenue,
    )


def project_year(year: int, state: ProjectionState, a: AssumptionSet) -> YearProjection:
    """Advance one fiscal year from ``state``."""
    growth = a.growth_for_year(year)

    # --- Operating build ---
    revenue = state.revenue * (1 + growth)
    ebitda  = revenue * a.ebitda_margin
    da      = revenue * a.da_pct_revenue
    ebit    = ebitda - da

    # --- Interest on beginning balances ---
    senior_begin = state.senior_debt
    sub_begin    = state.subordinated_debt
    senior_interest   = senior_begin * a.senior_rate
    sub_interest      = sub_begin * a.subordinated_rate
    revolver_interest = a.revolver_size * a.revolver_rate
    total_interest    = senior_interest + sub_interest + revolver_interest

    ebt        = ebit - total_interest
    taxes      = max(0.0, ebt * a.tax_rate)
    net_income = ebt - taxes

    capex      = revenue * a.capex_pct_revenue
    nwc_change = revenue * a.nwc_pct_revenue
    fcf        = net_income + da - capex - nwc_change

    # --- Debt service waterfall (order matters) ---
    beginning_cash = state.cash
    cash_available = fcf + beginning_cash

    mandatory = min(cash_available, senior_begin * a.senior_amort_pct)
    cash_after_mandatory = max(0.0, cash_available - total_interest - mandatory)
    sweep = min(cash_after_mandatory * a.cash_sweep_pct, senior_begin - mandatory)
    sub_amort = min(max(0.0, cash_after_mandatory - sweep),
                    sub_begin * a.subordinated_amort_pct)
    total_debt_service = total_interest + mandatory + sweep + sub_amort

    # --- Balance rollforward ---
    senior_end = max(0.0, senior_begin - mandatory - sweep)
    sub_end    = max(0.0, sub_begin - sub_amort)
    total_debt = senior_end + sub_end

    # --- Equity distributions ---
    cfe         = cash_available - total_debt_service
    dividend    = max(0.0, cfe * a.dividend_payout_ratio)
    ending_cash = max(0.0, cfe - dividend)

    proj = YearProjection(
        year=year,
        revenue=revenue,
        revenue_growth=growth,
        ebitda=ebitda,
        ebitda_margin=safe_div(ebitda, revenue),
        depreciation=da,
        ebit=ebit,
        senior_interest=senior_interest,
        subordinated_interest=sub_interest,
        revolver_interest=revolver_interest,
        interest=total_interest,
        ebt=ebt,
        taxes=taxes,
        net_income=net_income,
        capex=capex,
        working_capital_change=nwc_change,
        fcf=fcf,
        cash_available_for_debt_service=cash_available,
        mandatory_amortization=mandatory,
        cash_sweep=sweep,
        subordinated_amortization=sub_amort,
        total_debt_service=total_debt_service,
        cash_flow_to_equity=cfe,
        beginning_cash=beginning_cash,
        dividend_payment=dividend,
        ending_cash=ending_cash,
        beginning_senior_debt=senior_begin,
        beginning_subordinated_debt=sub_begin,
        senior_debt=senior_end,
        subordinated_debt=sub_end,
        total_debt=total_debt,
        net_debt=total_debt - ending_cash,
        leverage_ratio=safe_div(total_debt, ebitda),
        interest_coverage=safe_div(ebitda, total_interest),
    )

    logger.debug(
        "year %d: revenue=%.1f ebitda=%.1f fcf=%.1f senior=%.1f sub=%.1f cash=%.1f",
        year, revenue, ebitda, fcf, senior_end, sub_end, ending_cash,
    )
    return proj


def project_years(
    snapshot: CompanySnapshot,
    entry: EntryValuation,
    assumptions: AssumptionSet,
) -> tuple[YearProjection, ...]:
    """Run ``project_year`` for years 1..N, carrying balances forward."""
    assumptions.validate()

    state = seed_state(snapshot, entry)
    projections = []
    for year in range(1, assumptions.holding_period + 1):
        proj = project_year(year, state, assumptions)
        projections.append(proj)
        state = proj.next_state()
    return tuple(projections)


# Rows shown in the wide projection table, in display order
PROJECTION_ROWS = [
    ("Revenue",                  "revenue"),
    ("Revenue Growth",           "revenue_growth"),
    ("EBITDA",                   "ebitda"),
    ("EBITDA Margin",            "ebitda_margin"),
    ("D&A",                      "depreciation"),
    ("EBIT",                     "ebit"),
    ("Senior Interest",          "senior_interest"),
    ("Subordinated Interest",    "subordinated_interest"),
    ("Revolver Interest",        "revolver_interest"),
    ("Interest Expense",         "interest"),
    ("EBT",                      "ebt"),
    ("Tax",                      "taxes"),
    ("Net Income",               "net_income"),
    ("(-) CapEx",                "capex"),
    ("(-) Δ NWC",                "working_capital_change"),
    ("Free Cash Flow",           "fcf"),
    ("Beginning Cash",           "beginning_cash"),
    ("Cash Available",           "cash_available_for_debt_service"),
    ("Mandatory Amortization",   "mandatory_amortization"),
    ("Cash Sweep",               "cash_sweep"),
    ("Subordinated Amortization","subordinated_amortization"),
    ("Total Debt Service",       "total_debt_service"),
    ("Cash Flow to Equity",      "cash_flow_to_equity"),
    ("Dividend",                 "dividend_payment"),
    ("Ending Cash",              "ending_cash"),
    ("Senior Debt",              "senior_debt"),
    ("Subordinated Debt",        "subordinated_debt"),
    ("Total Debt",               "total_debt"),
    ("Net Debt",                 "net_debt"),
    ("Leverage (x)",             "leverage_ratio"),
    ("Interest Coverage (x)",    "interest_coverage"),
]


def projections_df(projections) -> pd.DataFrame:
    """
    Returns a wide DataFrame with one column per projected year.
    Index = line item labels.  Not-meaningful values appear as NaN.
    """
    data = {
        f"Year {p.year}": {label: getattr(p, attr) for label, attr in PROJECTION_ROWS}
        for p in projections
    }
    return pd.DataFrame(data, dtype=float)
