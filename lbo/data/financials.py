"""
financials.py
-------------
Turns annual statement records (already retrieved by the caller from the
market-data provider) into a CompanySnapshot, and seeds the operating
assumptions from the company's own history.

Records are provider-shaped dicts, most recent fiscal year:
  income statement : revenue, ebitda
  cash flow        : capitalExpenditure (negative = cash out)
  balance sheet    : totalDebt, cashAndCashEquivalents
  profile          : price, mktCap, symbol

Missing / NaN numbers are treated as 0 except where noted.
All figures in the provider's units ($M expected).
"""

import logging
from dataclasses import replace
from typing import Optional

import pandas as pd

from lbo.errors import InvalidSnapshotError
from lbo.model.assumptions import AssumptionSet, CompanySnapshot

logger = logging.getLogger(__name__)


# Seeding policy for operating assumptions
DEFAULT_EBITDA_MARGIN = 0.25
MIN_SEEDED_EBITDA_MARGIN = 0.20
DEFAULT_CAPEX_PCT = 0.03
MAX_SEEDED_CAPEX_PCT = 0.05


def _num(record: Optional[dict], key: str, default: float = 0.0) -> float:
    if not record:
        return default
    val = record.get(key)
    if val is None or pd.isna(val):
        return default
    return float(val)


def _latest(statements) -> dict:
    """Statements are ordered most recent first; accept a single dict too."""
    if isinstance(statements, dict):
        return statements
    if isinstance(statements, pd.DataFrame):
        return statements.iloc[0].to_dict() if not statements.empty else {}
    return statements[0] if statements else {}


def build_snapshot(
    income_statements,
    cash_flow_statements,
    balance_sheets,
    profile: Optional[dict],
    default_ebitda_margin: float = DEFAULT_EBITDA_MARGIN,
) -> CompanySnapshot:
    """
    Build a CompanySnapshot from the latest annual statements.

    EBITDA falls back to revenue x ``default_ebitda_margin`` when the
    provider does not report it.  Shares outstanding = market cap / price.
    """
    income  = _latest(income_statements)
    cf      = _latest(cash_flow_statements)
    balance = _latest(balance_sheets)

    revenue = _num(income, "revenue")
    if not income or revenue == 0:
        raise InvalidSnapshotError("latest income statement has no revenue")

    ebitda = _num(income, "ebitda")
    if ebitda == 0:
        ebitda = revenue * default_ebitda_margin
        logger.debug("ebitda not reported; using %.1f%% margin", default_ebitda_margin * 100)

    price   = _num(profile, "price")
    mkt_cap = _num(profile, "mktCap")
    shares  = mkt_cap / price if (mkt_cap and price) else 0.0

    capex = _num(cf, "capitalExpenditure", default=float("nan"))

    return CompanySnapshot(
        base_revenue=revenue,
        base_ebitda=ebitda,
        current_share_price=price,
        shares_outstanding=shares,
        current_debt=_num(balance, "totalDebt"),
        current_cash=_num(balance, "cashAndCashEquivalents"),
        base_capex=None if pd.isna(capex) or capex == 0 else abs(capex),
        ticker=(profile or {}).get("symbol", "") or "",
    )


def seed_assumptions(
    snapshot: CompanySnapshot,
    base: Optional[AssumptionSet] = None,
) -> AssumptionSet:
    """
    Seed EBITDA margin and CapEx intensity from history:
      margin = max(historical margin, 20%)
      capex  = min(historical capex / revenue, 5%)
    Everything else keeps the base (default) assumptions.
    """
    base = base or AssumptionSet()

    hist_margin = snapshot.ebitda_margin
    if hist_margin is None:
        hist_margin = DEFAULT_EBITDA_MARGIN
    hist_capex = snapshot.capex_pct_revenue
    if hist_capex is None:
        hist_capex = DEFAULT_CAPEX_PCT

    seeded = replace(
        base,
        ebitda_margin=max(hist_margin, MIN_SEEDED_EBITDA_MARGIN),
        capex_pct_revenue=min(hist_capex, MAX_SEEDED_CAPEX_PCT),
    )
    logger.debug("seeded %s: margin=%.3f capex=%.3f",
                 snapshot.ticker or "-", seeded.ebitda_margin, seeded.capex_pct_revenue)
    return seeded
