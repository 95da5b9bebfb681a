"""
assumptions.py
--------------
Immutable inputs to the LBO engine.

  CompanySnapshot : base-year financials of the target (read-only)
  AssumptionSet   : transaction, operating and financing assumptions

Separates deal structure, operating projections, and exit assumptions
so scenarios can be constructed by swapping just the relevant fields
(``dataclasses.replace``).

All monetary values in $M. Rates as decimals (e.g., 0.08 = 8%).
"""

import numbers
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from lbo.errors import InvalidAssumptionsError


@dataclass(frozen=True)
class CompanySnapshot:
    """Most recent annual figures for the target company."""
    base_revenue: float
    base_ebitda: float
    current_share_price: float
    shares_outstanding: float
    current_debt: float
    current_cash: float
    base_capex: Optional[float] = None   # positive = cash out; used for seeding only
    ticker: str = ""

    @property
    def ebitda_margin(self) -> Optional[float]:
        if self.base_revenue <= 0:
            return None
        return self.base_ebitda / self.base_revenue

    @property
    def capex_pct_revenue(self) -> Optional[float]:
        if self.base_capex is None or self.base_revenue <= 0:
            return None
        return abs(self.base_capex) / self.base_revenue


@dataclass(frozen=True)
class AssumptionSet:
    """
    Master container for all LBO model inputs.

    Structured in four logical blocks:
      1. Entry / Transaction
      2. Operating Projections
      3. Financing Structure & Debt Terms
      4. Equity Policy
    """
    # -----------------------------------------------------------------------
    # 1. ENTRY / TRANSACTION ASSUMPTIONS
    # -----------------------------------------------------------------------
    entry_multiple: float = 12.0          # EV / LTM EBITDA at entry
    exit_multiple: float = 12.0           # EV / EBITDA at exit
    holding_period: int = 5               # years
    transaction_fee_pct: float = 0.025    # fees as % of equity value

    # -----------------------------------------------------------------------
    # 2. OPERATING PROJECTIONS
    # -----------------------------------------------------------------------
    # index 0 = Year 1; last value repeats past the end of the list
    revenue_growth: Tuple[float, ...] = field(default_factory=lambda:
        (0.08, 0.06, 0.05, 0.04, 0.03))
    ebitda_margin: float = 0.25
    tax_rate: float = 0.25
    capex_pct_revenue: float = 0.03
    nwc_pct_revenue: float = 0.01         # change in NWC as % of revenue
    da_pct_revenue: float = 0.025         # D&A as % of revenue

    # -----------------------------------------------------------------------
    # 3. FINANCING STRUCTURE (multiples of base EBITDA) & DEBT TERMS
    # -----------------------------------------------------------------------
    total_leverage: float = 5.5
    senior_multiple: float = 4.0
    subordinated_multiple: float = 1.5
    senior_rate: float = 0.065
    subordinated_rate: float = 0.09
    revolver_rate: float = 0.055
    revolver_size: float = 50.0           # $M, fully drawn at close
    senior_amort_pct: float = 0.05        # of beginning senior balance, per year
    subordinated_amort_pct: float = 0.0
    cash_sweep_pct: float = 0.75          # % of post-mandatory cash swept to senior

    # -----------------------------------------------------------------------
    # 4. EQUITY POLICY
    # -----------------------------------------------------------------------
    dividend_payout_ratio: float = 0.50   # of cash flow to equity

    def __post_init__(self):
        # Accept lists from callers but keep the record hashable / immutable
        object.__setattr__(self, "revenue_growth", tuple(self.revenue_growth))
        self.validate()

    def validate(self) -> None:
        """Fail fast on inputs that make the year loop impossible."""
        if isinstance(self.holding_period, bool) or not isinstance(self.holding_period, numbers.Integral):
            raise InvalidAssumptionsError(
                f"holding_period must be an integer, got {self.holding_period!r}")
        if self.holding_period < 1:
            raise InvalidAssumptionsError(
                f"holding_period must be >= 1, got {self.holding_period}")
        if not self.revenue_growth:
            raise InvalidAssumptionsError("revenue_growth must not be empty")

    def growth_for_year(self, year: int) -> float:
        """Growth rate for 1-based ``year``; the last rate repeats."""
        idx = min(year, len(self.revenue_growth)) - 1
        return self.revenue_growth[idx]


# ---------------------------------------------------------------------------
# Convenience: build scenario variants
# ---------------------------------------------------------------------------

def base_case() -> AssumptionSet:
    return AssumptionSet()


def bull_case(base: Optional[AssumptionSet] = None) -> AssumptionSet:
    a = base or base_case()
    return replace(
        a,
        revenue_growth=tuple(r + 0.020 for r in a.revenue_growth),
        ebitda_margin=a.ebitda_margin + 0.010,
        exit_multiple=a.exit_multiple + 1.5,
    )


def bear_case(base: Optional[AssumptionSet] = None) -> AssumptionSet:
    a = base or base_case()
    return replace(
        a,
        revenue_growth=tuple(r - 0.025 for r in a.revenue_growth),
        ebitda_margin=a.ebitda_margin - 0.012,
        exit_multiple=max(4.0, a.exit_multiple - 1.5),
    )
