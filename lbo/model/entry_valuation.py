"""
entry_valuation.py
------------------
Entry pricing and the Sources & Uses of funds.

  EV            = Base EBITDA x Entry Multiple
  Equity Value  = EV - Current Debt + Current Cash
  Uses          = EV + Fees + Refinanced Debt - Target Cash
  Sources       = Senior + Subordinated + Revolver + Sponsor Equity (plug)

Sponsor equity is the balancing item, so Total Sources == Total Uses by
construction.  A negative plug (debt capacity exceeds uses) is allowed
through and flagged; returns on it are reported as not meaningful.

All values in $M.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from lbo.model.assumptions import AssumptionSet, CompanySnapshot
from lbo.model.numerics import positive_div

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Uses:
    enterprise_value: float
    transaction_fees: float
    refinanced_debt: float
    target_cash: float          # netted against uses
    total: float


@dataclass(frozen=True)
class Sources:
    senior_debt: float
    subordinated_debt: float
    revolver: float
    sponsor_equity: float
    total: float

    @property
    def total_debt(self) -> float:
        return self.senior_debt + self.subordinated_debt + self.revolver


@dataclass(frozen=True)
class SourcesAndUses:
    sources: Sources
    uses: Uses


@dataclass(frozen=True)
class EntryValuation:
    entry_multiple: float
    entry_ebitda: float
    enterprise_value: float
    equity_value: float
    current_share_price: float
    shares_outstanding: float
    implied_share_price: Optional[float]
    implied_premium: Optional[float]
    transaction_fees: float
    total_debt_at_entry: float      # base EBITDA x total leverage
    total_equity_required: float    # equity value + fees
    cash: float                     # target cash at entry
    sources_and_uses: SourcesAndUses

    @property
    def sponsor_equity(self) -> float:
        return self.sources_and_uses.sources.sponsor_equity

    @property
    def is_degenerate(self) -> bool:
        """True when the equity plug is not positive (returns not meaningful)."""
        return self.sponsor_equity <= 0


def build_sources_and_uses(
    snapshot: CompanySnapshot,
    assumptions: AssumptionSet,
    enterprise_value: float,
    transaction_fees: float,
) -> SourcesAndUses:
    """Size the debt off base EBITDA and plug sponsor equity."""
    ebitda = snapshot.base_ebitda

    uses_total = (enterprise_value
                  + transaction_fees
                  + snapshot.current_debt
                  - snapshot.current_cash)
    uses = Uses(
        enterprise_value=enterprise_value,
        transaction_fees=transaction_fees,
        refinanced_debt=snapshot.current_debt,
        target_cash=snapshot.current_cash,
        total=uses_total,
    )

    senior  = ebitda * assumptions.senior_multiple
    sub     = ebitda * assumptions.subordinated_multiple
    revolver = assumptions.revolver_size
    sponsor_equity = uses_total - (senior + sub + revolver)

    sources = Sources(
        senior_debt=senior,
        subordinated_debt=sub,
        revolver=revolver,
        sponsor_equity=sponsor_equity,
        total=uses_total,
    )
    return SourcesAndUses(sources=sources, uses=uses)


def build_entry_valuation(
    snapshot: CompanySnapshot,
    assumptions: AssumptionSet,
    entry_multiple: Optional[float] = None,
) -> EntryValuation:
    """
    Price the deal at ``entry_multiple`` (defaults to the assumption set's).
    The sensitivity grid calls this with candidate multiples.
    """
    multiple = assumptions.entry_multiple if entry_multiple is None else entry_multiple

    enterprise_value = snapshot.base_ebitda * multiple
    equity_value     = enterprise_value - snapshot.current_debt + snapshot.current_cash

    implied_price = positive_div(equity_value, snapshot.shares_outstanding)
    if implied_price is None:
        implied_premium = None
    else:
        ratio = positive_div(implied_price, snapshot.current_share_price)
        implied_premium = None if ratio is None else ratio - 1.0

    transaction_fees = equity_value * assumptions.transaction_fee_pct
    su = build_sources_and_uses(snapshot, assumptions, enterprise_value, transaction_fees)

    entry = EntryValuation(
        entry_multiple=multiple,
        entry_ebitda=snapshot.base_ebitda,
        enterprise_value=enterprise_value,
        equity_value=equity_value,
        current_share_price=snapshot.current_share_price,
        shares_outstanding=snapshot.shares_outstanding,
        implied_share_price=implied_price,
        implied_premium=implied_premium,
        transaction_fees=transaction_fees,
        total_debt_at_entry=snapshot.base_ebitda * assumptions.total_leverage,
        total_equity_required=equity_value + transaction_fees,
        cash=snapshot.current_cash,
        sources_and_uses=su,
    )

    logger.debug(
        "entry valuation %s: ebitda=%.1f multiple=%.2fx ev=%.1f equity=%.1f sponsor=%.1f",
        snapshot.ticker or "-", snapshot.base_ebitda, multiple,
        enterprise_value, equity_value, entry.sponsor_equity,
    )
    return entry


def sources_uses_df(entry: EntryValuation) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Build Sources & Uses tables (raw numbers, with a totals row)."""
    src = entry.sources_and_uses.sources
    use = entry.sources_and_uses.uses

    sources = [
        {"Item": "Senior Debt",       "Amount ($M)": src.senior_debt},
        {"Item": "Subordinated Debt", "Amount ($M)": src.subordinated_debt},
        {"Item": "Revolving Credit",  "Amount ($M)": src.revolver},
        {"Item": "Sponsor Equity",    "Amount ($M)": src.sponsor_equity},
    ]
    uses = [
        {"Item": "Purchase Enterprise Value", "Amount ($M)": use.enterprise_value},
        {"Item": "Transaction Fees",          "Amount ($M)": use.transaction_fees},
        {"Item": "Refinance Existing Debt",   "Amount ($M)": use.refinanced_debt},
        {"Item": "(-) Target Cash",           "Amount ($M)": -use.target_cash},
    ]

    for rows, total in ((sources, src.total), (uses, use.total)):
        for r in rows:
            r["% of Total"] = positive_div(r["Amount ($M)"], total)

    sources_df = pd.DataFrame(sources + [
        {"Item": "Total Sources", "Amount ($M)": src.total, "% of Total": 1.0}
    ])
    uses_df = pd.DataFrame(uses + [
        {"Item": "Total Uses", "Amount ($M)": use.total, "% of Total": 1.0}
    ])
    return sources_df, uses_df
