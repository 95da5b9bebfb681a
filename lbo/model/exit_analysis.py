"""
exit_analysis.py
----------------
Exit valuation and headline returns.

  Exit EV      = Final-year EBITDA x Exit Multiple
  Exit Equity  = Exit EV - Final Debt + Final Cash
  MOIC         = Exit Equity / Sponsor Equity
  IRR          = MOIC ^ (1 / N) - 1

The IRR here is the closed-form figure and ignores interim dividends.
The dividend-aware rate lives on the cash-flow schedule
(``cash_flow_schedule.schedule_irr``); the two are reported side by side.

Also builds the returns attribution bridge (EBITDA growth, multiple
expansion, deleveraging).  All values in $M.
"""

from dataclasses import dataclass
from typing import Optional

from lbo.model.assumptions import AssumptionSet, CompanySnapshot
from lbo.model.entry_valuation import EntryValuation
from lbo.model.numerics import annualized_return, positive_div
from lbo.model.projection import YearProjection


@dataclass(frozen=True)
class ExitAnalysis:
    exit_ebitda: float
    exit_multiple: float
    exit_enterprise_value: float
    exit_debt: float
    exit_cash: float
    exit_equity_value: float
    total_return: float
    moic: Optional[float]
    irr: Optional[float]
    holding_period: int

    @property
    def exit_net_debt(self) -> float:
        return self.exit_debt - self.exit_cash

    @property
    def total_equity_proceeds(self) -> float:
        return self.exit_equity_value


def exit_equity_value(
    final_ebitda: float,
    final_debt: float,
    final_cash: float,
    exit_multiple: float,
) -> float:
    return final_ebitda * exit_multiple - final_debt + final_cash


def analyze_exit(
    final: YearProjection,
    sponsor_equity: float,
    exit_multiple: float,
    holding_period: int,
) -> ExitAnalysis:
    exit_ev     = final.ebitda * exit_multiple
    exit_equity = exit_equity_value(final.ebitda, final.total_debt,
                                    final.ending_cash, exit_multiple)
    moic = positive_div(exit_equity, sponsor_equity)

    return ExitAnalysis(
        exit_ebitda=final.ebitda,
        exit_multiple=exit_multiple,
        exit_enterprise_value=exit_ev,
        exit_debt=final.total_debt,
        exit_cash=final.ending_cash,
        exit_equity_value=exit_equity,
        total_return=exit_equity - sponsor_equity,
        moic=moic,
        irr=annualized_return(moic, holding_period),
        holding_period=holding_period,
    )


@dataclass(frozen=True)
class ReturnsBridge:
    entry_equity_value: float
    ebitda_growth: float
    multiple_expansion: float
    deleveraging: float
    exit_equity_value: float

    @property
    def total_value_creation(self) -> float:
        return self.exit_equity_value - self.entry_equity_value


def build_returns_bridge(
    snapshot: CompanySnapshot,
    entry: EntryValuation,
    exit_: ExitAnalysis,
    assumptions: AssumptionSet,
) -> ReturnsBridge:
    """
    Decompose value creation into EBITDA growth, multiple expansion and
    deleveraging.  The three components sum to exit equity less entry
    equity (entry EV less the new term debt at close, net of cash).

    The revolver stays fully drawn and is absent from the projected debt
    balances, so it is excluded from entry net debt too.
    """
    src = entry.sources_and_uses.sources
    entry_net_debt = (src.senior_debt + src.subordinated_debt
                      - snapshot.current_cash)
    entry_eq = entry.enterprise_value - entry_net_debt

    # Component 1: EBITDA Growth (hold entry multiple)
    ebitda_growth = (exit_.exit_ebitda - entry.entry_ebitda) * entry.entry_multiple
    # Component 2: Multiple Expansion (hold exit EBITDA)
    multiple_expansion = exit_.exit_ebitda * (assumptions.exit_multiple - entry.entry_multiple)
    # Component 3: Deleveraging (reduction in net debt)
    deleveraging = entry_net_debt - exit_.exit_net_debt

    return ReturnsBridge(
        entry_equity_value=entry_eq,
        ebitda_growth=ebitda_growth,
        multiple_expansion=multiple_expansion,
        deleveraging=deleveraging,
        exit_equity_value=exit_.exit_equity_value,
    )
