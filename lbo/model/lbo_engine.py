"""
lbo_engine.py
-------------
Master orchestrator: runs the full LBO model for a given CompanySnapshot
and AssumptionSet and returns all outputs in a single LBOResult.

  Entry Valuation & Sources/Uses
    → Year-by-year projection (fold over the holding period)
    → Exit Analysis (EV, equity, MOIC, closed-form IRR)
    → Equity cash-flow schedule (with schedule-implied IRR)
    → Returns attribution bridge
    → Entry x Exit multiple sensitivity grid

The run is a pure function of its inputs.  All monetary values in $M.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Optional

from lbo.analysis.sensitivity import SensitivityCell, build_sensitivity_grid
from lbo.model.assumptions import AssumptionSet, CompanySnapshot
from lbo.model.cash_flow_schedule import CashFlowEntry, build_cash_flow_schedule, schedule_irr
from lbo.model.entry_valuation import EntryValuation, build_entry_valuation
from lbo.model.exit_analysis import ExitAnalysis, ReturnsBridge, analyze_exit, build_returns_bridge
from lbo.model.projection import YearProjection, project_years

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LBOResult:
    entry_valuation: EntryValuation
    projections: tuple[YearProjection, ...]
    exit_analysis: ExitAnalysis
    cash_flow_schedule: tuple[CashFlowEntry, ...]
    cash_flow_irr: Optional[float]      # dividend-aware, from the schedule
    returns_bridge: ReturnsBridge
    sensitivity: tuple[SensitivityCell, ...]

    @property
    def final_projection(self) -> YearProjection:
        return self.projections[-1]

    def as_dict(self) -> dict:
        """Plain nested dicts / lists, JSON-serialisable."""
        return asdict(self)

    def summary(self) -> dict:
        """Key metrics, unformatted."""
        entry = self.entry_valuation
        ex    = self.exit_analysis
        return {
            "entry_ev":          entry.enterprise_value,
            "entry_multiple":    entry.entry_multiple,
            "sponsor_equity":    entry.sponsor_equity,
            "exit_ev":           ex.exit_enterprise_value,
            "exit_multiple":     ex.exit_multiple,
            "exit_ebitda":       ex.exit_ebitda,
            "exit_net_debt":     ex.exit_net_debt,
            "exit_equity":       ex.exit_equity_value,
            "total_return":      ex.total_return,
            "moic":              ex.moic,
            "irr":               ex.irr,
            "cash_flow_irr":     self.cash_flow_irr,
            "total_dividends":   sum(p.dividend_payment for p in self.projections),
            "hold_years":        ex.holding_period,
        }


def run_model(
    snapshot: CompanySnapshot,
    assumptions: Optional[AssumptionSet] = None,
) -> LBOResult:
    """
    Run the full LBO model.

    Raises InvalidAssumptionsError for a structurally invalid assumption
    set; every other degenerate case is reported on the result as None.
    """
    a = assumptions or AssumptionSet()
    a.validate()

    # ---- ENTRY ----
    entry = build_entry_valuation(snapshot, a)
    if entry.is_degenerate:
        logger.warning(
            "sponsor equity is %.1f (debt capacity covers uses); returns not meaningful",
            entry.sponsor_equity,
        )
    if entry.implied_share_price is None:
        logger.warning("shares outstanding is %s; implied share price not meaningful",
                       snapshot.shares_outstanding)

    # ---- PROJECTION ----
    projections = project_years(snapshot, entry, a)
    final = projections[-1]

    # ---- EXIT & RETURNS ----
    exit_ = analyze_exit(final, entry.sponsor_equity, a.exit_multiple, a.holding_period)
    schedule = build_cash_flow_schedule(entry.sponsor_equity, projections,
                                        exit_.exit_equity_value)
    bridge = build_returns_bridge(snapshot, entry, exit_, a)

    # ---- SENSITIVITY ----
    grid = build_sensitivity_grid(snapshot, a, final)

    result = LBOResult(
        entry_valuation=entry,
        projections=projections,
        exit_analysis=exit_,
        cash_flow_schedule=schedule,
        cash_flow_irr=schedule_irr(schedule),
        returns_bridge=bridge,
        sensitivity=grid,
    )
    logger.debug("lbo run %s: moic=%s irr=%s cash_flow_irr=%s",
                 snapshot.ticker or "-", exit_.moic, exit_.irr, result.cash_flow_irr)
    return result
