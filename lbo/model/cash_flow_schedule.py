"""
cash_flow_schedule.py
---------------------
Equity investor cash flows, Year 0 through Year N.

  Year 0       : -Sponsor Equity
  Year 1..N-1  : dividend paid that year
  Year N       : final dividend + exit equity proceeds

Cumulative is a running sum, so the Year N cumulative equals
-Sponsor Equity + all dividends + exit proceeds.

``schedule_irr`` solves for the rate that zeroes the schedule's NPV.
It is a separate figure from ``ExitAnalysis.irr`` (closed form, no
dividends) and never replaces it.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd
from scipy.optimize import brentq

from lbo.model.projection import YearProjection


@dataclass(frozen=True)
class CashFlowEntry:
    year: int
    description: str
    cash_flow: float
    cumulative_cash_flow: float


def build_cash_flow_schedule(
    sponsor_equity: float,
    projections: Sequence[YearProjection],
    exit_equity_value: float,
) -> tuple[CashFlowEntry, ...]:
    n = len(projections)
    cumulative = -sponsor_equity
    schedule = [CashFlowEntry(0, "Initial Investment", -sponsor_equity, cumulative)]

    for proj in projections[:-1]:
        dividend = proj.dividend_payment
        cumulative += dividend
        schedule.append(CashFlowEntry(
            year=proj.year,
            description="Dividend Payment" if dividend > 0 else "No Dividend",
            cash_flow=dividend,
            cumulative_cash_flow=cumulative,
        ))

    if n:
        exit_cf = exit_equity_value + projections[-1].dividend_payment
        cumulative += exit_cf
        schedule.append(CashFlowEntry(
            year=projections[-1].year,
            description="Exit Proceeds + Final Dividend",
            cash_flow=exit_cf,
            cumulative_cash_flow=cumulative,
        ))
    return tuple(schedule)


def schedule_irr(schedule: Sequence[CashFlowEntry]) -> Optional[float]:
    """IRR of the schedule's cash flows (index = year), or None if no root."""
    cash_flows = np.array([e.cash_flow for e in schedule], dtype=float)
    if len(cash_flows) < 2:
        return None
    periods = np.arange(len(cash_flows))

    def npv(r):
        return float(np.sum(cash_flows / (1 + r) ** periods))

    try:
        return float(brentq(npv, -0.999, 100.0, xtol=1e-10, maxiter=500))
    except (ValueError, RuntimeError):
        # no sign change within bounds, or no convergence
        return None


def cash_flow_schedule_df(schedule: Sequence[CashFlowEntry]) -> pd.DataFrame:
    return pd.DataFrame([
        {
            "Year":                  e.year,
            "Description":           e.description,
            "Cash Flow ($M)":        e.cash_flow,
            "Cumulative ($M)":       e.cumulative_cash_flow,
        }
        for e in schedule
    ])
